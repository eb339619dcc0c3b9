"""Parsers for the JSON bodies returned by the SchoolSoft API.

SchoolSoft encodes timestamps as ``"YYYY-MM-DD HH:MM:SS"`` with an optional
fraction of one to three digits (``"2024-02-12 17:22:23.714"``), and dates as
``"YYYY-MM-DD"``.
"""

import json
import re
from datetime import date, datetime
from typing import Any

from .errors import (
    LunchMenuError,
    ParseError,
    SchoolListingError,
    TokenParseError,
    UserParseError,
)
from .models import (
    LoginMethods,
    Lunch,
    LunchMenu,
    Org,
    SchoolListing,
    Token,
    User,
    UserType,
)

_TIMESTAMP_PATTERN = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2}) (\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,3}))?$"
)


def parse_timestamp(raw: str) -> datetime:
    """Parse a SchoolSoft timestamp.

    Args:
        raw: Timestamp like ``"1970-01-01 08:20:00.0"``.

    Returns:
        Naive datetime. The fraction is read as decimal seconds, so ``.15``
        is 150 milliseconds.

    Raises:
        ValueError: If the string does not match the format.
    """
    match = _TIMESTAMP_PATTERN.match(raw) if isinstance(raw, str) else None
    if not match:
        raise ValueError(f"Cannot parse timestamp: {raw!r}")

    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    fraction = match.group(7) or ""
    microsecond = int(fraction.ljust(6, "0")) if fraction else 0
    return datetime(year, month, day, hour, minute, second, microsecond)


def parse_date(raw: str) -> date:
    """Parse a ``YYYY-MM-DD`` date."""
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValueError(f"Cannot parse date: {raw!r}") from None


def load_json(data: str, error: type[ParseError]) -> Any:
    """Decode a response body, reporting failures as ``error``."""
    try:
        return json.loads(data)
    except json.JSONDecodeError as e:
        raise error(f"Error when parsing json: {e}") from e


def parse_user(data: str) -> User:
    """Parse the body of ``/rest/app/login``.

    Raises:
        UserParseError: If a field is missing or the user type is unknown.
    """
    raw = load_json(data, UserParseError)
    try:
        orgs = [
            Org(
                id=int(raw_org["orgId"]),
                name=raw_org["name"],
                blogger=bool(raw_org["blogger"]),
                school_type=int(raw_org["schoolType"]),
                leisure_school=int(raw_org["leisureSchool"]),
                school_class=raw_org["class"],
                token_login=raw_org["tokenLogin"],
            )
            for raw_org in raw["orgs"]
        ]
        user_type = UserType(raw["type"])
        return User(
            id=int(raw["userId"]),
            name=raw["name"],
            user_type=user_type,
            app_key=raw["appKey"],
            orgs=orgs,
            picture_url=raw.get("pictureUrl", ""),
            is_of_age=bool(raw.get("isOfAge", False)),
        )
    except KeyError as e:
        raise UserParseError(f"Login response is missing field {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise UserParseError(f"Invalid login response: {e}") from e


def parse_token(data: str) -> Token:
    """Parse the body of ``/rest/app/token``.

    Raises:
        TokenParseError: If the token or its expiry date is missing or invalid.
    """
    raw = load_json(data, TokenParseError)
    try:
        return Token(token=raw["token"], expires=parse_timestamp(raw["expiryDate"]))
    except KeyError as e:
        raise TokenParseError(f"Token response is missing field {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise TokenParseError(f"Invalid token response: {e}") from e


def _parse_login_methods(raw: str) -> list[int]:
    methods = []
    for method in raw.split(","):
        method = method.strip()
        if not method:
            continue
        try:
            methods.append(int(method))
        except ValueError:
            raise SchoolListingError(f"Invalid login method {method!r} in {raw!r}") from None
    return methods


def _url_name(url: str) -> str:
    """Last path segment of a school url, e.g. ``"mock"`` for ``.../mock/``."""
    segments = [segment for segment in url.split("/") if segment]
    if len(segments) < 3 or "://" not in url:
        raise SchoolListingError(f"The url is invalid: {url!r}")
    return segments[-1]


def parse_school_listing(raw: dict[str, Any]) -> SchoolListing:
    try:
        return SchoolListing(
            name=raw["name"],
            url=raw["url"],
            url_name=_url_name(raw["url"]),
            login_methods=LoginMethods(
                student=_parse_login_methods(raw["studentLoginMethods"]),
                teacher=_parse_login_methods(raw["teacherLoginMethods"]),
                parent=_parse_login_methods(raw["parentLoginMethods"]),
            ),
        )
    except KeyError as e:
        raise SchoolListingError(f"School listing is missing field {e.args[0]!r}") from e
    except (TypeError, AttributeError) as e:
        raise SchoolListingError(f"Invalid school listing: {e}") from e


def parse_school_listings(data: str) -> list[SchoolListing]:
    """Parse the body of ``/rest/app/schoollist/prod``.

    Raises:
        SchoolListingError: On the first listing that cannot be parsed.
    """
    raw = load_json(data, SchoolListingError)
    if not isinstance(raw, list):
        raise SchoolListingError("Expected a list of schools")
    return [parse_school_listing(raw_school) for raw_school in raw]


def parse_lunch_menu(data: str) -> LunchMenu:
    """Parse the body of ``/api/lunchmenus/<user type>/<org>``.

    The API answers with a list; only the first menu is used.

    Raises:
        LunchMenuError: If there is no menu or a date cannot be parsed.
    """
    raw = load_json(data, LunchMenuError)
    if not isinstance(raw, list):
        raise LunchMenuError("Expected a list of lunch menus")
    if not raw:
        raise LunchMenuError("No lunch menu available")

    menu = raw[0]
    try:
        raw_dates = menu["dates"]
        if len(raw_dates) != 7:
            raise LunchMenuError(f"Expected 7 dates, got {len(raw_dates)}")
        dates = []
        for raw_date in raw_dates:
            try:
                dates.append(parse_date(raw_date))
            except ValueError as e:
                raise LunchMenuError(f"Error when parsing date {raw_date!r}: {e}") from e

        try:
            created_at = parse_timestamp(menu["creDate"])
        except ValueError as e:
            raise LunchMenuError(f"Error when parsing date {menu['creDate']!r}: {e}") from e

        return LunchMenu(
            week=int(menu["week"]),
            created_at=created_at,
            category=menu["dishCategoryName"],
            monday=Lunch(dates[0], menu["monday"]),
            tuesday=Lunch(dates[1], menu["tuesday"]),
            wednesday=Lunch(dates[2], menu["wednesday"]),
            thursday=Lunch(dates[3], menu["thursday"]),
            friday=Lunch(dates[4], menu["friday"]),
        )
    except KeyError as e:
        raise LunchMenuError(f"Lunch menu is missing field {e.args[0]!r}") from e
