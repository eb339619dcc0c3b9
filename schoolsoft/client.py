"""HTTP client for the SchoolSoft mobile app API."""

import logging
from datetime import date
from typing import Any, Optional

import requests

from .clock import Clock, SystemClock
from .errors import ServerError, TransportError, UnauthorizedError, UnexpectedStatusError
from .models import LunchMenu, SchoolListing, Token, User
from .parsing import parse_lunch_menu, parse_school_listings, parse_token, parse_user
from .schedule import Schedule

logger = logging.getLogger(__name__)

# Login type 4 is the one the mobile app uses
APP_LOGIN_TYPE = "4"


def check_status(response: requests.Response) -> None:
    """Map a non-2xx status code to the matching exception."""
    code = response.status_code
    if 200 <= code < 300:
        return
    if code == 401:
        raise UnauthorizedError(response.url)
    if code == 500:
        raise ServerError(response.url)
    raise UnexpectedStatusError(code, response.url)


def send(
    http: requests.Session,
    method: str,
    url: str,
    timeout: float,
    **kwargs: Any
) -> str:
    """Send a request and return the response body.

    Raises:
        TransportError: If the request fails before a status is received.
        UnexpectedStatusError: If the status code is not 2xx.
    """
    logger.debug("%s %s", method, url)
    try:
        response = http.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"Error when sending request to {url}: {e}") from e

    check_status(response)
    return response.text


class UserSession:
    """API access on behalf of a logged in user.

    Holds the app key received at login and the current session token, which
    is refreshed whenever it is missing or about to expire.
    """

    def __init__(
        self,
        user: User,
        school_url: str,
        http: requests.Session,
        device_id: str = "",
        clock: Optional[Clock] = None,
        timeout: float = 30
    ) -> None:
        self.user = user
        self.school_url = school_url.rstrip("/")
        self.token: Optional[Token] = None
        self._http = http
        self._device_id = device_id
        self._clock = clock or SystemClock()
        self._timeout = timeout

    def _rest(self, name: str) -> str:
        return f"{self.school_url}/rest/app/{name}"

    def _api(self, path: str) -> str:
        return f"{self.school_url}/api/{path}/{self.user.user_type.path}/{self.user.org.id}"

    def get_token(self) -> str:
        """Request a new token with the app key and remember it.

        Returns:
            The token string.
        """
        body = send(
            self._http,
            "POST",
            self._rest("token"),
            self._timeout,
            headers={"appKey": self.user.app_key, "deviceid": self._device_id},
        )
        self.token = parse_token(body)
        logger.info("Received new token, expires %s", self.token.expires)
        return self.token.token

    def smart_token(self) -> str:
        """Return the saved token if it is safe to use, otherwise request a new one."""
        if self.token is not None and self.token.is_safe(self._clock.now()):
            return self.token.token
        return self.get_token()

    def _get_authorized(self, url: str) -> str:
        token = self.smart_token()
        return send(self._http, "GET", url, self._timeout, headers={"token": token})

    def get_schedule(self, anchor: Optional[date] = None, partial: bool = False) -> Schedule:
        """Fetch the user's lessons and build the school year schedule.

        Args:
            anchor: Reference date of the schedule. Defaults to the clock's date,
                which for ``SystemClock`` is the UTC date, not the local one.
            partial: Skip occasions that cannot be parsed instead of failing.

        Returns:
            Populated schedule.
        """
        body = self._get_authorized(self._api("lessons"))
        anchor = anchor or self._clock.now().date()
        schedule = Schedule.from_json(body, anchor, partial=partial)
        logger.info(
            "Schedule anchored at %s: %d weeks, %d skipped placements, %d bad occasions",
            anchor, len(schedule), len(schedule.skipped), len(schedule.errors)
        )
        return schedule

    def get_lunch(self) -> LunchMenu:
        """Fetch this week's lunch menu."""
        return parse_lunch_menu(self._get_authorized(self._api("lunchmenus")))


class Client:
    """Entry point of the API: school directory and login.

    Args:
        base_url: Url put before all requests. Can be changed for testing.
        device_id: Device id sent when requesting tokens. SchoolSoft accepts
            an empty id.
        session: HTTP session to use; a new one is created if omitted.
        clock: Source of the current time for token expiry checks.
        timeout: Timeout in seconds for every request.
    """

    DEFAULT_BASE_URL = "https://sms.schoolsoft.se/"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        device_id: str = "",
        session: Optional[requests.Session] = None,
        clock: Optional[Clock] = None,
        timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self._base_url = base_url
        self._device_id = device_id
        self._http = session or requests.Session()
        self._clock = clock or SystemClock()
        self._timeout = timeout
        self.user: Optional[UserSession] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def device_id(self) -> str:
        return self._device_id

    def _url(self, path: str) -> str:
        return f"{self._base_url.rstrip('/')}/{path}"

    def schools(self) -> list[SchoolListing]:
        """List every school in the SchoolSoft directory."""
        body = send(self._http, "GET", self._url("rest/app/schoollist/prod"), self._timeout)
        schools = parse_school_listings(body)
        logger.info("Found %d schools", len(schools))
        return schools

    def login(self, username: str, password: str, school: str) -> UserSession:
        """Log in to ``school`` and keep the session on ``self.user``.

        Args:
            username: Account name.
            password: Account password.
            school: The school's url name, e.g. ``"carlwahren"``.

        Returns:
            Session for the logged in user.

        Raises:
            UnauthorizedError: If the credentials are rejected.
        """
        school_url = self._url(school)
        body = send(
            self._http,
            "POST",
            f"{school_url}/rest/app/login",
            self._timeout,
            data={
                "identification": username,
                "verification": password,
                "logintype": APP_LOGIN_TYPE,
                "usertype": "1",
            },
        )
        user = parse_user(body)
        logger.info("Logged in as %s (%s)", user.name, user.user_type.path)

        self.user = UserSession(
            user,
            school_url,
            self._http,
            device_id=self._device_id,
            clock=self._clock,
            timeout=self._timeout,
        )
        return self.user
