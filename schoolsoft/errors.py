"""Exceptions raised by the SchoolSoft client."""

from typing import Any, Optional


class SchoolSoftError(Exception):
    """Base class for every error raised by this package."""


class RequestError(SchoolSoftError):
    """A request to the API failed."""


class TransportError(RequestError):
    """The request could not be sent or the response could not be read."""


class UnexpectedStatusError(RequestError):
    """The API answered with a status code that is not handled."""

    def __init__(self, status_code: int, url: str = "", message: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(
            message or f"Response returned an unexpected status code: {status_code}"
        )


class UnauthorizedError(UnexpectedStatusError):
    """The credentials, app key or token were rejected (HTTP 401)."""

    def __init__(self, url: str = "") -> None:
        super().__init__(401, url, "Unauthorized")


class ServerError(UnexpectedStatusError):
    """SchoolSoft reported an internal server error (HTTP 500)."""

    def __init__(self, url: str = "") -> None:
        super().__init__(500, url, "Internal server error")


class ParseError(SchoolSoftError, ValueError):
    """A response body could not be turned into a typed value."""


class WeekRangeError(ParseError):
    """A week range string such as ``"34-43, 45"`` is malformed."""

    def __init__(self, text: str, token: str) -> None:
        self.text = text
        self.token = token
        super().__init__(f"Invalid week range token {token!r} in {text!r}")


class OccasionError(ParseError):
    """A single occasion record could not be resolved.

    Carries the wire field and raw value that failed, plus the occasion id
    when the record had one.
    """

    def __init__(
        self,
        field: str,
        raw: Any,
        reason: str,
        occasion_id: Optional[int] = None
    ) -> None:
        self.field = field
        self.raw = raw
        self.reason = reason
        self.occasion_id = occasion_id
        where = f"occasion {occasion_id}" if occasion_id is not None else "occasion"
        super().__init__(f"Error in {where}, field {field!r} ({raw!r}): {reason}")


class ScheduleParseError(ParseError):
    """The lessons response is not a JSON array of occasion records."""


class UserParseError(ParseError):
    """The login response could not be parsed."""


class TokenParseError(ParseError):
    """The token response could not be parsed."""


class SchoolListingError(ParseError):
    """The school directory could not be parsed."""


class LunchMenuError(ParseError):
    """The lunch menu response could not be parsed."""
