"""Shared constants and application error values."""

from __future__ import annotations

from http import HTTPStatus

IOS_AGENT = "ios"
WEB_AGENT = "website"

GMAIL_CLIENT = "gmail"

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

LABEL_INBOX = "INBOX"
LABEL_SENT = "SENT"
LABEL_UNREAD = "UNREAD"
LABEL_SNOOZED = "SNOOZED"
LABEL_ARCHIVE = "ARCHIVE"
LABEL_AWAY_ARCHIVE = "AwayMailArchive"

DEFAULT_LIMIT = 100
MINIMUM_LIMIT = 10

USER_PER_DAY_API_LIMIT = 86400

LABEL_TYPE_USER = "user"
LABEL_HIDE_VISIBILITY = "hide"

# Cache key templates, filled in with the ``%`` operator.
USER_SESSION = "user_session#%s#%s"
USER_HISTORY = "user_history#%s"
USER_WATCH = "user_watch#%s"

BREAKTHROUGH = "breakthrough%s#%s"
LIST_BREAKTHROUGH = "list_breakthrough%s"

AWAY_MODE_START = "away_mode_start#%s"

USER_TOKEN_DEV = "user_token_dev#%s"

USER_ARCHIVE_SESSION = "user_archive_session#%s"


class ApplicationError(Exception):
    """An error carrying an HTTP status code and a message."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ApplicationError(code={self.code!r}, message={self.message!r})"


def new_error(code: int, message: str) -> ApplicationError:
    """Build an :class:`ApplicationError`."""
    return ApplicationError(int(code), message)


ERROR_INVALID_REQUEST = new_error(HTTPStatus.BAD_REQUEST, "invalid request")
ERROR_DATABASE = new_error(HTTPStatus.INTERNAL_SERVER_ERROR, "error database")
ERROR_DATA_NOT_FOUND = new_error(HTTPStatus.NOT_FOUND, "data not found")
ERROR_GENERAL = new_error(HTTPStatus.NOT_IMPLEMENTED, "general service error")
ERROR_NOT_AUTHORIZED = new_error(HTTPStatus.UNAUTHORIZED, "user not authorized")
ERROR_EMAIL_NOT_MATCH = new_error(HTTPStatus.BAD_REQUEST, "email not match")

ERROR_DOUBLE_PUSH_NOTIFICATION = new_error(
    HTTPStatus.BAD_REQUEST, "double push notification"
)
ERROR_CLIENT_NOT_SUPPORTED = new_error(
    HTTPStatus.UNAUTHORIZED, "client not yet configured or present"
)