"""Application error types.

Every error raised out of the domain layer is an ``AppError`` so the API layer
can render it as an ``ApiFailure`` envelope with a stable ``errcode``.
"""

import inspect
from enum import Enum, IntEnum
from uuid import uuid4


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_SESSION_NOT_FOUND = "E_SESSION_NOT_FOUND"
    E_INVALID_TRANSITION = "E_INVALID_TRANSITION"
    E_SESSION_FORBIDDEN = "E_SESSION_FORBIDDEN"
    E_WEBHOOK_INVALID_SIGNATURE = "E_WEBHOOK_INVALID_SIGNATURE"
    E_STORE_UNAVAILABLE = "E_STORE_UNAVAILABLE"

    def __str__(self) -> str:
        return self.value


class HttpStatusCode(IntEnum):
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class AppError(Exception):
    """Base error carrying an API error code, message and HTTP status."""

    def __init__(
        self,
        errcode: AppErrorCode | str = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
        status_code: int = HttpStatusCode.INTERNAL_SERVER_ERROR,
    ):
        super().__init__(errmesg)
        self.errcode = str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]
        self.caller_info = _caller_info()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errcode={self.errcode!r}, errmesg={self.errmesg!r})"


class ValidationError(AppError):
    """Bad input, rejected synchronously and never retried."""

    def __init__(self, errmesg: str):
        super().__init__(
            errcode=AppErrorCode.E_INVALID_REQUEST,
            errmesg=errmesg,
            status_code=HttpStatusCode.BAD_REQUEST,
        )


class NotFoundError(AppError):
    def __init__(self, errmesg: str):
        super().__init__(
            errcode=AppErrorCode.E_SESSION_NOT_FOUND,
            errmesg=errmesg,
            status_code=HttpStatusCode.NOT_FOUND,
        )


class InvalidTransitionError(AppError):
    """Status change not allowed from the current state (or on an expired session)."""

    def __init__(self, errmesg: str):
        super().__init__(
            errcode=AppErrorCode.E_INVALID_TRANSITION,
            errmesg=errmesg,
            status_code=HttpStatusCode.CONFLICT,
        )


class ForbiddenError(AppError):
    def __init__(self, errmesg: str, errcode: AppErrorCode = AppErrorCode.E_SESSION_FORBIDDEN):
        super().__init__(
            errcode=errcode,
            errmesg=errmesg,
            status_code=HttpStatusCode.FORBIDDEN,
        )


class StoreUnavailableError(AppError):
    """The backing store could not serve the request."""

    def __init__(self, errmesg: str = "Session store unavailable"):
        super().__init__(
            errcode=AppErrorCode.E_STORE_UNAVAILABLE,
            errmesg=errmesg,
            status_code=HttpStatusCode.SERVICE_UNAVAILABLE,
        )


def frame_label(frame_info: inspect.FrameInfo) -> str:
    """`module:function:line` for a stack frame."""
    module = inspect.getmodule(frame_info.frame)
    module_name = getattr(module, "__name__", None) or frame_info.filename
    return f"{module_name}:{frame_info.function}:{frame_info.lineno}"


def _caller_info() -> str:
    # First frame outside this module is the raise site
    for frame_info in inspect.stack()[2:]:
        if frame_info.filename != __file__:
            return frame_label(frame_info)
    return "unknown"
