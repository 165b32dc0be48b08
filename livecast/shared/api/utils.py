import inspect
import sys
import traceback
from functools import lru_cache
from os import environ
from typing import Any, Literal
from uuid import uuid4

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from livecast.utils.app_errors import AppErrorCode, HttpStatusCode, frame_label

E_INTERNAL = AppErrorCode.E_INTERNAL_ERROR.value
E_INVALID_PARAMS = AppErrorCode.E_INVALID_PARAMS.value

DEFAULT_ERRMESG = "We are sorry, an error occurred."


def format_error(ex: BaseException) -> str:
    return "".join(traceback.format_exception(ex))


# ==================== ENVELOPE ====================


class ApiResponse(BaseModel):
    version: str | None = Field(default_factory=lambda: environ.get("BUILD_COMMIT", "dev"))


class ApiSuccess(ApiResponse):
    success: Literal[True] = True
    results: Any = "OK"


class ApiFailure(ApiResponse):
    success: Literal[False] = False
    errcode: str = E_INTERNAL
    erresid: str = Field(default_factory=lambda: uuid4().hex[:10])
    errmesg: str = DEFAULT_ERRMESG


def api_failure(errcode: str | None = None, errmesg: Exception | str | None = None, *, trace: Any = None):
    """Build an ApiFailure and log it against the calling frame."""
    if isinstance(errmesg, Exception):
        errmesg = format_error(errmesg)

    failure = ApiFailure(errcode=errcode or E_INTERNAL, errmesg=errmesg or DEFAULT_ERRMESG)

    logger.warning(
        "{} {}\n{} caller={} trace={}",
        failure.errcode,
        failure.erresid,
        failure.errmesg,
        frame_label(inspect.stack()[1]),
        trace,
    )

    return failure


def make_response(results, *, status_code: int | None = None):
    """Render an envelope (or a raw exception) as an ORJSONResponse.

    Failures default to 500 for internal errors and 400 otherwise.
    """
    if isinstance(results, Exception):
        results = api_failure(errmesg=results)
        status_code = status_code or HttpStatusCode.INTERNAL_SERVER_ERROR
    elif isinstance(results, ApiFailure) and status_code is None:
        internal = results.errcode == E_INTERNAL
        status_code = HttpStatusCode.INTERNAL_SERVER_ERROR if internal else HttpStatusCode.BAD_REQUEST

    content = results.model_dump() if isinstance(results, BaseModel) else results
    return ORJSONResponse(status_code=int(status_code or HttpStatusCode.OK), content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Invalid request {} {}: {}", request.method, request.url.path, errors)

    failure = api_failure(E_INVALID_PARAMS, errmesg=str(errors))
    return make_response(failure, status_code=HttpStatusCode.UNPROCESSABLE_ENTITY)


# ==================== LOGGING ====================


@lru_cache
def worker_label() -> str:
    """`<worker>:<commit>` prefix for every log line."""
    worker_name = environ.get("WORKER_NAME", "livecast")
    parts = environ.get("BUILD_COMMIT", "").split("-")
    commit_id = parts[1] if len(parts) > 1 else "dev"
    return f"{worker_name}:{commit_id}"


def init_logger():
    from livecast.app_config import get_app_environ_config

    debug = get_app_environ_config().DEBUG
    fields = ["{time:MM-DD HH:mm:ss.SSS}", "{level: <8}", "{name}:{function}:{line}", "{message}"]
    if debug:
        fields = [
            "<green>{time:MM-DD HH:mm:ss.SSS}</green>",
            "<level>{level: <8}</level>",
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
            "<level>{message}</level>",
        ]
        prefix = f"<yellow>{worker_label()}</yellow>"
    else:
        prefix = worker_label()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format=" | ".join([prefix, *fields]))
