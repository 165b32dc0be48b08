import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from livecast.api.errors import app_error_handler
from livecast.api.v1.routers.session import router as session_router
from livecast.api.webhooks.ingest import router as ingest_webhook_router
from livecast.app_config import get_app_environ_config
from livecast.domain.live.session.session_domain import get_session_service
from livecast.shared.api.health import router as health_router
from livecast.shared.api.utils import (
    api_failure,
    init_logger,
    make_response,
    validation_exception_handler,
)
from livecast.utils.app_errors import AppError, AppErrorCode, HttpStatusCode
from livecast.workers.expiry_sweeper import ExpirySweeper


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    """Access log with a short request id; unhandled errors become a 500 envelope."""

    async def dispatch(self, request: Request, call_next):  # type: ignore
        request_id = uuid.uuid4().hex[:8]
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()

        logger.info("[{}] {}", request_id, route)

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                "[{}] Unhandled {} in {} after {:.2f}ms: {}",
                request_id,
                type(exc).__name__,
                route,
                elapsed_ms,
                exc,
            )
            failure = api_failure(
                errcode=AppErrorCode.E_INTERNAL_ERROR.value,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return make_response(failure, status_code=HttpStatusCode.INTERNAL_SERVER_ERROR)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("[{}] {} - Status: {} - Duration: {:.2f}ms", request_id, route, response.status_code, elapsed_ms)
        return response


@asynccontextmanager
async def lifespan(server: FastAPI):
    init_logger()
    logger.info("Livecast starting")

    # Expiry and stalled-ingest jobs share the request handlers' service
    server.state.expiry_sweeper = ExpirySweeper(get_session_service())
    server.state.expiry_sweeper.start()

    try:
        yield
    finally:
        logger.info("Livecast shutting down")
        await server.state.expiry_sweeper.stop()


settings = get_app_environ_config()

app = FastAPI(
    version="1.0",
    title="Livecast API",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(HTTPLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=settings.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore
app.add_exception_handler(AppError, app_error_handler)  # type: ignore

app.include_router(health_router)
app.include_router(session_router, prefix="/api/v1")
app.include_router(ingest_webhook_router)


def build_granian_kwargs(config=settings) -> dict:
    return {
        "interface": "asgi",
        "address": config.API_HOST,
        "port": config.API_PORT,
        "workers": config.API_WORKERS,
        "reload": config.DEBUG,
    }


if __name__ == "__main__":
    Granian("livecast.main:app", **build_granian_kwargs()).serve()
