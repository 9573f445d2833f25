from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import close_client

from .api.health import router as health_router
from .api.routes import api_router
from .auth import TokenVerifier
from .config import AppConfig, load_config
from .exceptions import PostServiceError, ServerError

logger = logging.getLogger(__name__)

# 요청 바디 필드별 검증 실패 메시지
FIELD_ERROR_MESSAGES = {"text": "Text is required"}


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    try:
        yield
    finally:
        close_client()


async def handle_post_service_error(request: Request, exc: PostServiceError):
    if isinstance(exc, ServerError):
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"msg": exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        param = str(loc[-1]) if loc else ""
        errors.append(
            {
                "msg": FIELD_ERROR_MESSAGES.get(param, error.get("msg", "invalid value")),
                "param": param,
                "location": str(loc[0]) if loc else "",
            }
        )
    return JSONResponse(status_code=400, content={"errors": errors})


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("unhandled error: %s", exc, exc_info=exc)
    return PlainTextResponse(ServerError.default_message, status_code=500)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """post-service FastAPI 앱을 만든다.

    설정은 여기서 한 번만 로드하고, TokenVerifier 와 함께 app.state 에 보관한다.
    """

    setup_logger(name="post-service")
    if config is None:
        config = load_config()

    app = FastAPI(
        title="Social Post Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.token_verifier = TokenVerifier(config.auth)

    app.add_middleware(RequestTraceMiddleware, error_response=handle_unexpected_error)

    app.add_exception_handler(PostServiceError, handle_post_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix=config.api.prefix)

    return app


def main() -> None:
    """명령행에서 실행할 수 있도록 uvicorn 런처를 제공한다."""

    import uvicorn

    port = int(os.getenv("POST_SERVICE_PORT", "5000"))
    uvicorn.run(
        "post_service.app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
