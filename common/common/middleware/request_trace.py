import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


REQUEST_ID_HEADER = "X-Request-Id"
SPAN_ID_HEADER = "X-Span-Id"

ErrorResponder = Callable[[Request, Exception], Awaitable[Response]]

# 헬스체크는 주기적으로 호출되므로 로그에서 제외한다.
IGNORED_LOG_PATH_PREFIXES: tuple[str, ...] = ("/health",)


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """Request/Span ID 를 전파하고 요청 단위 로그를 남기는 미들웨어.

    - X-Request-Id 가 없으면 새로 만들고, X-Span-Id 가 없으면 "0" 을 쓴다.
    - request.state 에 request_id, span_id 를 저장하고 응답 헤더에도 같은 값을 싣는다.
    - 인증 의존성이 request.state.identity 를 채웠다면 user_id 를 로그에 포함한다.
    - 인증 토큰 헤더나 요청 바디는 로그에 남기지 않는다.
    - error_response 가 주어지면 처리되지 않은 예외도 그 응답으로 바꿔 추적 헤더를 싣는다.
    """

    def __init__(  # type: ignore[override]
        self,
        app,
        logger: logging.Logger | None = None,
        error_response: ErrorResponder | None = None,
    ) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("request_trace")
        self._error_response = error_response

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        span_id = request.headers.get(SPAN_ID_HEADER) or "0"

        request.state.request_id = request_id
        request.state.span_id = span_id

        should_log = not request.url.path.startswith(IGNORED_LOG_PATH_PREFIXES)
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception as exc:
            if should_log:
                self._logger.exception(
                    "request failed",
                    extra=self._build_log_extra(
                        request, duration=time.monotonic() - start
                    ),
                )
            if self._error_response is None:
                raise
            response = await self._error_response(request, exc)

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        response.headers.setdefault(SPAN_ID_HEADER, span_id)

        if should_log:
            self._logger.info(
                "completed request",
                extra=self._build_log_extra(
                    request,
                    status=response.status_code,
                    duration=time.monotonic() - start,
                ),
            )

        return response

    def _build_log_extra(
        self,
        request: Request,
        status: int | None = None,
        duration: float | None = None,
    ) -> dict[str, object]:
        extra: dict[str, object] = {
            "request_id": request.state.request_id,
            "span_id": request.state.span_id,
            "method": request.method,
            "path": request.url.path,
        }

        identity = getattr(request.state, "identity", None)
        if identity is not None:
            extra["user_id"] = identity.id

        if request.query_params:
            extra["query_params"] = dict(request.query_params)

        if status is not None:
            extra["status"] = status

        if duration is not None:
            extra["duration"] = f"{duration * 1000:.3f}ms"

        return extra
