import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger("saveit.request")

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청/응답 로그 - 요청마다 request id 를 부여하고 응답 헤더로 돌려줍니다"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"

        logger.info(f"[{request_id}] --> {route}")
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[{request_id}] !!! {route} raised")
            raise

        elapsed = (time.perf_counter() - started) * 1000
        line = f"[{request_id}] <-- {route} {response.status_code} ({elapsed:.1f}ms)"
        if response.status_code >= 500:
            logger.error(line)
        elif response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
