"""
전역 예외 핸들러

모든 오류 응답을 core.exceptions.error_body 포맷으로 통일합니다.
4xx 는 warning, 5xx 는 스택 트레이스와 함께 error 로 남깁니다.
"""

import logging
import traceback

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from saveit.core.exceptions import BaseAPIException, InternalServerError, error_body

logger = logging.getLogger("saveit.errors")


def _where(request: Request) -> str:
    request_id = getattr(request.state, "request_id", "-")
    return f"[{request_id}] {request.method} {request.url.path}"


def _log(request: Request, status_code: int, kind: str, message, exc: Exception = None) -> None:
    line = f"{_where(request)} -> {status_code} {kind}: {message}"
    if status_code < 500:
        logger.warning(line)
        return
    if exc is not None:
        line += "\n" + "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    logger.error(line)


async def handle_base_api_exception(request: Request, exc: BaseAPIException):
    _log(request, exc.status_code, exc.error_code, exc.message, exc)
    return JSONResponse(
        status_code=exc.status_code, content=exc.detail, headers=exc.headers
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    _log(request, exc.status_code, "HTTP_ERROR", exc.detail, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # ctx 에 ValueError 인스턴스가 들어올 수 있어 문자열로 변환
        error = {k: v for k, v in error.items() if k != "input"}
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)

    _log(request, 422, "VALIDATION_001", errors)
    return JSONResponse(
        status_code=422,
        content=error_body("VALIDATION_001", "Validation failed", {"errors": errors}),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    internal = InternalServerError()
    _log(request, internal.status_code, type(exc).__name__, exc, exc)
    return JSONResponse(status_code=internal.status_code, content=internal.detail)
