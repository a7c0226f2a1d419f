"""
API 예외 계층

모든 예외는 FastAPI HTTPException 을 상속하고 detail 에 공통 응답 포맷을 담습니다:

    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}

서비스는 거래 실패를 TransactionResult 로 반환하고, 라우터가 이 예외로 변환합니다.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


class BaseAPIException(HTTPException):
    """Base exception for API errors"""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "INTERNAL_001"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code or self.default_code
        self.message = message or self.default_message
        self.details = details or {}

        super().__init__(
            status_code=self.http_status,
            detail=error_body(self.error_code, self.message, self.details),
            headers=headers,
        )

    def __str__(self) -> str:
        return self.message


class AuthenticationError(BaseAPIException):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTH_001"
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            message, details, headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationError(BaseAPIException):
    """트래커 멤버가 아니거나 owner 전용 작업을 시도한 경우"""

    http_status = status.HTTP_403_FORBIDDEN
    default_code = "PERMISSION_DENIED"
    default_message = "Access forbidden"


class ValidationError(BaseAPIException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "VALIDATION_001"
    default_message = "Validation failed"


class NotFoundError(BaseAPIException):
    http_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND_001"
    default_message = "Resource not found"


class InternalServerError(BaseAPIException):
    pass


class InsufficientBalanceError(BaseAPIException):
    """출금액이 잔액보다 큰 경우"""

    http_status = status.HTTP_400_BAD_REQUEST
    default_code = "INSUFFICIENT_FUNDS"
    default_message = "Insufficient funds for this withdrawal."


class TrackerNotFoundError(NotFoundError):
    default_code = "TRACKER_NOT_FOUND"
    default_message = "Tracker not found."

    def __init__(self, tracker_id: Any, message: Optional[str] = None):
        super().__init__(message, details={"tracker_id": tracker_id})
