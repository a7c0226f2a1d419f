"""
인증

토큰은 외부 인증 제공자가 발급합니다. 여기서는 서명만 검증하고 sub 클레임(user_id)을 꺼냅니다.
서비스 계층은 전역 세션을 읽지 않고 항상 user_id 를 인자로 전달받습니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from saveit.config import settings
from saveit.core.exceptions import AuthenticationError

security = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    sub: str
    exp: Optional[int] = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """서명된 액세스 토큰 생성 (로컬 개발/테스트용)"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {**data, "exp": expire}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_user_id(token: str) -> str:
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        return TokenPayload.model_validate(payload).sub
    except (JWTError, ValidationError):
        raise AuthenticationError("Invalid authentication credentials")


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Bearer 토큰을 검증하고 user_id 를 반환합니다."""
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return decode_user_id(credentials.credentials)
