from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import Request
from jose import JWTError, jwt
from pydantic import BaseModel

from .config import AuthConfig
from .exceptions import Unauthenticated

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "no token, authorization denied"
INVALID_TOKEN_MESSAGE = "token is not valid"

_BEARER_SCHEME = "bearer"


class Identity(BaseModel):
    """토큰에서 꺼낸 인증된 사용자 식별자."""

    id: str


class TokenVerifier:
    """요청 헤더의 JWT 를 검증하고 Identity 를 돌려주는 게이트.

    - 토큰 발급/갱신은 하지 않는다. 검증만 한다.
    - 저장소에는 접근하지 않는다.
    - AuthConfig 는 앱 생성 시 한 번 주입받고 이후 바뀌지 않는다.
    """

    def __init__(self, config: AuthConfig) -> None:
        self._secret = config.jwt_secret
        self._algorithm = config.jwt_algorithm
        self._header = config.token_header

    def verify(self, request: Request) -> Identity:
        return self.verify_headers(request.headers)

    def verify_headers(self, headers: Mapping[str, str]) -> Identity:
        token = self.extract_token(headers)
        if token is None:
            raise Unauthenticated(NO_TOKEN_MESSAGE)
        return self.decode(token)

    def extract_token(self, headers: Mapping[str, str]) -> str | None:
        raw = headers.get(self._header)
        if raw is None:
            return None

        parts = raw.split(None, 1)
        if parts and parts[0].lower() == _BEARER_SCHEME:
            parts = parts[1:]
        token = parts[0].strip() if parts else ""
        return token or None

    def decode(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            logger.info("token verification failed: %s", exc)
            raise Unauthenticated(INVALID_TOKEN_MESSAGE) from exc

        user_id = _identity_claim(claims)
        if user_id is None:
            logger.info("token verification failed: identity claim missing")
            raise Unauthenticated(INVALID_TOKEN_MESSAGE)
        return Identity(id=user_id)


def _identity_claim(claims: Mapping[str, Any]) -> str | None:
    # {"user": {"id": ...}} 를 우선하고, user 클레임이 없을 때만 표준 sub 클레임을 쓴다.
    if "user" in claims:
        user = claims["user"]
        if not isinstance(user, Mapping):
            return None
        value = user.get("id")
    else:
        value = claims.get("sub")
    if not isinstance(value, str) or not value.strip():
        return None
    return value
