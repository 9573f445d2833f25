from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from ..auth import Identity, TokenVerifier


def get_token_verifier(request: Request) -> TokenVerifier:
    """앱 생성 시 만들어 둔 TokenVerifier 를 app.state 에서 꺼낸다."""
    return request.app.state.token_verifier


def require_identity(
    request: Request,
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Identity:
    """토큰을 검증하고 인증된 Identity 를 request.state 에 붙인다.

    라우터 의존성으로 등록되므로 저장소 의존성보다 먼저 실행되고,
    실패하면 Unauthenticated 가 그대로 전파되어 401 로 응답한다.
    """

    identity = verifier.verify(request)
    request.state.identity = identity
    return identity


CurrentIdentity = Annotated[Identity, Depends(require_identity)]
