from __future__ import annotations

from pydantic import BaseModel

from common.types.fields import ObjectIdStr


class User(BaseModel):
    """유저 프로필 도메인 모델.

    - users 컬렉션은 외부 인증 서비스가 관리하며, 이 서비스는 읽기만 한다.
    - 게시글/댓글 작성 시 name, avatar 를 스냅샷으로 복사하는 용도로 사용한다.
    """

    id: ObjectIdStr
    name: str
    email: str | None = None
    avatar: str | None = None
