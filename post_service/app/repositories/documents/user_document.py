from __future__ import annotations

from pydantic import Field

from common.models.user import User
from common.mongo.types import EmbeddedDocument, PyObjectId


class UserDocument(EmbeddedDocument):
    """MongoDB users 컬렉션 도큐먼트 모델 (읽기 전용).

    users 컬렉션은 외부 서비스 소유이므로 필요한 필드만 선언하고 나머지는 무시한다.
    """

    id: PyObjectId = Field(alias="_id")
    name: str
    email: str | None = None
    avatar: str | None = None

    def to_domain(self) -> User:
        return User(
            id=str(self.id),
            name=self.name,
            email=self.email,
            avatar=self.avatar,
        )
