from __future__ import annotations

from typing import Protocol

from common.models.post import Post
from common.models.user import User


class PostRepositoryInterface(Protocol):
    """PostRepository 가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    구현체는 잘못된 식별자에 InvalidObjectIdError 를, 저장소 장애에
    StoreOperationError 를 발생시킨다.
    """

    def list_all(self) -> list[Post]:  # pragma: no cover - Protocol
        """전체 게시글을 created_at 내림차순으로 반환한다."""
        ...

    def find_by_id(self, id_value: str) -> Post | None:  # pragma: no cover - Protocol
        ...

    def insert(self, post: Post) -> Post:  # pragma: no cover - Protocol
        ...

    def save(self, post: Post) -> Post:  # pragma: no cover - Protocol
        """애그리거트 전체(likes/comments 포함)를 덮어쓴다."""
        ...

    def delete_by_id(self, id_value: str) -> bool:  # pragma: no cover - Protocol
        ...


class UserRepositoryInterface(Protocol):
    """users 컬렉션 읽기 전용 계약."""

    def find_by_id(self, id_value: str) -> User | None:  # pragma: no cover - Protocol
        ...
