from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pymongo.errors import PyMongoError


class MongoAccessError(Exception):
    """저장소 접근 중 발생한 오류의 공통 베이스."""


class InvalidObjectIdError(MongoAccessError, ValueError):
    """식별자가 ObjectId 형식이 아니어서 쿼리 자체를 만들 수 없는 경우."""

    def __init__(self, value: object) -> None:
        super().__init__(f"invalid ObjectId: {value!r}")
        self.value = value


class StoreOperationError(MongoAccessError):
    """MongoDB 연결/쿼리/쓰기가 실패한 경우."""


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """pymongo 예외를 StoreOperationError 로 감싼다.

    서비스 레이어는 pymongo 를 모르도록, 리포지토리 메서드 안쪽에서만 사용한다.
    """

    try:
        yield
    except PyMongoError as exc:
        raise StoreOperationError(f"{operation} failed: {exc}") from exc
