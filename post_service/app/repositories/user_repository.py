from __future__ import annotations

from pymongo.database import Database

from common.models.user import User
from common.mongo.errors import translate_store_errors
from common.mongo.types import to_object_id

from .documents.user_document import UserDocument
from .interfaces import UserRepositoryInterface


class UserRepository(UserRepositoryInterface):
    """users 컬렉션 읽기 전용 접근 레이어. 작성자 프로필 스냅샷 조회에만 쓴다."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["users"]

    def find_by_id(self, id_value: str) -> User | None:
        object_id = to_object_id(id_value)
        with translate_store_errors("find user"):
            doc = self._col.find_one(
                {"_id": object_id},
                {"name": 1, "email": 1, "avatar": 1},
            )
        if not doc:
            return None
        return UserDocument.model_validate(doc).to_domain()
