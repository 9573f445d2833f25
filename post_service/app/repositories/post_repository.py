from __future__ import annotations

from datetime import datetime, timezone

from pymongo.database import Database

from common.models.post import Post
from common.mongo.errors import StoreOperationError, translate_store_errors
from common.mongo.types import new_object_id, to_object_id

from .documents.post_document import PostDocument
from .interfaces import PostRepositoryInterface


class PostRepository(PostRepositoryInterface):
    """posts 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(self, database: Database) -> None:
        self._db = database
        self._col = database["posts"]

    # --- helpers -----------------------------------------------------------------
    @staticmethod
    def _to_document(post: Post) -> PostDocument:
        document = PostDocument.from_domain(post)
        # 새로 추가된 댓글에는 저장 시점에 ObjectId 를 부여한다.
        for comment in document.comments:
            if comment.id is None:
                comment.id = new_object_id()
        return document

    @staticmethod
    def _from_document(doc: dict) -> Post:
        return PostDocument.model_validate(doc).to_domain()

    # --- queries -----------------------------------------------------------------
    def list_all(self) -> list[Post]:
        with translate_store_errors("list posts"):
            cursor = self._col.find({}, sort=[("created_at", -1), ("_id", -1)])
            return [self._from_document(doc) for doc in cursor]

    def find_by_id(self, id_value: str) -> Post | None:
        object_id = to_object_id(id_value)
        with translate_store_errors("find post"):
            doc = self._col.find_one({"_id": object_id})
        if not doc:
            return None
        return self._from_document(doc)

    # --- mutations ---------------------------------------------------------------
    def insert(self, post: Post) -> Post:
        """새 게시글을 삽입하고 _id 가 채워진 게시글을 반환한다."""

        post.updated_at = datetime.now(timezone.utc)

        document = self._to_document(post)
        payload = document.to_mongo_record()
        with translate_store_errors("insert post"):
            result = self._col.insert_one(payload)
        document.id = result.inserted_id
        return document.to_domain()

    def save(self, post: Post) -> Post:
        if post.id is None:
            raise ValueError("cannot save a post without id; use insert")

        post.updated_at = datetime.now(timezone.utc)
        document = self._to_document(post)
        payload = document.to_mongo_record()
        with translate_store_errors("save post"):
            result = self._col.replace_one({"_id": document.id}, payload)
        if result.matched_count == 0:
            # 읽은 뒤 저장 사이에 다른 요청이 게시글을 지운 경우
            raise StoreOperationError(f"post disappeared before save (id={post.id})")
        return document.to_domain()

    def delete_by_id(self, id_value: str) -> bool:
        object_id = to_object_id(id_value)
        with translate_store_errors("delete post"):
            result = self._col.delete_one({"_id": object_id})
        return result.deleted_count > 0
