from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from fastapi import Depends
from pymongo.database import Database

from common.models.post import Comment, Like, Post
from common.models.user import User
from common.mongo.client import get_database
from common.mongo.errors import InvalidObjectIdError, StoreOperationError

from ..auth import Identity
from ..exceptions import (
    AlreadyLiked,
    NotFound,
    NotLiked,
    ServerError,
    Unauthorized,
)
from ..repositories.interfaces import (
    PostRepositoryInterface,
    UserRepositoryInterface,
)
from ..repositories.post_repository import PostRepository
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "post not found"
COMMENT_NOT_FOUND = "comment does not exist"
NOT_AUTHORIZED = "user not authorized"


@contextmanager
def _storage_guard(action: str) -> Iterator[None]:
    """저장소 장애를 ServerError 로 바꾸고 원인을 로그로 남긴다."""

    try:
        yield
    except StoreOperationError as exc:
        logger.exception("%s failed: storage error", action)
        raise ServerError() from exc


class PostsService:
    """게시글/좋아요/댓글 정책을 담당하는 비즈니스 로직.

    - 모든 메서드는 조회 → 정책 확인 → 변경 → 저장 순서로 동작한다.
    - 변경은 애그리거트 전체를 다시 저장하는 방식이며, 동시 요청 간 조율은 하지 않는다.
    - Repository 인터페이스에만 의존하고, Mongo 세부 구현은 알지 않는다.
    """

    def __init__(
        self,
        post_repo: PostRepositoryInterface,
        user_repo: UserRepositoryInterface,
    ) -> None:
        self._post_repo = post_repo
        self._user_repo = user_repo

    # --- posts -------------------------------------------------------------------
    def create_post(self, identity: Identity, text: str) -> Post:
        with _storage_guard("create post"):
            author = self._load_author(identity)
            now = datetime.now(timezone.utc)
            post = Post(
                user=identity.id,
                name=author.name,
                avatar=author.avatar,
                text=text,
                created_at=now,
                updated_at=now,
            )
            created = self._post_repo.insert(post)

        logger.info(
            "post created",
            extra={"user_id": identity.id, "post_id": created.id},
        )
        return created

    def list_posts(self) -> list[Post]:
        with _storage_guard("list posts"):
            return self._post_repo.list_all()

    def get_post(self, post_id: str) -> Post:
        with _storage_guard("get post"):
            return self._load_post(post_id)

    def delete_post(self, identity: Identity, post_id: str) -> None:
        with _storage_guard("delete post"):
            post = self._load_post(post_id)
            if post.user != identity.id:
                raise Unauthorized(NOT_AUTHORIZED)
            if not self._post_repo.delete_by_id(post_id):
                # 확인과 삭제 사이에 이미 지워진 경우
                raise NotFound(POST_NOT_FOUND)

        logger.info(
            "post removed",
            extra={"user_id": identity.id, "post_id": post_id},
        )

    # --- likes -------------------------------------------------------------------
    def like_post(self, identity: Identity, post_id: str) -> list[Like]:
        with _storage_guard("like post"):
            post = self._load_post(post_id)
            if post.is_liked_by(identity.id):
                raise AlreadyLiked()

            post.likes.insert(
                0, Like(user=identity.id, created_at=datetime.now(timezone.utc))
            )
            return self._post_repo.save(post).likes

    def unlike_post(self, identity: Identity, post_id: str) -> list[Like]:
        with _storage_guard("unlike post"):
            post = self._load_post(post_id)
            if not post.is_liked_by(identity.id):
                raise NotLiked()

            # 유저당 좋아요는 하나뿐이므로 첫 번째 일치 항목만 지운다.
            remove_index = next(
                index
                for index, like in enumerate(post.likes)
                if like.user == identity.id
            )
            del post.likes[remove_index]
            return self._post_repo.save(post).likes

    # --- comments ----------------------------------------------------------------
    def add_comment(self, identity: Identity, post_id: str, text: str) -> list[Comment]:
        with _storage_guard("add comment"):
            author = self._load_author(identity)
            post = self._load_post(post_id)

            comment = Comment(
                user=identity.id,
                name=author.name,
                avatar=author.avatar,
                text=text,
                created_at=datetime.now(timezone.utc),
            )
            post.comments.insert(0, comment)
            return self._post_repo.save(post).comments

    def delete_comment(
        self, identity: Identity, post_id: str, comment_id: str
    ) -> list[Comment]:
        with _storage_guard("delete comment"):
            post = self._load_post(post_id)

            comment = post.find_comment(comment_id)
            if comment is None:
                raise NotFound(COMMENT_NOT_FOUND)
            if comment.user != identity.id:
                raise Unauthorized(NOT_AUTHORIZED)

            post.comments = [c for c in post.comments if c.id != comment_id]
            saved = self._post_repo.save(post)

        logger.info(
            "comment removed",
            extra={
                "user_id": identity.id,
                "post_id": post_id,
                "comment_id": comment_id,
            },
        )
        return saved.comments

    # --- helpers -----------------------------------------------------------------
    def _load_post(self, post_id: str) -> Post:
        """게시글을 읽는다. 형식이 잘못된 ID 도 없는 게시글과 똑같이 취급한다."""

        try:
            post = self._post_repo.find_by_id(post_id)
        except InvalidObjectIdError as exc:
            raise NotFound(POST_NOT_FOUND) from exc
        if post is None:
            raise NotFound(POST_NOT_FOUND)
        return post

    def _load_author(self, identity: Identity) -> User:
        # 토큰은 유효한데 프로필을 찾지 못하는 것은 클라이언트가 고칠 수 없는 상태다.
        try:
            user = self._user_repo.find_by_id(identity.id)
        except InvalidObjectIdError as exc:
            logger.error("author lookup failed: malformed user id %r", identity.id)
            raise ServerError() from exc
        if user is None:
            logger.error("author lookup failed: user %s not found", identity.id)
            raise ServerError()
        return user


def get_post_repository(
    db: Database = Depends(get_database),
) -> PostRepositoryInterface:
    return PostRepository(db)


def get_user_repository(
    db: Database = Depends(get_database),
) -> UserRepositoryInterface:
    return UserRepository(db)


def get_posts_service(
    post_repo: PostRepositoryInterface = Depends(get_post_repository),
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
) -> PostsService:
    """FastAPI DI용 PostsService 팩토리."""
    return PostsService(post_repo, user_repo)
