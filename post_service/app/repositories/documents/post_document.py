from __future__ import annotations

from typing import Optional

from pydantic import Field

from common.models.post import Comment, Like, Post
from common.mongo.types import (
    BaseDocument,
    EmbeddedDocument,
    MongoDateTime,
    PyObjectId,
    from_object_id,
)


class LikeDocument(EmbeddedDocument):
    user: str
    created_at: MongoDateTime

    def to_domain(self) -> Like:
        return Like(user=self.user, created_at=self.created_at)


class CommentDocument(EmbeddedDocument):
    """posts.comments 배열에 포함되는 댓글 서브 도큐먼트."""

    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    user: str
    name: str
    avatar: str | None = None
    text: str
    created_at: MongoDateTime

    def to_domain(self) -> Comment:
        return Comment(
            id=from_object_id(self.id),
            user=self.user,
            name=self.name,
            avatar=self.avatar,
            text=self.text,
            created_at=self.created_at,
        )


class PostDocument(BaseDocument):
    """MongoDB posts 컬렉션 도큐먼트 모델.

    likes/comments 를 모두 임베드한 애그리거트 단위로 읽고 쓴다.
    """

    user: str
    name: str
    avatar: str | None = None
    text: str
    likes: list[LikeDocument] = Field(default_factory=list)
    comments: list[CommentDocument] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, post: Post) -> "PostDocument":
        data = post.model_dump()
        _id = data.pop("id", None)
        if _id is not None:
            data["_id"] = _id
        for comment in data["comments"]:
            comment_id = comment.pop("id", None)
            if comment_id is not None:
                comment["_id"] = comment_id

        return cls.model_validate(data)

    def to_domain(self) -> Post:
        return Post(
            id=from_object_id(self.id),
            user=self.user,
            name=self.name,
            avatar=self.avatar,
            text=self.text,
            likes=[like.to_domain() for like in self.likes],
            comments=[comment.to_domain() for comment in self.comments],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
