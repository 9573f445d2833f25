from __future__ import annotations

from pydantic import BaseModel, Field

from common.models.post import Comment, Like, Post
from common.types.fields import UtcDateTime


class TextRequest(BaseModel):
    """게시글/댓글 작성 요청 DTO."""

    text: str = Field(min_length=1, description="본문 (빈 문자열 불가)")


class LikeResponse(BaseModel):
    user: str
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, like: Like) -> "LikeResponse":
        return cls.model_validate(like.model_dump())


class CommentResponse(BaseModel):
    id: str | None
    user: str
    name: str
    avatar: str | None = None
    text: str
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentResponse":
        return cls.model_validate(comment.model_dump())


class PostResponse(BaseModel):
    """게시글 응답 DTO.

    도메인 모델(Post)을 그대로 노출하지 않고, API 경계를 위한 전용 응답 모델을 사용한다.
    """

    id: str | None
    user: str
    name: str
    avatar: str | None = None
    text: str
    likes: list[LikeResponse]
    comments: list[CommentResponse]
    created_at: UtcDateTime
    updated_at: UtcDateTime

    @classmethod
    def from_domain(cls, post: Post) -> "PostResponse":
        return cls.model_validate(post.model_dump())


class MessageResponse(BaseModel):
    msg: str
