from __future__ import annotations

from pydantic import BaseModel, Field

from common.types.fields import ObjectIdStr, UtcDateTime


class Like(BaseModel):
    """게시글 좋아요. 한 게시글에 유저당 최대 1개만 존재한다."""

    user: str
    created_at: UtcDateTime


class Comment(BaseModel):
    """게시글 댓글.

    - id 는 저장소에 처음 저장될 때 부여된다.
    - name/avatar 는 작성 시점의 작성자 프로필 스냅샷이다.
    """

    id: ObjectIdStr | None = None
    user: str
    name: str
    avatar: str | None = None
    text: str
    created_at: UtcDateTime


class Post(BaseModel):
    """게시글 도메인 모델 (API/저장소에서 공통 사용).

    likes, comments 는 모두 최신 항목이 앞에 오도록 유지한다.
    """

    id: ObjectIdStr | None = None
    user: str
    name: str
    avatar: str | None = None
    text: str
    likes: list[Like] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)
    created_at: UtcDateTime
    updated_at: UtcDateTime

    def is_liked_by(self, user_id: str) -> bool:
        return any(like.user == user_id for like in self.likes)

    def find_comment(self, comment_id: str) -> Comment | None:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None
