from __future__ import annotations

from fastapi import APIRouter, Depends

from ...services.posts_service import PostsService, get_posts_service
from ..dependencies import CurrentIdentity, require_identity
from ..schemas.posts import (
    CommentResponse,
    LikeResponse,
    MessageResponse,
    PostResponse,
    TextRequest,
)


# 모든 게시글 API 는 인증이 필요하다. 라우터 의존성은 저장소 의존성보다 먼저 실행된다.
router = APIRouter(dependencies=[Depends(require_identity)])


@router.post(
    "",
    response_model=PostResponse,
    summary="게시글 작성",
    description="작성자의 이름/아바타를 스냅샷으로 복사해 새 게시글을 만든다.",
)
def create_post(
    body: TextRequest,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> PostResponse:
    post = service.create_post(identity, body.text)
    return PostResponse.from_domain(post)


@router.get(
    "",
    response_model=list[PostResponse],
    summary="게시글 목록 조회",
    description="전체 게시글을 최신순으로 반환한다.",
)
def list_posts(
    service: PostsService = Depends(get_posts_service),
) -> list[PostResponse]:
    return [PostResponse.from_domain(post) for post in service.list_posts()]


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="단일 게시글 조회",
)
def get_post(
    post_id: str,
    service: PostsService = Depends(get_posts_service),
) -> PostResponse:
    return PostResponse.from_domain(service.get_post(post_id))


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    summary="게시글 삭제",
    description="작성자 본인만 삭제할 수 있다.",
)
def delete_post(
    post_id: str,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> MessageResponse:
    service.delete_post(identity, post_id)
    return MessageResponse(msg="post removed")


@router.put(
    "/like/{post_id}",
    response_model=list[LikeResponse],
    summary="게시글 좋아요",
    description="이미 좋아요한 게시글이면 400 을 반환한다.",
)
def like_post(
    post_id: str,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> list[LikeResponse]:
    likes = service.like_post(identity, post_id)
    return [LikeResponse.from_domain(like) for like in likes]


@router.put(
    "/unlike/{post_id}",
    response_model=list[LikeResponse],
    summary="게시글 좋아요 취소",
    description="좋아요하지 않은 게시글이면 400 을 반환한다.",
)
def unlike_post(
    post_id: str,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> list[LikeResponse]:
    likes = service.unlike_post(identity, post_id)
    return [LikeResponse.from_domain(like) for like in likes]


@router.post(
    "/comment/{post_id}",
    response_model=list[CommentResponse],
    summary="댓글 작성",
)
def add_comment(
    post_id: str,
    body: TextRequest,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> list[CommentResponse]:
    comments = service.add_comment(identity, post_id, body.text)
    return [CommentResponse.from_domain(comment) for comment in comments]


@router.delete(
    "/comment/{post_id}/{comment_id}",
    response_model=list[CommentResponse],
    summary="댓글 삭제",
    description="댓글 작성자 본인만 삭제할 수 있다.",
)
def delete_comment(
    post_id: str,
    comment_id: str,
    identity: CurrentIdentity,
    service: PostsService = Depends(get_posts_service),
) -> list[CommentResponse]:
    comments = service.delete_comment(identity, post_id, comment_id)
    return [CommentResponse.from_domain(comment) for comment in comments]
