from __future__ import annotations


class PostServiceError(Exception):
    """post-service 가 클라이언트에게 돌려주는 오류의 베이스.

    status_code 와 message 는 예외 핸들러가 그대로 HTTP 응답으로 옮긴다.
    """

    status_code: int = 500
    default_message: str = "Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PostServiceError):
    """토큰이 없거나 검증에 실패한 경우."""

    status_code = 401
    default_message = "token is not valid"


class Unauthorized(PostServiceError):
    """인증은 되었지만 리소스 소유자가 아닌 경우."""

    status_code = 401
    default_message = "user not authorized"


class NotFound(PostServiceError):
    status_code = 404
    default_message = "post not found"


class AlreadyLiked(PostServiceError):
    status_code = 400
    default_message = "post already liked"


class NotLiked(PostServiceError):
    status_code = 400
    default_message = "post has not yet been liked"


class ServerError(PostServiceError):
    """저장소 장애 등 예상하지 못한 실패. 응답 바디는 plain text 로 나간다."""

    status_code = 500
    default_message = "Server Error"
