from typing import Any, Optional

from fastapi import HTTPException, status


class ForumError(HTTPException):
    """Base class for errors raised by the voting / approval / chat core.

    ``code`` is a stable machine-readable identifier returned alongside the
    human readable ``detail``.
    """

    code = "forum_error"

    def __init__(self, status_code: int, detail: Any, code: Optional[str] = None):
        super().__init__(status_code=status_code, detail=detail)
        if code:
            self.code = code


# --- Validation ---------------------------------------------------------

class InvalidVoteError(ForumError):
    code = "invalid_vote"

    def __init__(self, value: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid vote value: {value!r} (expected 1 or -1)"
        )


class InvalidPostError(ForumError):
    code = "invalid_post"

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class InvalidChatMessageError(ForumError):
    code = "invalid_message"

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message is required"
        )


class MissingIdentityError(ForumError):
    code = "missing_identity"

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header"
        )


# --- Not found ----------------------------------------------------------

class PostNotFoundError(ForumError):
    code = "post_not_found"

    def __init__(self, post_id: int):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Post {post_id} not found"
        )


class UserNotFoundError(ForumError):
    code = "user_not_found"

    def __init__(self, user_id: int):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )


# --- Invalid operation / conflict ---------------------------------------

class InvalidOperationError(ForumError):
    code = "invalid_operation"

    def __init__(self, message: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class VotingClosedError(ForumError):
    code = "voting_closed"

    def __init__(self, post_id: int, current_status: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Voting closed: post {post_id} is {current_status}"
        )


class QuestionClosedError(ForumError):
    code = "question_closed"

    def __init__(self, question_id: int, current_status: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Question {question_id} is {current_status} and no longer accepts answers"
        )


class ConcurrentVoteError(ForumError):
    code = "vote_conflict"

    def __init__(self, post_id: int):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Concurrent vote on post {post_id}, please retry"
        )


# --- Transient infrastructure -------------------------------------------

class StoreUnavailableError(ForumError):
    code = "store_unavailable"

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Storage unavailable: {message}"
        )


class LLMServiceError(ForumError):
    code = "llm_unavailable"

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"LLM service error: {message}"
        )


class EmbeddingServiceError(ForumError):
    code = "embedding_unavailable"

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Embedding service error: {message}"
        )
