"""
Post lifecycle rules.

A post starts pending and leaves that state exactly once, when its aggregate
vote count reaches +T (approved) or -T (disapproved). Only answers carry the
vote-driven state machine; a question inherits ``approved`` from its winning
answer and generic posts are never voted on.
"""
from campusqa.core.exceptions import InvalidOperationError
from campusqa.models.post import PostStatus, PostType


def derive_status(vote_count: int, threshold: int) -> PostStatus:
    """Pure transition rule: map an aggregate vote count to a status."""
    if threshold < 1:
        raise ValueError(f"Approval threshold must be at least 1, got {threshold}")
    if vote_count >= threshold:
        return PostStatus.APPROVED
    if vote_count <= -threshold:
        return PostStatus.DISAPPROVED
    return PostStatus.PENDING


def ensure_votable(post_type: PostType) -> None:
    """Raise InvalidOperationError unless posts of this type accept votes."""
    if post_type == PostType.ANSWER:
        return
    if post_type == PostType.QUESTION:
        raise InvalidOperationError("Questions cannot be voted on")
    if post_type == PostType.POST:
        raise InvalidOperationError("Only answers can be voted on")
    raise InvalidOperationError(f"Unknown post type: {post_type}")


def is_terminal(status: PostStatus) -> bool:
    return status != PostStatus.PENDING
