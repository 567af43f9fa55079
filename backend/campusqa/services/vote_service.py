"""
Vote ledger: one vote per (user, post) with toggle / switch semantics.

Every call runs as a single transaction. The post row (and, for answers, the
parent question row, always locked first) is read with SELECT ... FOR UPDATE
so concurrent votes on the same post are serialized by the database.
``posts.vote_count`` always equals the sum of ``post_votes.value`` for the
post; nothing else may write it.
"""
from dataclasses import dataclass
from typing import List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from campusqa.core.config import settings
from campusqa.core.exceptions import (
    ConcurrentVoteError,
    ForumError,
    InvalidVoteError,
    PostNotFoundError,
    StoreUnavailableError,
    UserNotFoundError,
    VotingClosedError,
)
from campusqa.core.structured_logging import log_status_transition, log_vote_applied
from campusqa.models.post import Post, PostStatus, PostType, PostVote
from campusqa.models.user import User
from campusqa.services.post_status import derive_status, ensure_votable

logger = logging.getLogger(__name__)

VALID_VOTES = (1, -1)


@dataclass(frozen=True)
class PromotionRequest:
    """An answer that was just approved and must be copied into the knowledge store."""
    answer_id: int
    question_id: int


@dataclass(frozen=True)
class VoteResult:
    post_id: int
    vote_count: int
    status: PostStatus
    action: str
    promotion: Optional[PromotionRequest] = None


class VoteService:
    """Applies votes and drives the post status state machine."""

    def __init__(self, db: Session, approval_threshold: Optional[int] = None):
        self.db = db
        self.approval_threshold = (
            approval_threshold if approval_threshold is not None else settings.APPROVAL_THRESHOLD
        )

    def apply_vote(self, user_id: int, post_id: int, value: int) -> VoteResult:
        """
        Cast, retract or switch ``user_id``'s vote on ``post_id``.

        Args:
            user_id: Voting user
            post_id: Target post (must be a pending answer)
            value: +1 or -1

        Returns:
            VoteResult with the committed vote count and status. ``promotion``
            is set when this vote approved an answer; the caller dispatches it
            after this method returns.

        Raises:
            InvalidVoteError, UserNotFoundError, PostNotFoundError,
            InvalidOperationError, VotingClosedError, ConcurrentVoteError,
            StoreUnavailableError. The transaction is rolled back in every case.
        """
        if isinstance(value, bool) or value not in VALID_VOTES:
            raise InvalidVoteError(value)

        try:
            result = self._apply_vote(user_id, post_id, value)
            self.db.commit()
        except ForumError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error while voting on post {post_id}: {e}")
            raise ConcurrentVoteError(post_id) from e
        except DBAPIError as e:
            self.db.rollback()
            logger.error(f"Database error while voting on post {post_id}: {e}", exc_info=True)
            raise StoreUnavailableError(str(e.orig) if e.orig is not None else str(e)) from e
        except Exception:
            self.db.rollback()
            raise

        log_vote_applied(
            post_id=post_id,
            user_id=user_id,
            value=value,
            action=result.action,
            vote_count=result.vote_count,
            status=result.status.value,
        )
        return result

    def _apply_vote(self, user_id: int, post_id: int, value: int) -> VoteResult:
        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

        post = self.db.get(Post, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        ensure_votable(post.type)

        # Lock order: parent question, then answer
        if post.parent_id is not None:
            self._lock_post(post.parent_id)
        post = self._lock_post(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        if post.status != PostStatus.PENDING:
            raise VotingClosedError(post_id, post.status.value)

        action, delta = self._mutate_ledger(user_id, post_id, value)

        self.db.query(Post).filter(Post.id == post_id).update(
            {Post.vote_count: Post.vote_count + delta},
            synchronize_session=False,
        )
        self.db.flush()
        self.db.refresh(post)

        previous_status = post.status
        new_status = derive_status(post.vote_count, self.approval_threshold)
        promotion = None
        if new_status != previous_status:
            promotion = self._transition(post, new_status)

        return VoteResult(
            post_id=post.id,
            vote_count=post.vote_count,
            status=new_status,
            action=action,
            promotion=promotion,
        )

    def _lock_post(self, post_id: int) -> Optional[Post]:
        return (
            self.db.query(Post)
            .filter(Post.id == post_id)
            .with_for_update()
            .populate_existing()
            .one_or_none()
        )

    def _mutate_ledger(self, user_id: int, post_id: int, value: int):
        """Apply the three-way ledger branch; returns (action, vote_count delta)."""
        existing = self.db.query(PostVote).filter(
            PostVote.user_id == user_id,
            PostVote.post_id == post_id
        ).first()

        if existing is None:
            self.db.add(PostVote(user_id=user_id, post_id=post_id, value=value))
            action, delta = "cast", value
        elif existing.value == value:
            self.db.delete(existing)
            action, delta = "retracted", -value
        else:
            existing.value = value
            action, delta = "switched", 2 * value

        self.db.flush()
        return action, delta

    def _transition(self, post: Post, new_status: PostStatus) -> Optional[PromotionRequest]:
        """Persist a status change and its cascade. Returns a promotion request on approval."""
        previous_status = post.status
        post.status = new_status
        cascaded: List[int] = []
        promotion = None

        if post.type == PostType.ANSWER and new_status == PostStatus.APPROVED:
            question = self.db.get(Post, post.parent_id)
            if question is not None:
                question.status = PostStatus.APPROVED
                cascaded.append(question.id)

            siblings = self.db.query(Post).filter(
                Post.parent_id == post.parent_id,
                Post.id != post.id,
                Post.type == PostType.ANSWER,
                Post.status == PostStatus.PENDING,
            ).all()
            for sibling in siblings:
                sibling.status = PostStatus.DISAPPROVED
                cascaded.append(sibling.id)

            promotion = PromotionRequest(answer_id=post.id, question_id=post.parent_id)

        self.db.flush()
        log_status_transition(
            post_id=post.id,
            from_status=previous_status.value,
            to_status=new_status.value,
            vote_count=post.vote_count,
            cascaded_post_ids=cascaded or None,
        )
        return promotion


def recount_votes(db: Session, post_id: int) -> int:
    """Sum of ledger rows for a post; must always equal posts.vote_count."""
    total = db.query(func.coalesce(func.sum(PostVote.value), 0)).filter(
        PostVote.post_id == post_id
    ).scalar()
    return int(total)
