"""
Post authoring and read helpers for the feed.
"""
from typing import List, Optional
import logging

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from campusqa.core.config import settings
from campusqa.core.exceptions import (
    ForumError,
    InvalidPostError,
    PostNotFoundError,
    QuestionClosedError,
    StoreUnavailableError,
    UserNotFoundError,
)
from campusqa.models.post import Post, PostStatus, PostType
from campusqa.models.user import User

logger = logging.getLogger(__name__)


class PostService:
    """Creates posts, questions and answers and enforces their structural rules."""

    def __init__(self, db: Session, max_length: Optional[int] = None):
        self.db = db
        self.max_length = max_length if max_length is not None else settings.POST_MAX_LENGTH

    def create_post(
        self,
        author_id: int,
        content: str,
        post_type: PostType = PostType.POST,
        parent_id: Optional[int] = None
    ) -> Post:
        """
        Create a pending post with vote_count 0.

        An answer must reference a pending question through ``parent_id``;
        any other type must not have a parent. Creating an answer bumps the
        parent's reply_count in the same transaction.
        """
        content = self._validate_content(content)
        try:
            post_type = PostType(post_type)
        except ValueError:
            raise InvalidPostError(f"Unknown post type: {post_type}")

        if post_type == PostType.ANSWER and parent_id is None:
            raise InvalidPostError("Answers must reference a parent question")
        if post_type != PostType.ANSWER and parent_id is not None:
            raise InvalidPostError(f"A {post_type.value} cannot have a parent post")

        try:
            if self.db.get(User, author_id) is None:
                raise UserNotFoundError(author_id)

            if post_type == PostType.ANSWER:
                self._attach_to_question(parent_id)

            post = Post(
                content=content,
                author_id=author_id,
                type=post_type,
                parent_id=parent_id,
                vote_count=0,
                status=PostStatus.PENDING,
                reply_count=0,
            )
            self.db.add(post)
            self.db.commit()
        except ForumError:
            self.db.rollback()
            raise
        except DBAPIError as e:
            self.db.rollback()
            logger.error(f"Failed to create {post_type.value}: {e}", exc_info=True)
            raise StoreUnavailableError(str(e)) from e

        self.db.refresh(post)
        logger.info(f"Created {post_type.value} {post.id} by user {author_id}")
        return post

    def _attach_to_question(self, question_id: int) -> None:
        question = (
            self.db.query(Post)
            .filter(Post.id == question_id)
            .with_for_update()
            .one_or_none()
        )
        if question is None:
            raise PostNotFoundError(question_id)
        if question.type != PostType.QUESTION:
            raise InvalidPostError(f"Post {question_id} is not a question")
        if question.status != PostStatus.PENDING:
            raise QuestionClosedError(question_id, question.status.value)

        self.db.query(Post).filter(Post.id == question_id).update(
            {Post.reply_count: Post.reply_count + 1},
            synchronize_session=False,
        )

    def _validate_content(self, content: Optional[str]) -> str:
        content = (content or "").strip()
        if not content:
            raise InvalidPostError("Content is required")
        if len(content) > self.max_length:
            raise InvalidPostError(f"Content exceeds {self.max_length} characters")
        return content

    def get_post(self, post_id: int) -> Post:
        post = self.db.get(Post, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    def list_pending_posts(self, limit: int = 50) -> List[Post]:
        """Feed of posts still open for voting or answering, newest first."""
        return (
            self.db.query(Post)
            .filter(Post.status == PostStatus.PENDING)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
            .all()
        )

    def list_answers(self, question_id: int) -> List[Post]:
        question = self.get_post(question_id)
        if question.type != PostType.QUESTION:
            raise InvalidPostError(f"Post {question_id} is not a question")
        return (
            self.db.query(Post)
            .filter(Post.parent_id == question_id)
            .order_by(Post.vote_count.desc(), Post.id.asc())
            .all()
        )
