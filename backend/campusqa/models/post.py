from sqlalchemy import (
    Column, Integer, Text, DateTime, ForeignKey, SmallInteger,
    CheckConstraint, UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from campusqa.core.database import Base


class PostType(str, enum.Enum):
    POST = "post"
    QUESTION = "question"
    ANSWER = "answer"


class PostStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DISAPPROVED = "disapproved"


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "(type = 'ANSWER' AND parent_id IS NOT NULL) OR (type <> 'ANSWER' AND parent_id IS NULL)",
            name="ck_posts_parent_only_for_answers",
        ),
        CheckConstraint("reply_count >= 0", name="ck_posts_reply_count_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(PostType), default=PostType.POST, nullable=False)
    parent_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=True, index=True)
    # Cached aggregate of post_votes.value; only the vote ledger writes it
    vote_count = Column(Integer, default=0, nullable=False)
    status = Column(SQLEnum(PostStatus), default=PostStatus.PENDING, nullable=False, index=True)
    reply_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    author = relationship("User", lazy="joined")


class PostVote(Base):
    """One row per (user, post); value is +1 or -1"""
    __tablename__ = "post_votes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_post_votes_user_post"),
        CheckConstraint("value IN (1, -1)", name="ck_post_votes_value"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(SmallInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
