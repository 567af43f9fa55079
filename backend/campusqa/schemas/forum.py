from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from campusqa.models.post import Post, PostStatus, PostType


class PostCreate(BaseModel):
    content: str = Field(..., description="Post text")
    type: PostType = PostType.POST
    parent_id: Optional[int] = Field(None, description="Parent question id (answers only)")


class PostResponse(BaseModel):
    id: int
    content: str
    author_id: int
    username: Optional[str] = None
    type: PostType
    parent_id: Optional[int]
    vote_count: int
    status: PostStatus
    reply_count: int
    created_at: Optional[datetime]

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            content=post.content,
            author_id=post.author_id,
            username=post.author.username if post.author is not None else None,
            type=post.type,
            parent_id=post.parent_id,
            vote_count=post.vote_count,
            status=post.status,
            reply_count=post.reply_count,
            created_at=post.created_at,
        )


class VoteRequest(BaseModel):
    vote: int = Field(..., strict=True, description="1 to upvote, -1 to downvote; repeating a vote retracts it")


class VoteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vote_count: int = Field(..., alias="voteCount")
    status: PostStatus


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    response: str
    matched: bool
    similarity: Optional[float] = None


class KnowledgeSyncResponse(BaseModel):
    status: str
    indexed: int
    reembedded: int
