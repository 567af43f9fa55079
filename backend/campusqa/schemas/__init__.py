from campusqa.schemas.forum import (
    PostCreate,
    PostResponse,
    VoteRequest,
    VoteResponse,
    ChatRequest,
    ChatResponse,
    KnowledgeSyncResponse
)

__all__ = [
    "PostCreate",
    "PostResponse",
    "VoteRequest",
    "VoteResponse",
    "ChatRequest",
    "ChatResponse",
    "KnowledgeSyncResponse"
]
