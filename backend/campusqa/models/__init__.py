from campusqa.models.user import User
from campusqa.models.post import Post, PostVote, PostType, PostStatus
from campusqa.models.knowledge import KnowledgeEntry

__all__ = ["User", "Post", "PostVote", "PostType", "PostStatus", "KnowledgeEntry"]
