from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, func
from campusqa.core.database import Base


class KnowledgeEntry(Base):
    """Cleaned, embedded knowledge chunk searchable by the chatbot.

    ``source_post_id`` is NULL for operator-seeded entries. The embedding is
    kept on the row so the vector index can be rebuilt without re-embedding,
    and ``embedding_model`` records which model produced it.
    """
    __tablename__ = "knowledge_entries"

    id = Column(Integer, primary_key=True, index=True)
    source_post_id = Column(
        Integer,
        ForeignKey("posts.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )
    raw_content = Column(Text, nullable=True)
    cleaned_content = Column(Text, nullable=False)
    embedding = Column(JSON, nullable=False)
    embedding_model = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
