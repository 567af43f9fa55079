"""
Knowledge store: knowledge_entries rows mirrored into a Qdrant collection.

Rows are the source of truth. Every row has a Qdrant point with the same id
and a COSINE vector, so a point score is the cosine similarity between the
query and the stored embedding.
"""
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from qdrant_client import QdrantClient
from qdrant_client.models import Distance, VectorParams, PointStruct, PointIdsList
from sqlalchemy.orm import Session
from campusqa.core.config import settings
from campusqa.models.knowledge import KnowledgeEntry
import logging

logger = logging.getLogger(__name__)

# Thread lock for singleton
_store_lock = threading.Lock()


@dataclass(frozen=True)
class KnowledgeMatch:
    entry_id: int
    cleaned_content: str
    similarity: float
    source_post_id: Optional[int] = None


class KnowledgeStore:
    """Writes and searches approved knowledge"""

    def __init__(self, client: Optional[QdrantClient] = None, collection_name: Optional[str] = None):
        if client is None:
            qdrant_url = getattr(settings, 'QDRANT_URL', 'http://localhost:6333')
            qdrant_api_key = getattr(settings, 'QDRANT_API_KEY', None)
            if qdrant_api_key:
                client = QdrantClient(url=qdrant_url, api_key=qdrant_api_key)
            else:
                client = QdrantClient(url=qdrant_url)
        self.client = client
        self.collection_name = collection_name or settings.KNOWLEDGE_COLLECTION

    def collection_exists(self) -> bool:
        collections = self.client.get_collections()
        return any(c.name == self.collection_name for c in collections.collections)

    def init_collection(self, dimension: int, recreate: bool = False):
        """Initialize or recreate the Qdrant collection"""
        try:
            collection_exists = self.collection_exists()

            if collection_exists and recreate:
                logger.info(f"Deleting existing collection: {self.collection_name}")
                self.client.delete_collection(self.collection_name)
                collection_exists = False

            if not collection_exists:
                logger.info(f"Creating collection: {self.collection_name} (dimension {dimension})")
                self.client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=VectorParams(
                        size=dimension,
                        distance=Distance.COSINE
                    )
                )
        except Exception as e:
            logger.error(f"Error initializing collection: {e}")
            raise

    def add_entry(
        self,
        db: Session,
        cleaned_content: str,
        embedding: List[float],
        embedding_model: Optional[str] = None,
        source_post_id: Optional[int] = None,
        raw_content: Optional[str] = None,
    ) -> KnowledgeEntry:
        """
        Insert a knowledge row and index its vector.

        The row is committed only after the vector upsert succeeds; any
        failure (including the UNIQUE source_post_id guard) rolls it back and
        propagates. A point indexed before a failed commit is removed again.
        """
        if not cleaned_content or not cleaned_content.strip():
            raise ValueError("cleaned_content is required")
        if not embedding:
            raise ValueError("embedding is required")

        entry = KnowledgeEntry(
            source_post_id=source_post_id,
            raw_content=raw_content,
            cleaned_content=cleaned_content.strip(),
            embedding=list(embedding),
            embedding_model=embedding_model,
        )
        db.add(entry)
        indexed_id = None
        try:
            db.flush()
            self.init_collection(len(embedding))
            self.client.upsert(
                collection_name=self.collection_name,
                points=[self._to_point(entry)]
            )
            indexed_id = entry.id
            db.commit()
        except Exception:
            if indexed_id is not None:
                self._discard_point(indexed_id)
            db.rollback()
            raise

        db.refresh(entry)
        logger.info(f"Stored knowledge entry {entry.id} (source post: {source_post_id})")
        return entry

    def search(self, vector: List[float], top_k: int = 3) -> List[KnowledgeMatch]:
        """Return up to top_k entries ordered by descending cosine similarity"""
        if not self.collection_exists():
            return []

        results = self.client.query_points(
            collection_name=self.collection_name,
            query=vector,
            limit=top_k,
            with_payload=True,
        ).points

        matches = [
            KnowledgeMatch(
                entry_id=int(point.id),
                cleaned_content=(point.payload or {}).get("cleaned_content", ""),
                similarity=float(point.score),
                source_post_id=(point.payload or {}).get("source_post_id"),
            )
            for point in results
        ]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches

    def exists_for_source_post(self, db: Session, post_id: int) -> bool:
        return db.query(KnowledgeEntry.id).filter(
            KnowledgeEntry.source_post_id == post_id
        ).first() is not None

    def exists_for_raw_content(self, db: Session, raw_content: str) -> bool:
        return db.query(KnowledgeEntry.id).filter(
            KnowledgeEntry.raw_content == raw_content
        ).first() is not None

    def delete_entry(self, db: Session, entry_id: int) -> bool:
        """Delete a row and its point. Updating an entry is delete + re-add."""
        entry = db.get(KnowledgeEntry, entry_id)
        if entry is None:
            return False
        try:
            db.delete(entry)
            db.flush()
            if self.collection_exists():
                self.client.delete(
                    collection_name=self.collection_name,
                    points_selector=PointIdsList(points=[entry_id]),
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"Deleted knowledge entry {entry_id}")
        return True

    def sync_from_database(self, db: Session, embedder) -> Dict[str, int]:
        """
        Rebuild the Qdrant collection from knowledge_entries.

        Rows embedded with a different model than ``embedder.model_name`` are
        re-embedded from their cleaned content and updated in place.
        """
        logger.info("Syncing knowledge entries from database to Qdrant")

        entries = db.query(KnowledgeEntry).order_by(KnowledgeEntry.id).all()
        stale = [e for e in entries if e.embedding_model != embedder.model_name or not e.embedding]
        if stale:
            logger.info(f"Re-embedding {len(stale)} entries with {embedder.model_name}")
            vectors = embedder.embed_many([e.cleaned_content for e in stale])
            for entry, vector in zip(stale, vectors):
                entry.embedding = vector
                entry.embedding_model = embedder.model_name
            db.commit()

        self.init_collection(embedder.dimension, recreate=True)
        if entries:
            self.client.upsert(
                collection_name=self.collection_name,
                points=[self._to_point(e) for e in entries]
            )

        logger.info(f"Synced {len(entries)} knowledge entries to Qdrant")
        return {"indexed": len(entries), "reembedded": len(stale)}

    def _discard_point(self, point_id: int) -> None:
        """Remove a point whose row was never committed."""
        try:
            self.client.delete(
                collection_name=self.collection_name,
                points_selector=PointIdsList(points=[point_id]),
            )
        except Exception as e:
            logger.error(f"Failed to remove orphaned point {point_id}; run sync-knowledge to rebuild: {e}")

    @staticmethod
    def _to_point(entry: KnowledgeEntry) -> PointStruct:
        payload: Dict[str, Any] = {
            "cleaned_content": entry.cleaned_content,
            "source_post_id": entry.source_post_id,
            "embedding_model": entry.embedding_model,
        }
        return PointStruct(id=entry.id, vector=list(entry.embedding), payload=payload)


# Global instance
_knowledge_store: Optional[KnowledgeStore] = None


def get_knowledge_store() -> KnowledgeStore:
    """Get or create knowledge store instance (thread-safe singleton)"""
    global _knowledge_store

    if _knowledge_store is None:
        with _store_lock:
            if _knowledge_store is None:
                logger.info("Creating new KnowledgeStore instance")
                _knowledge_store = KnowledgeStore()

    return _knowledge_store
