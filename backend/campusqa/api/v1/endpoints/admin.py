"""
Admin endpoints for system management
"""
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session
from campusqa.core.database import get_db
from campusqa.schemas.forum import KnowledgeSyncResponse
from campusqa.services.embedding_service import get_embedding_service
from campusqa.services.knowledge_store import KnowledgeStore, get_knowledge_store
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def get_sync_embedder():
    return get_embedding_service()


@router.post("/sync-knowledge", response_model=KnowledgeSyncResponse)
def sync_knowledge(
    db: Session = Depends(get_db),
    store: KnowledgeStore = Depends(get_knowledge_store),
    embedder=Depends(get_sync_embedder)
):
    """
    Rebuild the vector index from knowledge_entries.
    Entries embedded with an outdated model are re-embedded first.
    """
    try:
        result = store.sync_from_database(db, embedder)
        return KnowledgeSyncResponse(status="success", **result)
    except ConnectionError as e:
        logger.error(f"Qdrant connection error: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to connect to Qdrant. Please ensure Qdrant service is running. Error: {str(e)}"
        )
    except Exception as e:
        logger.error(f"Error syncing knowledge index: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to sync knowledge index: {str(e)}"
        )
