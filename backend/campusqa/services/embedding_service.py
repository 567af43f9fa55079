"""
Embedding service
Uses Hugging Face sentence-transformers for embeddings
"""
import os
import threading
from typing import List, Optional
from sentence_transformers import SentenceTransformer
from campusqa.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Thread lock for singleton
_embedding_lock = threading.Lock()


class EmbeddingService:
    """Turns text into fixed-length vectors.

    Knowledge entries and chat queries must be embedded by the same model;
    ``model_name`` is stored on every knowledge entry for that reason.
    """

    def __init__(self, model_name: Optional[str] = None, model_path: Optional[str] = None, device: Optional[str] = None):
        self.model_name = model_name or settings.EMBEDDING_MODEL
        model_path = model_path if model_path is not None else settings.EMBEDDING_MODEL_PATH
        device = device or settings.EMBEDDING_DEVICE

        # Resolve relative paths relative to backend directory (where .env is located)
        if model_path and not os.path.isabs(model_path):
            backend_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
            model_path = os.path.abspath(os.path.join(backend_dir, model_path))
            logger.info(f"Resolved relative path to: {model_path}")

        if model_path and os.path.exists(model_path):
            logger.info(f"Loading embedding model from local path: {model_path} (device: {device})")
            try:
                self.model = SentenceTransformer(model_path, device=device, local_files_only=True)
            except Exception as e:
                logger.error(f"Failed to load local model: {e}")
                raise RuntimeError(
                    f"Local model at '{model_path}' failed to load. Ensure all model files are present."
                ) from e
        else:
            if model_path:
                logger.warning(f"Embedding model path '{model_path}' not found, loading '{self.model_name}'")
            logger.info(f"Loading embedding model: {self.model_name} (device: {device})")
            self.model = SentenceTransformer(self.model_name, device=device)

        self.dimension = self.model.get_sentence_embedding_dimension()
        logger.info(f"Embedding dimension: {self.dimension}")

    def embed(self, text: str) -> List[float]:
        """Embed a single text"""
        return self.embed_many([text])[0]

    def embed_many(self, texts: List[str]) -> List[List[float]]:
        """Embed a batch of texts"""
        try:
            embeddings = self.model.encode(
                [text.replace("\n", " ") for text in texts],
                normalize_embeddings=True,
                show_progress_bar=False,
            )
            return embeddings.tolist()
        except Exception as e:
            logger.error(f"Error creating embeddings: {e}")
            raise


# Global instance
_embedding_service: Optional[EmbeddingService] = None


def get_embedding_service() -> EmbeddingService:
    """Get or create embedding service instance (thread-safe singleton)"""
    global _embedding_service

    if _embedding_service is None:
        with _embedding_lock:
            if _embedding_service is None:
                logger.info("Creating new EmbeddingService instance")
                _embedding_service = EmbeddingService()

    return _embedding_service
