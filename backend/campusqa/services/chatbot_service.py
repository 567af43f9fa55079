"""
Chatbot retrieval engine (RAG over approved knowledge).

The LLM is only asked to rephrase knowledge retrieved above the similarity
threshold. Below the threshold the fixed fallback message is returned and no
LLM call is made.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from campusqa.core.config import settings
from campusqa.core.exceptions import (
    EmbeddingServiceError,
    InvalidChatMessageError,
    LLMServiceError,
    StoreUnavailableError,
)
from campusqa.core.structured_logging import log_chat_retrieval
from campusqa.services.embedding_service import get_embedding_service
from campusqa.services.knowledge_store import KnowledgeMatch, KnowledgeStore, get_knowledge_store
from campusqa.services.llm_client import get_llm_client
from campusqa.services.prompts import format_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatResult:
    response: str
    matched: bool
    similarity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"response": self.response, "matched": self.matched}
        if self.similarity is not None:
            data["similarity"] = self.similarity
        return data


class ChatbotService:
    """Answers campus questions from the knowledge store"""

    def __init__(
        self,
        embedder,
        llm,
        store: KnowledgeStore,
        similarity_threshold: Optional[float] = None,
        top_k: Optional[int] = None,
        timeout: Optional[float] = None,
        fallback_message: Optional[str] = None
    ):
        self.embedder = embedder
        self.llm = llm
        self.store = store
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None else settings.SIMILARITY_THRESHOLD
        )
        self.top_k = top_k if top_k is not None else settings.RETRIEVAL_TOP_K
        self.timeout = timeout if timeout is not None else settings.PROMOTION_TIMEOUT_SECONDS
        self.fallback_message = fallback_message or settings.FALLBACK_MESSAGE

    async def answer(self, query: str) -> ChatResult:
        """
        Embed the query, search the knowledge store and either synthesize an
        answer from the matching entries or return the fallback.

        Raises:
            InvalidChatMessageError: blank query
            EmbeddingServiceError / StoreUnavailableError / LLMServiceError:
                a collaborator failed or timed out
        """
        query = (query or "").strip()
        if not query:
            raise InvalidChatMessageError()

        vector = await self._embed(query)
        matches = self._search(vector)

        top_similarity = matches[0].similarity if matches else None
        if top_similarity is None or top_similarity < self.similarity_threshold:
            log_chat_retrieval(matched=False, top_similarity=top_similarity, candidates=len(matches))
            return ChatResult(response=self.fallback_message, matched=False)

        relevant = [m for m in matches if m.similarity >= self.similarity_threshold]
        context = format_context([m.cleaned_content for m in relevant])
        response = await self._synthesize(query, context)

        log_chat_retrieval(
            matched=True,
            top_similarity=top_similarity,
            candidates=len(matches),
            used=len(relevant),
        )
        return ChatResult(response=response, matched=True, similarity=top_similarity)

    async def _embed(self, query: str) -> List[float]:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.embedder.embed, query),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingServiceError(f"timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"Error embedding chat query: {e}", exc_info=True)
            raise EmbeddingServiceError(str(e)) from e

    def _search(self, vector: List[float]) -> List[KnowledgeMatch]:
        try:
            return self.store.search(vector, top_k=self.top_k)
        except Exception as e:
            logger.error(f"Error searching knowledge store: {e}", exc_info=True)
            raise StoreUnavailableError(str(e)) from e

    async def _synthesize(self, query: str, context: str) -> str:
        try:
            return await asyncio.wait_for(self.llm.synthesize(query, context), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise LLMServiceError(f"timed out after {self.timeout}s") from e
        except Exception as e:
            logger.error(f"Error synthesizing chat response: {e}", exc_info=True)
            raise LLMServiceError(str(e)) from e


# Global instance
_chatbot_service: Optional[ChatbotService] = None


def get_chatbot_service() -> ChatbotService:
    """Get or create the chatbot service singleton"""
    global _chatbot_service
    if _chatbot_service is None:
        _chatbot_service = ChatbotService(
            embedder=get_embedding_service(),
            llm=get_llm_client(),
            store=get_knowledge_store(),
        )
    return _chatbot_service
