"""
Approval promoter: copies an approved Q&A pair into the knowledge store.

``promote`` is dispatched after the vote transaction commits and never
raises; a failed promotion is logged and leaves the vote untouched. The same
clean + embed + insert path seeds operator-curated facts.
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campusqa.core.config import settings
from campusqa.core.database import SessionLocal
from campusqa.core.structured_logging import log_promotion
from campusqa.models.post import Post
from campusqa.services.embedding_service import get_embedding_service
from campusqa.services.knowledge_store import KnowledgeStore, get_knowledge_store
from campusqa.services.llm_client import get_llm_client

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    inserted: int = 0
    skipped: int = 0
    failed: int = 0


class ApprovalPromoter:
    """Cleans, embeds and stores approved answers and seeded facts"""

    def __init__(
        self,
        embedder,
        llm,
        store: KnowledgeStore,
        session_factory: Callable[[], Session] = SessionLocal,
        timeout: Optional[float] = None
    ):
        self.embedder = embedder
        self.llm = llm
        self.store = store
        self.session_factory = session_factory
        self.timeout = timeout if timeout is not None else settings.PROMOTION_TIMEOUT_SECONDS

    async def promote(self, answer_id: int, question_id: int) -> None:
        """Fire-and-forget promotion of an approved answer. Never raises."""
        log_promotion("started", source_post_id=answer_id, question_id=question_id)
        try:
            await self._promote(answer_id, question_id)
        except asyncio.TimeoutError:
            log_promotion("failed", source_post_id=answer_id, error=f"timed out after {self.timeout}s")
        except Exception as e:
            log_promotion("failed", source_post_id=answer_id, error=str(e))
            logger.error(f"Promotion of answer {answer_id} failed", exc_info=True)

    async def _promote(self, answer_id: int, question_id: int) -> None:
        db = self.session_factory()
        try:
            if self.store.exists_for_source_post(db, answer_id):
                log_promotion("skipped", source_post_id=answer_id, reason="already promoted")
                return

            answer = db.get(Post, answer_id)
            question = db.get(Post, question_id)
            if answer is None or question is None:
                log_promotion(
                    "failed",
                    source_post_id=answer_id,
                    error="answer or question post not found",
                )
                return
            question_text = question.content
            answer_text = answer.content
            # Release the read transaction while waiting on external services
            db.rollback()

            cleaned = await self._bounded(self.llm.clean(question=question_text, answer=answer_text))
            embedding = await self._bounded(asyncio.to_thread(self.embedder.embed, cleaned))

            try:
                entry = self.store.add_entry(
                    db,
                    cleaned_content=cleaned,
                    embedding=embedding,
                    embedding_model=self.embedder.model_name,
                    source_post_id=answer_id,
                    raw_content=f"Question: {question_text}\nAnswer: {answer_text}",
                )
            except IntegrityError:
                log_promotion("skipped", source_post_id=answer_id, reason="concurrent promotion")
                return

            log_promotion("stored", source_post_id=answer_id, entry_id=entry.id)
        finally:
            db.close()

    async def seed(self, entries: Iterable[Any]) -> SeedReport:
        """
        Clean, embed and store operator-curated facts (source_post_id NULL).

        Entries whose raw text already exists verbatim are skipped, so the
        seed can be re-run safely. A failing entry is logged and counted; the
        rest of the batch still runs.
        """
        report = SeedReport()
        db = self.session_factory()
        try:
            for raw in entries:
                if not isinstance(raw, str) or not raw.strip():
                    logger.warning(f"Skipping invalid entry: {raw!r}")
                    report.skipped += 1
                    continue

                raw_content = raw.strip()
                if self.store.exists_for_raw_content(db, raw_content):
                    logger.info(f"Already exists, skipping: \"{raw_content[:60]}\"")
                    report.skipped += 1
                    continue

                try:
                    cleaned = await self._bounded(self.llm.clean(content=raw_content))
                    embedding = await self._bounded(asyncio.to_thread(self.embedder.embed, cleaned))
                    self.store.add_entry(
                        db,
                        cleaned_content=cleaned,
                        embedding=embedding,
                        embedding_model=self.embedder.model_name,
                        source_post_id=None,
                        raw_content=raw_content,
                    )
                    report.inserted += 1
                except Exception as e:
                    logger.error(f"Failed to seed entry \"{raw_content[:60]}\": {e}")
                    report.failed += 1
        finally:
            db.close()

        logger.info(f"Seeding done: {report.inserted} inserted, {report.skipped} skipped, {report.failed} failed")
        return report

    async def _bounded(self, awaitable: Awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.timeout)


# Global instance
_approval_promoter: Optional[ApprovalPromoter] = None


def get_approval_promoter() -> ApprovalPromoter:
    """Get or create the approval promoter singleton"""
    global _approval_promoter
    if _approval_promoter is None:
        _approval_promoter = ApprovalPromoter(
            embedder=get_embedding_service(),
            llm=get_llm_client(),
            store=get_knowledge_store(),
        )
    return _approval_promoter
