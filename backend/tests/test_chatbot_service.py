"""
Retrieval engine tests. Similarities come from FakeEmbedder's bag-of-words
vectors, so matching text scores close to 1 and unrelated text close to 0.
"""
import pytest

from campusqa.core.exceptions import (
    EmbeddingServiceError,
    InvalidChatMessageError,
    LLMServiceError,
    StoreUnavailableError,
)
from campusqa.services.chatbot_service import ChatbotService, ChatResult


FALLBACK = "I don't have verified information about that yet."


def _add(db, store, embedder, text):
    return store.add_entry(
        db,
        cleaned_content=text,
        embedding=embedder.embed(text),
        embedding_model=embedder.model_name,
    )


@pytest.fixture
def chatbot(embedder, llm, store):
    return ChatbotService(
        embedder=embedder,
        llm=llm,
        store=store,
        similarity_threshold=0.5,
        top_k=3,
        timeout=5,
        fallback_message=FALLBACK,
    )


class TestChatbotAnswer:

    @pytest.mark.asyncio
    async def test_empty_store_returns_fallback_without_llm(self, chatbot, llm):
        result = await chatbot.answer("When is the library open?")

        assert result == ChatResult(response=FALLBACK, matched=False)
        assert llm.synthesize_calls == []

    @pytest.mark.asyncio
    async def test_weak_match_returns_fallback_without_llm(self, db, chatbot, store, embedder, llm):
        _add(db, store, embedder, "The cafeteria menu changes weekly.")

        result = await chatbot.answer("Where do I get a parking permit?")

        assert result.matched is False
        assert result.response == FALLBACK
        assert result.similarity is None
        assert llm.synthesize_calls == []

    @pytest.mark.asyncio
    async def test_strong_match_synthesizes_from_relevant_entries_only(self, db, chatbot, store, embedder, llm):
        _add(db, store, embedder, "The library is open until 6pm on Saturday.")
        _add(db, store, embedder, "The shuttle bus leaves from the north gate.")

        result = await chatbot.answer("Is the library open on Saturday?")

        assert result.matched is True
        assert result.similarity > 0.9
        assert len(llm.synthesize_calls) == 1
        query, context = llm.synthesize_calls[0]
        assert query == "Is the library open on Saturday?"
        assert "[1] The library is open until 6pm on Saturday." in context
        assert "shuttle" not in context
        assert result.response.startswith("From verified campus knowledge:")

    @pytest.mark.asyncio
    async def test_similarity_at_threshold_counts_as_match(self, db, store, embedder, llm):
        # cosine([1,1,0,..,.01], [1,0,..,1,..,.01]) is just above 0.5
        _add(db, store, embedder, "library shuttle")
        chatbot = ChatbotService(embedder, llm, store, similarity_threshold=0.5, top_k=3, timeout=5)

        result = await chatbot.answer("library open")

        assert result.matched is True
        assert result.similarity == pytest.approx(0.5, abs=1e-3)

    @pytest.mark.asyncio
    async def test_top_k_limits_context(self, db, store, embedder, llm):
        for hours in ("8am", "9am", "10am"):
            _add(db, store, embedder, f"The library is open on Saturday from {hours}.")
        chatbot = ChatbotService(embedder, llm, store, similarity_threshold=0.5, top_k=2, timeout=5)

        await chatbot.answer("library saturday")

        _, context = llm.synthesize_calls[0]
        assert "[2]" in context
        assert "[3]" not in context

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   ", None])
    async def test_blank_query_is_rejected(self, chatbot, message):
        with pytest.raises(InvalidChatMessageError):
            await chatbot.answer(message)

    @pytest.mark.asyncio
    async def test_llm_failure_surfaces_as_service_error(self, db, chatbot, store, embedder, llm):
        _add(db, store, embedder, "The library is open until 6pm on Saturday.")

        async def broken_synthesize(query, context):
            raise RuntimeError("provider down")

        llm.synthesize = broken_synthesize

        with pytest.raises(LLMServiceError) as exc_info:
            await chatbot.answer("library saturday")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_embedding_failure_surfaces_as_service_error(self, chatbot, embedder):
        def broken_embed(text):
            raise RuntimeError("model not loaded")

        embedder.embed = broken_embed

        with pytest.raises(EmbeddingServiceError):
            await chatbot.answer("library saturday")

    @pytest.mark.asyncio
    async def test_store_failure_surfaces_as_unavailable(self, chatbot, store, monkeypatch):
        def broken_search(vector, top_k=3):
            raise ConnectionError("qdrant down")

        monkeypatch.setattr(store, "search", broken_search)

        with pytest.raises(StoreUnavailableError):
            await chatbot.answer("library saturday")


class TestChatResult:

    def test_fallback_omits_similarity(self):
        assert ChatResult(response=FALLBACK, matched=False).to_dict() == {
            "response": FALLBACK,
            "matched": False,
        }

    def test_match_includes_similarity(self):
        data = ChatResult(response="Open till 6pm.", matched=True, similarity=0.83).to_dict()
        assert data["similarity"] == 0.83
