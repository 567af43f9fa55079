"""
Shared fixtures: in-memory SQLite database, in-memory Qdrant collection and
deterministic stand-ins for the embedding and LLM collaborators.
"""
import itertools
import os
import re

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from qdrant_client import QdrantClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from campusqa.core.database import Base
from campusqa.models import Post, PostStatus, PostType, User
from campusqa.services.approval_service import ApprovalPromoter
from campusqa.services.chatbot_service import ChatbotService
from campusqa.services.knowledge_store import KnowledgeStore


VOCAB = [
    "library", "open", "saturday", "hours",
    "shuttle", "bus", "gate", "engineering",
    "parking", "permit", "cafeteria", "menu",
    "id", "card", "registrar",
]


class FakeEmbedder:
    """Bag-of-words vectors over a small vocabulary.

    The last dimension is a small constant so that unrelated text never
    produces a zero vector.
    """

    model_name = "fake-bow-v1"
    dimension = len(VOCAB) + 1

    def __init__(self):
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(w)) for w in VOCAB] + [0.01]

    def embed_many(self, texts):
        return [self.embed(t) for t in texts]


class FakeLLM:
    """Echoes its input; never adds information."""

    def __init__(self):
        self.clean_calls = []
        self.synthesize_calls = []

    async def clean(self, question=None, answer=None, content=None):
        self.clean_calls.append({"question": question, "answer": answer, "content": content})
        if question is not None and answer is not None:
            return f"Question: {question.strip()}\nAnswer: {answer.strip()}"
        return content.strip()

    async def synthesize(self, query, context):
        self.synthesize_calls.append((query, context))
        return f"From verified campus knowledge: {context}"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None):
        user = User(username=username or f"student{next(counter)}")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_post(db, make_user):
    def _make(post_type=PostType.POST, content="Some campus post", parent=None, author=None):
        author = author or make_user()
        post = Post(
            content=content,
            author_id=author.id,
            type=post_type,
            parent_id=parent.id if parent is not None else None,
            vote_count=0,
            status=PostStatus.PENDING,
            reply_count=0,
        )
        db.add(post)
        if parent is not None:
            parent.reply_count += 1
        db.commit()
        db.refresh(post)
        return post

    return _make


@pytest.fixture
def question(make_post):
    return make_post(PostType.QUESTION, content="When is the library open on Saturday?")


@pytest.fixture
def answer(make_post, question):
    return make_post(
        PostType.ANSWER,
        content="The library is open 10am to 6pm on Saturday.",
        parent=question,
    )


@pytest.fixture
def voters(make_user):
    return [make_user() for _ in range(8)]


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def store():
    return KnowledgeStore(client=QdrantClient(location=":memory:"), collection_name="test_knowledge")


@pytest.fixture
def promoter(embedder, llm, store, session_factory):
    return ApprovalPromoter(
        embedder=embedder,
        llm=llm,
        store=store,
        session_factory=session_factory,
        timeout=5,
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
    )
