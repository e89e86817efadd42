"""Shared pytest fixtures for Dynamic Site RAG tests."""

import pytest

from dynamic_site_rag.config import ServerConfig
from dynamic_site_rag.rag.config import RAGConfig
from dynamic_site_rag.rag.documents import Document, DocumentStore
from dynamic_site_rag.rag.embeddings import EmbeddingClient

from .fakes import FakeEmbeddings


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without browser, network or model downloads")


@pytest.fixture
def default_config():
    """Provide a default ServerConfig instance for testing."""
    return ServerConfig()


@pytest.fixture
def rag_config():
    """RAGConfig with a single test selector and no progress bars."""
    return RAGConfig(
        show_progress=False,
        interactive_selectors={"buttons": ["button"], "tabs": ["[role='tab']"]},
    )


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def embedding_client(fake_embeddings):
    return EmbeddingClient(fake_embeddings, timeout=5.0)


@pytest.fixture
def sample_documents():
    """Provide the two-document auth/pricing corpus."""
    return [
        Document(url="https://docs.example.com/auth", title="Auth Guide", content="login with OAuth tokens"),
        Document(url="https://docs.example.com/pricing", title="Pricing", content="monthly subscription cost"),
    ]


@pytest.fixture
def populated_store(sample_documents, fake_embeddings):
    store = DocumentStore()
    for doc in sample_documents:
        store.append(doc, fake_embeddings.embed_query(f"{doc.title} {doc.content}"))
    return store
