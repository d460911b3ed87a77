"""Shared test fixtures and configuration."""

import os
from pathlib import Path

import pytest

from docs_search_engine.adapters.corpus import adapt_records, load_corpus
from docs_search_engine.domain.model import Document
from docs_search_engine.search.indexer import build_index


FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"

ECOLI_RECORDS = [
    {"location": "a", "page": "p1", "title": "E. coli overview", "category": "c", "text": "E. coli is a bacterium"},
    {"location": "b", "page": "p2", "title": "Other", "category": "c", "text": "B. fragilis is also a bacterium"},
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop DOCS_SEARCH_* variables so Settings always starts from defaults."""
    for key in list(os.environ):
        if key.upper().startswith("DOCS_SEARCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def ecoli_documents() -> list[Document]:
    return [Document(**record) for record in ECOLI_RECORDS]


@pytest.fixture
def ecoli_index(ecoli_documents):
    return build_index(ecoli_documents)


@pytest.fixture
def corpus_path() -> Path:
    """Documenter-style search_index.js bundle for a small package site."""
    return FIXTURES_DIR / "search_index.js"


@pytest.fixture
def corpus_records(corpus_path) -> list[dict]:
    return load_corpus(corpus_path)


@pytest.fixture
def corpus_index(corpus_records):
    return build_index(adapt_records(corpus_records).documents)


@pytest.fixture
def ecoli_records() -> list[dict]:
    return [dict(record) for record in ECOLI_RECORDS]
