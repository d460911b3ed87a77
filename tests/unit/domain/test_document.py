"""Unit tests for the Document entity."""

from pydantic import ValidationError
import pytest

from docs_search_engine.domain.model import Document


@pytest.mark.unit
def test_document_defaults():
    document = Document(location="index.html#")

    assert document.id is None
    assert document.to_record() == {"location": "index.html#", "page": "", "title": "", "category": "", "text": ""}


@pytest.mark.unit
def test_with_id_returns_copy():
    document = Document(location="a", title="A", text="body")

    numbered = document.with_id(3)

    assert numbered.id == 3
    assert document.id is None
    assert numbered.to_record() == document.to_record()


@pytest.mark.unit
def test_document_is_immutable():
    document = Document(location="a")

    with pytest.raises(AttributeError):
        document.title = "changed"


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [
        {"location": ""},
        {"location": "   "},
        {"location": "a", "id": -1},
        {"location": "a", "text": "bad \ud800 text"},
        {"location": "\udc00"},
    ],
)
def test_document_validation(kwargs):
    with pytest.raises(ValidationError):
        Document(**kwargs)
