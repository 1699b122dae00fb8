"""Pytest configuration and fixtures."""

import pytest

from pdfword.datauri import encode_data_uri
from pdfword.errors import ModelAttemptError
from pdfword.models import PDF_MEDIA_TYPE, ExtractionResult
from pdfword.storage import KeyStore, create_store_engine

MINIMAL_PDF = b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>
endobj
trailer
<< /Size 4 /Root 1 0 R >>
%%EOF"""


class FakeModel:
    """Extraction model returning a canned response or raising."""

    def __init__(self, name, result=None, error=None):
        self.name = name
        self.result = result
        self.error = error
        self.calls = 0

    def extract(self, document):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def pdf_uri():
    """Data URI of a minimal PDF."""
    return encode_data_uri(MINIMAL_PDF, PDF_MEDIA_TYPE)


@pytest.fixture
def pdf_file(tmp_path):
    """Minimal PDF written to disk."""
    path = tmp_path / "input.pdf"
    path.write_bytes(MINIMAL_PDF)
    return path


@pytest.fixture
def sample_result():
    """Extraction result touching every structural kind."""
    return ExtractionResult.model_validate(
        {
            "content": [
                {"text": "Body text", "bold": True, "color": "#112233", "fontSize": 14},
                {"text": "Plain"},
            ],
            "structure": [
                {"type": "heading", "level": 2, "items": ["Quarterly", "Report"]},
                {"type": "list", "items": ["one", "two"]},
                {"type": "table", "rows": [["a", "b"], ["c"]]},
                {"type": "image", "imageDescription": "A bar chart"},
                {"type": "page_break"},
                {"type": "paragraph", "items": ["Closing words"]},
            ],
        }
    )


@pytest.fixture
def ok_model(sample_result):
    return FakeModel("primary", result=sample_result)


@pytest.fixture
def failing_model():
    return FakeModel("primary", error=ModelAttemptError("quota exceeded"))


@pytest.fixture
def key_store(tmp_path):
    """Key store backed by a throwaway SQLite file."""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'keys.db'}")
    yield KeyStore(engine)
    engine.dispose()
