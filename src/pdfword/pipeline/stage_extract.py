"""Extraction Stage - Turn a PDF into an ExtractionResult via AI models.

Models are attempted strictly one after another in priority order
(primary, then secondary). Each attempt must return output that validates
against ``ExtractionResult``; a schema mismatch, a transport error and a
timeout are all the same thing here: a failed attempt. There are no retries
within an attempt, only substitution by the next model.
"""

import base64
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, Protocol, Sequence

from langchain.chat_models import init_chat_model
from langchain_core.exceptions import OutputParserException
from langchain_core.messages import HumanMessage
from pydantic import ValidationError

from pdfword.config import settings
from pdfword.datauri import read_source
from pdfword.errors import (
    AttemptFailure,
    ExtractionFailed,
    ModelAttemptError,
    SchemaValidationError,
    SourceError,
)
from pdfword.models import PDF_MEDIA_TYPE, ExtractionResult, mask_key
from pdfword.storage.key_store import KeyRotationProvider

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Analyze the following PDF document COMPLETELY. Your task is to extract ALL content while preserving EXACT structure, layout, and styling.

For TEXT content, provide:
1. The exact text content
2. Bold styling (true/false)
3. Italic styling (true/false)
4. Font size in points
5. Color in hex format (e.g., #000000)
6. Text alignment (left/center/right/justify)
7. Position on page (x, y coordinates and page number)

For DOCUMENT STRUCTURE, identify and extract:
1. Headings (with level 1-6)
2. Paragraphs
3. Lists (bullet/numbered with all items)
4. Tables (with all rows and cells)
5. Images (provide detailed descriptions)
6. Page breaks and section breaks
7. Headers and footers
8. Any visual elements, charts, or diagrams

Return BOTH the structured text content AND the complete document structure. Preserve the EXACT order and layout as it appears in the original PDF.

IMPORTANT: Extract EVERYTHING - do not miss any text, images, or design elements. The goal is perfect 1:1 conversion."""

# Providers reject published keys with "API key was reported as leaked"
LEAKED_KEY_MARKER = "leaked"


class ExtractionModel(Protocol):
    """One model attempt."""

    name: str

    def extract(self, document: bytes) -> ExtractionResult: ...


def build_messages(document: bytes, mime_type: str = PDF_MEDIA_TYPE) -> list[HumanMessage]:
    """Prompt plus the document as a base64 file content block."""
    return [
        HumanMessage(
            content=[
                {"type": "text", "text": EXTRACTION_PROMPT},
                {
                    "type": "file",
                    "source_type": "base64",
                    "mime_type": mime_type,
                    "data": base64.b64encode(document).decode("ascii"),
                },
            ]
        )
    ]


def validate_payload(raw: Any) -> ExtractionResult:
    """Validate a raw model response against the extraction schema."""
    if raw is None:
        raise ModelAttemptError("The AI failed to process the PDF content.")
    if isinstance(raw, ExtractionResult):
        return raw
    if isinstance(raw, dict):
        # include_raw=True responses wrap the parsed payload
        if "parsed" in raw and "raw" in raw:
            if raw.get("parsing_error") is not None:
                raise SchemaValidationError(str(raw["parsing_error"]))
            return validate_payload(raw["parsed"])
        try:
            return ExtractionResult.model_validate(raw)
        except ValidationError as exc:
            raise SchemaValidationError(
                f"Response did not match extraction schema: {exc}"
            ) from exc
    raise SchemaValidationError(
        f"Unexpected response type from model: {type(raw).__name__}"
    )


def is_leaked_key_error(message: str) -> bool:
    return LEAKED_KEY_MARKER in message.lower()


class LangChainExtractionModel:
    """Extraction attempt backed by a LangChain chat model.

    The model is built per attempt so that the credential picked from the
    rotation store applies to exactly this request.
    """

    def __init__(
        self,
        model_name: str,
        key_provider: Optional[KeyRotationProvider] = None,
        provider: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        chat_model_factory: Callable[..., Any] = init_chat_model,
    ):
        self.name = model_name
        self.key_provider = key_provider
        self.provider = provider or settings.llm_provider
        self.temperature = (
            settings.llm_temperature if temperature is None else temperature
        )
        self.timeout = timeout or settings.llm_timeout_seconds
        self.chat_model_factory = chat_model_factory

    def _build_chat_model(self, api_key: Optional[str]) -> Any:
        kwargs: dict[str, Any] = {
            "temperature": self.temperature,
            "timeout": self.timeout,
            "max_retries": 0,
        }
        if api_key:
            kwargs["api_key"] = api_key
        return self.chat_model_factory(self.name, **kwargs)

    def extract(self, document: bytes) -> ExtractionResult:
        api_key = None
        if self.key_provider is not None:
            api_key = self.key_provider.current_credential(self.provider)
            if api_key:
                logger.debug("Using %s key %s", self.provider, mask_key(api_key))

        structured = self._build_chat_model(api_key).with_structured_output(
            ExtractionResult
        )
        try:
            raw = structured.invoke(build_messages(document))
        except (OutputParserException, ValidationError) as exc:
            raise SchemaValidationError(str(exc)) from exc
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            if api_key and self.key_provider is not None and is_leaked_key_error(message):
                self.key_provider.report_leaked(self.provider, api_key)
            raise ModelAttemptError(message) from exc

        return validate_payload(raw)


class ExtractionOrchestrator:
    """Runs model attempts in priority order until one succeeds."""

    def __init__(
        self,
        models: Sequence[ExtractionModel],
        timeout: Optional[float] = None,
    ):
        self.models = list(models)
        self.timeout = timeout or settings.llm_timeout_seconds

    def _attempt(self, model: ExtractionModel, document: bytes) -> ExtractionResult:
        """Run one attempt on a worker thread, bounded by the timeout.

        A timed-out call is abandoned, not interrupted: its worker keeps
        running until the provider client gives up. Models built by
        ``build_orchestrator`` get the same value as their client-side
        ``timeout``, which is what bounds how long that worker lingers.
        """
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(model.extract, document)
            try:
                result = future.result(timeout=self.timeout)
            except FutureTimeoutError as exc:
                raise ModelAttemptError(
                    f"Model call timed out after {self.timeout:g}s"
                ) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return validate_payload(result)

    def extract(self, source_uri: str) -> ExtractionResult:
        """Extract a validated result, or raise ``ExtractionFailed``.

        Args:
            source_uri: ``data:`` URI, ``file://`` URI or path of the PDF

        Returns:
            ExtractionResult from the first model that succeeded
        """
        try:
            document = read_source(source_uri)
        except SourceError as exc:
            raise ExtractionFailed([AttemptFailure("source", str(exc), exc)]) from exc

        attempts: list[AttemptFailure] = []
        last_error: Optional[BaseException] = None

        for model in self.models:
            logger.info("Extracting with %s", model.name)
            try:
                result = self._attempt(model, document)
            except Exception as exc:
                message = str(exc) or type(exc).__name__
                attempts.append(AttemptFailure(model.name, message, exc))
                last_error = exc
                logger.warning("Model %s failed: %s", model.name, message)
                continue

            logger.info(
                "Model %s returned %d structural nodes, %d content items",
                model.name,
                len(result.structure),
                len(result.content),
            )
            return result

        raise ExtractionFailed(attempts) from last_error


def build_orchestrator(
    key_provider: Optional[KeyRotationProvider] = None,
    model_names: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
) -> ExtractionOrchestrator:
    """Orchestrator over the configured model chain.

    The attempt timeout and the client-side request timeout are one value.
    """
    names = list(model_names) if model_names is not None else settings.extraction_models
    timeout = timeout or settings.llm_timeout_seconds
    return ExtractionOrchestrator(
        [
            LangChainExtractionModel(name, key_provider=key_provider, timeout=timeout)
            for name in names
        ],
        timeout=timeout,
    )
