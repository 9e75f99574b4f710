"""LLM client for document extraction and decision synthesis with OpenAI integration.

Security: Reads API key from environment only, never hardcoded.
Provides a deterministic stub when no key is present for local use and testing.

Failures are never papered over: a remote error, timeout, empty reply or
unparseable JSON raises ExtractionError / AnalysisError so the caller can
leave its state untouched.
"""

import json
import logging
import re
import time
from typing import Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from backend.app.config import Settings, get_settings
from backend.app.errors import AnalysisError, ExtractionError
from backend.app.llm.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    build_analysis_context,
    build_extraction_prompt,
)
from backend.app.models.analysis import AIAnalysis, ExtractionResult
from backend.app.models.common import MAX_SUGGESTED_INPUT_CHARS
from backend.app.models.decision import Decision
from backend.app.utils.logging import StructuredLLMLogger
from backend.app.utils.metrics import PrometheusLLMMetrics

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    async def extract_inputs(self, *, file_name: str, raw_text: str) -> ExtractionResult:
        """Break a document's text into atomic, reviewable decision inputs.

        Args:
            file_name: Name of the uploaded file (used in the prompt only)
            raw_text: Full extracted text of the document

        Returns:
            ExtractionResult with a document summary and suggested inputs

        Raises:
            ExtractionError: On remote failure or unparseable output
        """
        ...

    async def analyze_decision(self, *, decision: Decision) -> AIAnalysis:
        """Synthesize tensions, options and traceable extractions for a decision.

        Raises:
            AnalysisError: On remote failure or unparseable output
        """
        ...


_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


class DeterministicStubClient:
    """Deterministic stub client (no API key required)."""

    max_inputs = 5

    async def extract_inputs(self, *, file_name: str, raw_text: str) -> ExtractionResult:
        """Turn the first few sentences into notes."""
        sentences = [s.strip() for s in _SENTENCE_RE.split(raw_text.strip()) if s.strip()]
        if not sentences:
            raise ExtractionError(f"No readable text found in {file_name}")

        return ExtractionResult.model_validate(
            {
                "document_summary": f"{file_name}: {sentences[0][:MAX_SUGGESTED_INPUT_CHARS]}",
                "inputs": [
                    {
                        "type": "note",
                        "text": sentence,
                        "source_ref": f"Sentence {index + 1}",
                        "confidence": "low",
                    }
                    for index, sentence in enumerate(sentences[: self.max_inputs])
                ],
            }
        )

    async def analyze_decision(self, *, decision: Decision) -> AIAnalysis:
        """Generate a placeholder synthesis."""
        counts: dict[str, int] = {}
        for item in decision.inputs:
            counts[item.type.value] = counts.get(item.type.value, 0) + 1
        breakdown = ", ".join(f"{count} {kind}" for kind, count in sorted(counts.items()))

        return AIAnalysis(
            situation_summary=(
                f"{decision.title} has {len(decision.inputs)} recorded input(s)"
                f"{f' ({breakdown})' if breakdown else ''} and {len(decision.files)} file(s). "
                "This is a stub synthesis generated without an LLM."
            ),
            why_hard="Stub synthesis: no model was consulted.",
            unknowns=[i.content for i in decision.inputs if i.type.value == "question"][:5],
            hidden_assumptions=[i.content for i in decision.inputs if i.type.value == "assumption"][:5],
        )


class OpenAIClient:
    """OpenAI-backed LLM client using JSON-mode chat completions."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        *,
        temperature: float = 0.7,
        timeout_seconds: float = 60.0,
        extract_max_chars: int = 15000,
    ):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use
            temperature: Sampling temperature
            timeout_seconds: Per-request timeout
            extract_max_chars: Document text beyond this is not sent for extraction
        """
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_seconds)
        self.model = model
        self.temperature = temperature
        self.extract_max_chars = extract_max_chars
        self._log = StructuredLLMLogger()
        self._metrics = PrometheusLLMMetrics()

    async def extract_inputs(self, *, file_name: str, raw_text: str) -> ExtractionResult:
        """Extract atomic inputs using OpenAI API."""
        prompt = build_extraction_prompt(
            file_name, raw_text, self.extract_max_chars, MAX_SUGGESTED_INPUT_CHARS
        )
        try:
            payload = await self._complete_json(
                "extract", [{"role": "user", "content": prompt}]
            )
            return ExtractionResult.model_validate(payload)
        except PydanticValidationError as e:
            self._record_failure("extract", "schema")
            logger.error(f"Extraction output did not match schema: {e}")
            raise ExtractionError("Failed to extract inputs") from e
        except _LLMCallFailed as e:
            raise ExtractionError("Failed to extract inputs") from e

    async def analyze_decision(self, *, decision: Decision) -> AIAnalysis:
        """Generate decision synthesis using OpenAI API."""
        messages = [
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": build_analysis_context(decision)},
        ]
        try:
            payload = await self._complete_json("analyze", messages)
            return AIAnalysis.model_validate(payload)
        except PydanticValidationError as e:
            self._record_failure("analyze", "schema")
            logger.error(f"Analysis output did not match schema: {e}")
            raise AnalysisError("Signal failed to generate a valid analysis.") from e
        except _LLMCallFailed as e:
            raise AnalysisError("Signal failed to generate a valid analysis.") from e

    async def _complete_json(self, operation: str, messages: list[dict[str, str]]) -> dict:
        """Run one JSON-mode completion and parse the reply.

        Raises:
            _LLMCallFailed: On API error, empty reply, or invalid JSON
        """
        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,  # type: ignore[arg-type]
                response_format={"type": "json_object"},
                temperature=self.temperature,
            )
        except OpenAIError as e:
            self._finish(operation, start, "error", type(e).__name__)
            raise _LLMCallFailed(str(e)) from e

        content = response.choices[0].message.content or ""
        if not content.strip():
            self._finish(operation, start, "error", "empty_response")
            raise _LLMCallFailed("No response from OpenAI")

        try:
            payload = json.loads(content)
        except json.JSONDecodeError as e:
            self._finish(operation, start, "error", "invalid_json")
            logger.error(f"OpenAI returned unparseable JSON for {operation}: {content[:200]!r}")
            raise _LLMCallFailed("Unparseable JSON") from e

        if not isinstance(payload, dict):
            self._finish(operation, start, "error", "invalid_json")
            raise _LLMCallFailed("Expected a JSON object")

        self._finish(operation, start, "success")
        return payload

    def _finish(self, operation: str, start: float, outcome: str, reason: str | None = None) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(operation, outcome, latency_ms)
        if reason:
            self._metrics.inc_error(operation, reason)
        self._log.log_call(operation, self.model, outcome, latency_ms, error_reason=reason)

    def _record_failure(self, operation: str, reason: str) -> None:
        self._metrics.inc_error(operation, reason)


class _LLMCallFailed(Exception):
    """Internal: the completion call itself failed or returned garbage."""


def get_llm_client(settings: Settings | None = None) -> LLMClient:
    """Factory function to get appropriate LLM client based on config.

    Returns:
        OpenAIClient if API key is configured, DeterministicStubClient otherwise
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI client for extraction and synthesis")
        return OpenAIClient(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            timeout_seconds=settings.llm_timeout_seconds,
            extract_max_chars=settings.extract_max_chars,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub client")
    return DeterministicStubClient()
