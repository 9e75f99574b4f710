"""Tests for the LLM gateway.

All tests are deterministic and do not make real network calls.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError
from pydantic import SecretStr

from backend.app.config import Settings
from backend.app.errors import AnalysisError, ExtractionError
from backend.app.llm.client import DeterministicStubClient, OpenAIClient, get_llm_client
from backend.app.llm.prompts import build_analysis_context, build_extraction_prompt, format_inputs
from backend.app.models.common import Confidence, InputType
from backend.app.models.decision import Decision


def _mock_completion(content: str | None) -> AsyncMock:
    """OpenAI SDK double whose chat completion returns `content`."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content

    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(return_value=mock_response)
    return mock_openai_client


@pytest.fixture
def decision(make_decision, make_input) -> Decision:
    return make_decision(
        inputs=[
            make_input("Churn rose 4%", input_type=InputType.evidence),
            make_input("Will enterprise accept a 6-month runway?", input_type=InputType.question),
            make_input("Customers read the changelog", input_type=InputType.assumption),
        ]
    )


@pytest.mark.asyncio
async def test_stub_extracts_sentences_as_notes() -> None:
    """Test that DeterministicStubClient turns the first sentences into low-confidence notes."""
    client = DeterministicStubClient()

    result = await client.extract_inputs(
        file_name="memo.txt", raw_text="First point. Second point! Third?"
    )

    assert result.document_summary == "memo.txt: First point."
    assert [i.text for i in result.inputs] == ["First point.", "Second point!", "Third?"]
    assert {i.type for i in result.inputs} == {InputType.note}
    assert {i.confidence for i in result.inputs} == {Confidence.low}
    assert result.inputs[1].source_ref == "Sentence 2"


@pytest.mark.asyncio
async def test_stub_extraction_is_deterministic_and_bounded() -> None:
    client = DeterministicStubClient()
    text = " ".join(f"Sentence number {n}." for n in range(12))

    first = await client.extract_inputs(file_name="a.txt", raw_text=text)
    second = await client.extract_inputs(file_name="a.txt", raw_text=text)

    assert first == second
    assert len(first.inputs) == DeterministicStubClient.max_inputs


@pytest.mark.asyncio
async def test_stub_extraction_of_empty_text_raises() -> None:
    with pytest.raises(ExtractionError):
        await DeterministicStubClient().extract_inputs(file_name="blank.txt", raw_text="   ")


@pytest.mark.asyncio
async def test_stub_analysis_summarizes_inputs(decision: Decision) -> None:
    analysis = await DeterministicStubClient().analyze_decision(decision=decision)

    assert decision.title in analysis.situation_summary
    assert "3 recorded input(s)" in analysis.situation_summary
    assert analysis.unknowns == ["Will enterprise accept a 6-month runway?"]
    assert analysis.hidden_assumptions == ["Customers read the changelog"]


def test_format_inputs_renders_type_author_and_source(make_decision, make_input) -> None:
    item = make_input("Budget is capped").model_copy(update={"source_reference": "Page 4"})
    manual = make_input("Gut feel", input_type=InputType.note)

    rendered = format_inputs(make_decision(inputs=[item, manual]))

    assert rendered.splitlines() == [
        "[EVIDENCE] Product Lead (Source: Page 4): Budget is capped",
        "[NOTE] Product Lead (Source: Manual): Gut feel",
    ]


def test_analysis_context_without_inputs(make_decision) -> None:
    context = build_analysis_context(make_decision())

    assert "DECISION QUESTION: Should we deprecate the legacy API in Q3?" in context
    assert context.endswith("No inputs provided.")


def test_extraction_prompt_truncates_long_documents() -> None:
    prompt = build_extraction_prompt("big.txt", "a" * 50 + "b" * 50, max_text_chars=50, max_chars=240)

    assert "a" * 50 in prompt
    assert "b" not in prompt.split("RAW TEXT:")[1].split("Return your response")[0]
    assert "Max 240 characters per input" in prompt
    assert '"document_summary": "string"' in prompt


@pytest.mark.asyncio
async def test_openai_extract_parses_json_reply() -> None:
    """Test that OpenAIClient calls the API in JSON mode and coerces the reply."""
    payload = {
        "document_summary": "Q3 plan",
        "inputs": [
            {"type": "Concern", "text": "Support load will spike", "source_ref": "Page 2", "confidence": "HIGH"},
            {"type": "rumor", "text": "x" * 400},
        ],
    }
    mock_openai_client = _mock_completion(json.dumps(payload))
    client = OpenAIClient(api_key="test_key")
    client.client = mock_openai_client

    result = await client.extract_inputs(file_name="plan.pdf", raw_text="text")

    mock_openai_client.chat.completions.create.assert_called_once()
    kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["model"] == "gpt-4o"
    assert "plan.pdf" in kwargs["messages"][0]["content"]

    assert result.document_summary == "Q3 plan"
    assert result.inputs[0].type == InputType.concern
    assert result.inputs[0].confidence == Confidence.high
    assert result.inputs[1].type == InputType.note
    assert len(result.inputs[1].text) == 240


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]"])
async def test_openai_extract_bad_reply_raises(content: str | None) -> None:
    client = OpenAIClient(api_key="test_key")
    client.client = _mock_completion(content)

    with pytest.raises(ExtractionError):
        await client.extract_inputs(file_name="plan.pdf", raw_text="text")


@pytest.mark.asyncio
async def test_openai_extract_api_error_raises() -> None:
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(side_effect=OpenAIError("API error"))
    client = OpenAIClient(api_key="test_key")
    client.client = mock_openai_client

    with pytest.raises(ExtractionError, match="Failed to extract inputs"):
        await client.extract_inputs(file_name="plan.pdf", raw_text="text")


@pytest.mark.asyncio
async def test_openai_analyze_parses_reply(decision: Decision) -> None:
    payload = {
        "situationSummary": "Legacy API sunset",
        "whyHard": "Revenue vs. velocity",
        "forces": ["Eng capacity"],
        "tensions": [{"nameX": "Speed", "nameY": "Trust"}],
    }
    mock_openai_client = _mock_completion(json.dumps(payload))
    client = OpenAIClient(api_key="test_key", model="gpt-4o-mini")
    client.client = mock_openai_client

    analysis = await client.analyze_decision(decision=decision)

    messages = mock_openai_client.chat.completions.create.call_args.kwargs["messages"]
    assert messages[0]["role"] == "system"
    assert "[QUESTION]" in messages[1]["content"]
    assert analysis.situation_summary == "Legacy API sunset"
    assert analysis.tensions[0].name_y == "Trust"


@pytest.mark.asyncio
async def test_openai_analyze_schema_mismatch_raises(decision: Decision) -> None:
    client = OpenAIClient(api_key="test_key")
    client.client = _mock_completion(json.dumps({"forces": ["only forces"]}))

    with pytest.raises(AnalysisError, match="Signal failed to generate a valid analysis."):
        await client.analyze_decision(decision=decision)


@pytest.mark.asyncio
async def test_openai_analyze_api_error_raises(decision: Decision) -> None:
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(side_effect=OpenAIError("timeout"))
    client = OpenAIClient(api_key="test_key")
    client.client = mock_openai_client

    with pytest.raises(AnalysisError):
        await client.analyze_decision(decision=decision)


def test_get_llm_client_returns_stub_when_no_api_key() -> None:
    """Test that get_llm_client returns stub when no API key configured."""
    client = get_llm_client(Settings(openai_api_key=None))

    assert isinstance(client, DeterministicStubClient)


def test_get_llm_client_returns_stub_for_blank_key() -> None:
    assert isinstance(get_llm_client(Settings(openai_api_key=SecretStr(""))), DeterministicStubClient)


def test_get_llm_client_returns_openai_when_api_key_present() -> None:
    """Test that get_llm_client returns OpenAI client when key present."""
    client = get_llm_client(Settings(openai_api_key=SecretStr("test_key"), openai_model="gpt-4o-mini"))

    assert isinstance(client, OpenAIClient)
    assert client.model == "gpt-4o-mini"
