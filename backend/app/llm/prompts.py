"""Prompt templates for document extraction and decision synthesis."""

from backend.app.models.decision import Decision

EXTRACTION_PROMPT = """You are an AI assistant inside "Signal", a decision sensemaking platform.
Below is raw text extracted from a file named: {file_name}.

TASK:
Convert the provided extracted document text into a set of short, atomic "Decision Inputs" that
can be stored individually in the app. The goal is to break long documents into smaller inputs
like the ones a user would manually add (Note, Evidence, Concern, Assumption, Question, Link).

HARD REQUIREMENTS:
1) Keep each input short:
   - Max {max_chars} characters per input text (roughly 1-2 sentences).
   - One idea per input.
2) Every input must be grounded in the document text:
   - No generic statements.
   - If something is implied but not explicitly stated, label it as an Assumption.
3) De-duplicate:
   - Do not repeat the same point in different words.
4) Output must be machine-readable JSON only.
5) If the text is very long, prioritize the most decision-relevant items first.

INPUT TYPES (choose one per item):
- "note": neutral observation or context
- "evidence": a claim backed by stated facts, metrics, or described findings
- "concern": a risk, worry, or potential downside
- "assumption": an unstated belief or inference that, if wrong, changes the decision
- "question": a gap or missing piece of information needed for the decision
- "link": only if a URL appears in the text

QUALITY BAR (IMPORTANT):
- Prefer inputs that influence: MVP scope, user needs, constraints, success metrics, trade-offs.
- Avoid vague corporate language.
- Make each input useful for generating tensions and options later.

RAW TEXT:
{raw_text}

Return your response as a JSON object with this exact structure:
{{
  "document_summary": "string",
  "inputs": [
    {{
      "type": "note|concern|evidence|assumption|question|link",
      "text": "string (max {max_chars} chars)",
      "source_ref": "string",
      "confidence": "high|medium|low"
    }}
  ]
}}"""

ANALYSIS_SYSTEM_PROMPT = """You are Signal, an AI decision support platform for product teams.
Analyze the decision context and atomic inputs you are given.

CRITICAL INSTRUCTIONS:
1. CONFLICT HANDLING: Surface conflicts between evidence and assumptions.
2. NO RECOMMENDATION: Do not choose a side. Surface tensions and strategic stances.
3. TRACEABILITY: Reference the author/source where relevant.
4. TONE: Direct, thoughtful, product-friendly.

REQUIRED OUTPUT SECTIONS:
1) SITUATION SUMMARY (3-5 sentences)
2) WHY IT'S HARD (2-4 sentences)
3) FORCES & CONSTRAINTS
4) HIDDEN ASSUMPTIONS
5) CRUCIAL UNKNOWNS
6) FUNDAMENTAL TENSIONS
7) STRATEGIC STANCES
8) FILE EXTRACTIONS (Summary list of evidence found)

Output ONLY valid JSON with this exact structure:
{
  "situationSummary": "string",
  "whyHard": "string",
  "forces": ["string"],
  "constraints": ["string"],
  "hiddenAssumptions": ["string"],
  "unknowns": ["string"],
  "tensions": [
    {"nameX": "string", "nameY": "string", "reasonX": "string", "reasonY": "string",
     "gainIfX": "string", "gainIfY": "string", "lossIfX": "string", "lossIfY": "string"}
  ],
  "options": [
    {"name": "string", "description": "string", "tradeoffs": "string",
     "commitmentDo": ["string"], "commitmentDont": ["string"], "futureImpact": "string"}
  ],
  "fileExtractions": [
    {"type": "Evidence|Assumption|Concern|Note|Question", "statement": "string",
     "source_citation": "string", "confidence": "High|Medium|Low"}
  ]
}"""


def build_extraction_prompt(file_name: str, raw_text: str, max_text_chars: int, max_chars: int) -> str:
    """Render the extraction prompt, keeping only the head of very long documents."""
    return EXTRACTION_PROMPT.format(
        file_name=file_name,
        raw_text=raw_text[:max_text_chars],
        max_chars=max_chars,
    )


def format_inputs(decision: Decision) -> str:
    """Render the input log as one line per input."""
    return "\n".join(
        f"[{i.type.value.upper()}] {i.author} (Source: {i.source_reference or 'Manual'}): {i.content}"
        for i in decision.inputs
    )


def build_analysis_context(decision: Decision) -> str:
    """Render the decision question, context and input log."""
    lines = [
        f"DECISION QUESTION: {decision.title}",
        f"CONTEXT: {decision.context}",
        "",
        "INPUT LOG (Structured from manual notes and file extractions):",
        format_inputs(decision) or "No inputs provided.",
    ]
    return "\n".join(lines)
