"""Streamlit UI for Signal - decision dashboard, input log, upload review and analysis.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from collections.abc import Callable  # noqa: E402
from datetime import date  # noqa: E402
from typing import Any  # noqa: E402

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from backend.app.config import get_settings  # noqa: E402
from ui.helpers import (  # noqa: E402
    CONFIDENCE_COLORS,
    INPUT_TYPES,
    MAX_SUGGESTED_INPUT_CHARS,
    REVIEW_TYPE_ORDER,
    SignalAPI,
    analysis_sections,
    analyze_button_label,
    build_timeline_rows,
    char_counter,
    error_message,
    split_by_status,
)

# Configuration
BACKEND_URL = get_settings().backend_url
api = SignalAPI(BACKEND_URL)

# Page config
st.set_page_config(page_title="Signal", page_icon="📡", layout="wide")

# Initialize session state
if "decision_id" not in st.session_state:
    st.session_state.decision_id = None
if "error" not in st.session_state:
    st.session_state.error = None


def call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run an API call, stashing a user-facing error instead of crashing the page."""
    try:
        return fn(*args, **kwargs)
    except httpx.HTTPError as e:
        st.session_state.error = error_message(e)
        return None


def open_decision(decision_id: str | None) -> None:
    st.session_state.decision_id = decision_id
    st.session_state.error = None


def forget_review_widgets() -> None:
    # Candidate widgets are keyed by index, which shifts when a candidate is removed
    for key in [k for k in st.session_state if str(k).startswith("cand_")]:
        del st.session_state[key]


# =============================================================================
# DASHBOARD
# =============================================================================
def render_dashboard() -> None:
    st.title("📡 Signal")
    st.markdown("*Decision Support Platform*")

    with st.expander("➕ New Decision"):
        with st.form("create_decision"):
            title = st.text_area(
                "Decision question *",
                placeholder="e.g. Should we deprecate the legacy API in Q3 despite enterprise user friction?",
            )
            context = st.text_area(
                "Context", placeholder="Why is this surfacing now? What's the immediate pressure?"
            )
            col_owner, col_deadline = st.columns(2)
            with col_owner:
                owner = st.text_input("Owner *", placeholder="Name")
            with col_deadline:
                deadline = st.date_input("Deadline *", value=date.today())
            if st.form_submit_button("Initialize Decision Log", type="primary"):
                created = call(api.create_decision, title, context, owner, deadline.isoformat())
                if created:
                    open_decision(created["id"])
                    st.rerun()

    decisions = call(api.list_decisions) or []
    active, completed = split_by_status(decisions)

    st.subheader("Active Decisions")
    if not active:
        st.info("No active decisions. Start one above.")
    for d in active:
        render_card(d)

    if completed:
        st.subheader("Closed Logs")
        for d in completed:
            render_card(d)


def render_card(decision: dict) -> None:
    with st.container(border=True):
        col_text, col_open = st.columns([5, 1])
        with col_text:
            st.markdown(f"**{decision['title']}**")
            st.caption(
                f"Due {decision['deadline']} · {decision['owner']} · {len(decision['inputs'])} inputs"
            )
        with col_open:
            st.button("Open", key=f"open_{decision['id']}", on_click=open_decision, args=(decision["id"],))


# =============================================================================
# DECISION DETAIL
# =============================================================================
def render_detail(decision_id: str) -> None:
    view = call(api.get_view, decision_id)
    if view is None:
        open_decision(None)
        st.rerun()
        return
    decision = view["decision"]

    st.button("← Dashboard", on_click=open_decision, args=(None,))
    st.title(decision["title"])
    st.caption(f"Owner: {decision['owner']} · Due {decision['deadline']} · {decision['status']}")
    st.write(decision.get("context") or "No context provided.")

    col_analyze, col_status, col_refresh = st.columns([2, 1, 1])
    with col_analyze:
        if st.button(analyze_button_label(view), type="primary", disabled=view["analyzing"]):
            with st.spinner("Sensemaking..."):
                call(api.run_analysis, decision_id)
            st.rerun()
    with col_status:
        closing = decision["status"] == "active"
        if st.button("Close Log" if closing else "Re-open"):
            call(api.set_status, decision_id, "completed" if closing else "active")
            st.rerun()
    with col_refresh:
        if st.button("↻ Refresh"):
            st.rerun()

    if view["stale"]:
        col_msg, col_update = st.columns([4, 1])
        with col_msg:
            st.warning("Inputs the last analysis relied on were removed. The analysis may be outdated.")
        with col_update:
            if st.button("Update Now"):
                with st.spinner("Sensemaking..."):
                    call(api.run_analysis, decision_id)
                st.rerun()

    if st.session_state.error:
        st.error(st.session_state.error)

    tab_inputs, tab_analysis, tab_tensions, tab_options = st.tabs(
        ["Inputs", "Analysis & Traceability", "Tensions", "Options"]
    )
    with tab_inputs:
        render_inputs(decision_id, view)
    analysis = decision.get("aiAnalysis")
    with tab_analysis:
        render_analysis(analysis)
    with tab_tensions:
        render_tensions(analysis)
    with tab_options:
        render_options(analysis)


def render_inputs(decision_id: str, view: dict) -> None:
    mode = st.radio("Mode", ["Manual Input", "Smart File Upload"], horizontal=True)

    if mode == "Manual Input":
        with st.form("add_input", clear_on_submit=True):
            content = st.text_area("Input", placeholder="Record a thought, data point, or risk...")
            col_type, col_author = st.columns(2)
            with col_type:
                input_type = st.selectbox("Type", INPUT_TYPES)
            with col_author:
                author = st.text_input("Author", value="Product Lead")
            if st.form_submit_button("Post Input") and content.strip():
                call(api.add_input, decision_id, input_type, content, author)
                st.rerun()
    elif view["review"] is None:
        uploaded = st.file_uploader("Select File", type=["txt", "md", "csv"])
        st.caption("Upload a text document; Signal breaks it into atomic inputs for review.")
        if uploaded is not None and st.button("Extract Inputs"):
            raw_text = uploaded.getvalue().decode("utf-8", errors="replace")
            with st.spinner("Generating atomic inputs..."):
                call(api.upload, decision_id, uploaded.name, raw_text)
            st.rerun()

    if view["review"] is not None:
        render_review(decision_id, view["review"])

    st.divider()
    for row in build_timeline_rows(view):
        render_row(decision_id, row)


def render_row(decision_id: str, row: dict) -> None:
    with st.container(border=True):
        if row["state"] == "pending":
            col_msg, col_undo = st.columns([5, 1])
            with col_msg:
                st.caption(f"~~{row['headline']}~~ deleted. It will be removed shortly.")
            with col_undo:
                if st.button("Undo", key=f"undo_{row['id']}"):
                    if not call(api.undo_delete, decision_id, row["id"]):
                        st.session_state.error = "Too late to undo: the item was already removed."
                    st.rerun()
            return

        col_body, col_action = st.columns([5, 1])
        with col_body:
            st.markdown(f"{row['badge']} **{row['label']}** · {row['headline']} · {row['when']}")
            st.write(row["body"])
            if row["reference"]:
                st.caption(f"Ref: {row['reference']}")
        with col_action:
            if row["state"] == "confirming":
                if st.button("Confirm", key=f"confirm_{row['id']}", type="primary"):
                    call(api.delete_entry, decision_id, row["id"])
                    st.rerun()
                if st.button("Cancel", key=f"keep_{row['id']}"):
                    call(api.dismiss_confirm, decision_id, row["id"])
                    st.rerun()
            elif st.button("🗑", key=f"delete_{row['id']}"):
                call(api.request_confirm, decision_id, row["id"])
                st.rerun()


def render_review(decision_id: str, review: dict) -> None:
    st.subheader(f"Review: {review['file_name']}")
    col_source, col_candidates = st.columns([1, 2])
    with col_source:
        st.markdown("**Document Summary**")
        st.write(review["document_summary"])
        with st.expander("Raw extracted text"):
            st.text(review["raw_text"] or "No readable text found.")

    with col_candidates:
        candidates = review["candidates"]
        if not candidates:
            st.info("All suggestions removed. Confirming adds the file and its summary only.")
        for index, candidate in enumerate(candidates):
            with st.container(border=True):
                col_type, col_conf, col_drop = st.columns([3, 2, 1])
                with col_type:
                    new_type = st.selectbox(
                        "Type",
                        REVIEW_TYPE_ORDER,
                        index=REVIEW_TYPE_ORDER.index(candidate["type"]),
                        key=f"cand_type_{index}",
                    )
                with col_conf:
                    if candidate.get("confidence"):
                        color = CONFIDENCE_COLORS.get(candidate["confidence"], "gray")
                        st.markdown(f":{color}[{candidate['confidence']} Conf.]")
                with col_drop:
                    if st.button("✕", key=f"cand_drop_{index}"):
                        call(api.remove_candidate, decision_id, index)
                        forget_review_widgets()
                        st.rerun()
                new_content = st.text_area(
                    "Content",
                    value=candidate["content"],
                    max_chars=MAX_SUGGESTED_INPUT_CHARS,
                    key=f"cand_content_{index}",
                )
                st.caption(char_counter(new_content))
                if candidate.get("source_reference"):
                    st.caption(f"Ref: {candidate['source_reference']}")
                if new_type != candidate["type"] or new_content != candidate["content"]:
                    call(api.update_candidate, decision_id, index, new_content, new_type)

        col_confirm, col_cancel = st.columns(2)
        with col_confirm:
            if st.button(f"Confirm & Add {len(candidates)} Inputs", type="primary"):
                with st.spinner("Adding inputs and refreshing analysis..."):
                    result = call(api.confirm_review, decision_id)
                forget_review_widgets()
                if result and result.get("analysis_error"):
                    st.session_state.error = result["analysis_error"]
                st.rerun()
        with col_cancel:
            if st.button("Discard"):
                call(api.cancel_review, decision_id)
                forget_review_widgets()
                st.rerun()


def render_analysis(analysis: dict | None) -> None:
    if not analysis:
        st.info("Run Signal Analysis to generate a synthesis.")
        return
    st.markdown("### Situation Summary")
    st.write(analysis["situationSummary"])
    st.markdown("### Why It's Hard")
    st.write(analysis["whyHard"])
    for heading, items in analysis_sections(analysis):
        st.markdown(f"### {heading}")
        for item in items:
            st.markdown(f"- {item}")
    extractions = analysis.get("fileExtractions", [])
    if extractions:
        st.markdown("### File Extractions")
        st.table(
            [
                {
                    "Type": e["type"],
                    "Statement": e["statement"],
                    "Source": e["source_citation"],
                    "Confidence": e["confidence"],
                }
                for e in extractions
            ]
        )


def render_tensions(analysis: dict | None) -> None:
    tensions = (analysis or {}).get("tensions", [])
    if not tensions:
        st.info("No tensions yet.")
    for t in tensions:
        with st.container(border=True):
            col_x, col_y = st.columns(2)
            with col_x:
                st.markdown(f"**{t['nameX']}**")
                st.write(t["reasonX"])
                st.caption(f"Gain: {t['gainIfX']} · Loss: {t['lossIfX']}")
            with col_y:
                st.markdown(f"**{t['nameY']}**")
                st.write(t["reasonY"])
                st.caption(f"Gain: {t['gainIfY']} · Loss: {t['lossIfY']}")


def render_options(analysis: dict | None) -> None:
    options = (analysis or {}).get("options", [])
    if not options:
        st.info("No strategic options yet.")
    for option in options:
        with st.container(border=True):
            st.markdown(f"### {option['name']}")
            st.write(option["description"])
            st.caption(f"Trade-offs: {option['tradeoffs']}")
            col_do, col_dont = st.columns(2)
            with col_do:
                st.markdown("**Commit to**")
                for item in option.get("commitmentDo", []):
                    st.markdown(f"- {item}")
            with col_dont:
                st.markdown("**Avoid**")
                for item in option.get("commitmentDont", []):
                    st.markdown(f"- {item}")
            st.caption(f"Future impact: {option['futureImpact']}")


if st.session_state.decision_id:
    render_detail(st.session_state.decision_id)
else:
    render_dashboard()
