import streamlit as st
import requests
import os
from typing import Any, Dict, Optional
import pandas as pd

# API endpoint
API_URL = os.getenv("API_URL", "http://localhost:8000")

MODES = {
    "AUDIT": ("Risk Audit", "Standard analysis"),
    "COMPARE": ("Compare", "Version differences"),
    "REWRITE": ("Rewrite", "Auto-fix clauses"),
    "EXPLAIN": ("Explain", "Simple English"),
}

CHAT_SUGGESTIONS = [
    "Explain the indemnity clause",
    "Draft a safer termination clause",
    "What are the payment terms?",
]

UPLOAD_TYPES = ["pdf", "png", "jpg", "jpeg", "webp", "heic"]

# Page setup
st.set_page_config(
    page_title="LegalLens 360 - AI Contract Auditor",
    page_icon="⚖️",
    layout="wide"
)

# Sidebar
st.sidebar.title("LegalLens 360")
st.sidebar.caption("AI Contract Auditor")


# Helper functions
def _raise_for_status(response):
    if response.status_code >= 400:
        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        raise RuntimeError(detail)
    return response


def create_session() -> Dict[str, Any]:
    """Start a new review session on the API."""
    return _raise_for_status(requests.post(f"{API_URL}/api/sessions/")).json()


def get_session(session_id: str) -> Dict[str, Any]:
    return _raise_for_status(requests.get(f"{API_URL}/api/sessions/{session_id}")).json()


def upload_file(session_id: str, slot: str, file) -> Dict[str, Any]:
    """Upload a contract file into a session slot."""
    files = {
        "file": (
            file.name,
            file.getvalue(),
            file.type if hasattr(file, 'type') else "application/octet-stream"
        )
    }
    response = requests.put(f"{API_URL}/api/sessions/{session_id}/files/{slot}", files=files)
    return _raise_for_status(response).json()


def remove_file(session_id: str, slot: str) -> Dict[str, Any]:
    response = requests.delete(f"{API_URL}/api/sessions/{session_id}/files/{slot}")
    return _raise_for_status(response).json()


def set_mode(session_id: str, mode: str) -> Dict[str, Any]:
    response = requests.put(f"{API_URL}/api/sessions/{session_id}/mode", json={"mode": mode})
    return _raise_for_status(response).json()


def run_analysis(session_id: str, query: str) -> Dict[str, Any]:
    """Run the analysis; errors come back as the session's error state."""
    response = requests.post(f"{API_URL}/api/sessions/{session_id}/analysis", json={"query": query})
    if response.status_code == 502:
        return get_session(session_id)
    return _raise_for_status(response).json()


def ask_question(session_id: str, question: str) -> Dict[str, Any]:
    response = requests.post(f"{API_URL}/api/sessions/{session_id}/chat", json={"question": question})
    return _raise_for_status(response).json()


def reset_session(session_id: str) -> Dict[str, Any]:
    return _raise_for_status(requests.post(f"{API_URL}/api/sessions/{session_id}/reset")).json()


def format_risk_level(risk_level):
    """Format risk level with color."""
    if risk_level == "HIGH":
        return "🔴 HIGH"
    elif risk_level == "MEDIUM":
        return "🟠 MEDIUM"
    else:
        return "🟢 LOW"


def format_status(status):
    return {"PASS": "✅ PASS", "WARNING": "⚠️ WARNING", "FAIL": "❌ FAIL"}.get(status, status)


def table(rows, columns: Dict[str, str], formatters: Optional[Dict[str, Any]] = None):
    """Render a list of camelCase records as a table with friendly headers."""
    if not rows:
        st.info("Nothing found for this section.")
        return
    formatters = formatters or {}
    data = []
    for row in rows:
        data.append({
            label: formatters.get(key, lambda v: v)(row.get(key) or "")
            for key, label in columns.items()
        })
    st.dataframe(pd.DataFrame(data), use_container_width=True, hide_index=True)


def render_dashboard(session: Dict[str, Any]):
    analysis = session["analysis"]
    contract = session.get("contractFile") or {}

    st.caption(analysis["documentType"])
    st.title(contract.get("name", "Contract"))
    st.write(analysis["summary"])
    if analysis.get("documentTypeExplanation"):
        st.caption(f"✔ {analysis['documentTypeExplanation']}")
    if analysis.get("partiesInvolved"):
        st.write("**Parties:** " + " · ".join(analysis["partiesInvolved"]))

    if analysis.get("comparisonAnalysis") and not session["hasVersionComparison"]:
        st.subheader("Analysis Insights")
        st.info(analysis["comparisonAnalysis"])

    left, right = st.columns([1, 2])

    with left:
        st.subheader("Risk Assessment")
        score = analysis["riskScore"]
        st.metric("Risk Score", f"{score}/100", format_risk_level(session["riskBand"]))
        st.progress(score / 100)
        counts = session["riskCounts"]
        col1, col2, col3 = st.columns(3)
        col1.metric("High", counts["HIGH"])
        col2.metric("Medium", counts["MEDIUM"])
        col3.metric("Low", counts["LOW"])

        if analysis["missingClauses"]:
            st.subheader("Critical Missing Items")
            for clause in analysis["missingClauses"]:
                st.write(f"• {clause}")

        render_chat(session)

    with right:
        labels = ["Risks", "Compliance", "Obligations", "Financial", "Auto-Fixes"]
        if session["hasVersionComparison"]:
            # Comparison results lead when present
            labels = ["Changes"] + labels
        tabs = dict(zip(labels, st.tabs(labels)))

        if "Changes" in tabs:
            with tabs["Changes"]:
                if analysis.get("comparisonAnalysis"):
                    st.info(analysis["comparisonAnalysis"])
                table(analysis["versionComparison"], {
                    "changeType": "Change",
                    "clauseReference": "Clause",
                    "description": "What changed",
                    "impact": "Impact",
                    "negotiationTip": "Negotiation tip",
                })
        with tabs["Risks"]:
            table(analysis["risks"], {
                "riskLevel": "Risk Level",
                "clauseReference": "Clause",
                "description": "Issue",
                "recommendation": "Recommendation",
            }, {"riskLevel": format_risk_level})
        with tabs["Compliance"]:
            table(analysis["complianceChecks"], {
                "status": "Status",
                "category": "Category",
                "details": "Details",
            }, {"status": format_status})
        with tabs["Obligations"]:
            table(analysis["obligations"], {
                "responsibleParty": "Party",
                "description": "Obligation",
                "dueDate": "Due",
                "penalty": "Penalty",
            })
        with tabs["Financial"]:
            table(analysis["financialTerms"], {
                "category": "Category",
                "amount": "Amount",
                "details": "Details",
            })
        with tabs["Auto-Fixes"]:
            if not analysis["autoFixes"]:
                st.info("No rewrites suggested.")
            for fix in analysis["autoFixes"]:
                with st.expander(fix["clauseReference"]):
                    if fix.get("originalText"):
                        st.markdown("**Original**")
                        st.write(fix["originalText"])
                    st.markdown("**Suggested**")
                    st.code(fix["fixedText"], language=None)
                    st.caption(fix["explanation"])

        if analysis["generalRecommendations"]:
            st.subheader("Recommendations")
            for rec in analysis["generalRecommendations"]:
                st.write(f"• {rec}")


def render_chat(session: Dict[str, Any]):
    st.subheader("Legal Assistant")
    for turn in session["chatHistory"]:
        with st.chat_message("user" if turn["role"] == "user" else "assistant"):
            st.write(turn["text"])

    question = None
    if not session["chatHistory"]:
        for suggestion in CHAT_SUGGESTIONS:
            if st.button(suggestion, key=f"suggest-{suggestion}"):
                question = suggestion
    question = st.chat_input("Ask to rewrite, explain, or summarize...") or question
    if question:
        with st.spinner("Thinking..."):
            try:
                ask_question(session["sessionId"], question)
            except Exception as e:
                st.error(f"Error asking question: {str(e)}")
        st.rerun()


def render_upload_form(session: Dict[str, Any]):
    session_id = session["sessionId"]
    st.title("Contract Law Simplified & Secured.")
    st.caption("Audit risks, compare versions, or rewrite clauses in seconds.")

    mode = st.radio(
        "Analysis Mode",
        list(MODES),
        index=list(MODES).index(session["mode"]),
        format_func=lambda m: f"{MODES[m][0]} · {MODES[m][1]}",
        horizontal=True,
    )
    if mode != session["mode"]:
        set_mode(session_id, mode)
        st.rerun()

    compare = mode == "COMPARE"
    col1, col2 = st.columns(2)
    slots = [("primary", "Primary Contract (A)" if compare else "Contract File", col1)]
    if compare:
        slots.append(("comparison", "Comparison Contract (B)", col2))

    for slot, label, column in slots:
        with column:
            current = session.get("contractFile" if slot == "primary" else "comparisonFile")
            if current:
                st.success(f"📄 {current['name']} ({current['size'] / 1024:.1f} KB)")
                if st.button("Remove", key=f"remove-{slot}"):
                    try:
                        remove_file(session_id, slot)
                    except Exception as e:
                        st.error(f"Error removing file: {str(e)}")
                    else:
                        st.rerun()
            else:
                uploaded = st.file_uploader(label, type=UPLOAD_TYPES, key=f"upload-{slot}")
                if uploaded is not None:
                    try:
                        upload_file(session_id, slot, uploaded)
                        st.rerun()
                    except Exception as e:
                        st.error(f"Error uploading file: {str(e)}")

    query = st.text_area(
        "Specific Questions (Optional)",
        placeholder="E.g., What are the termination conditions? Is there a non-compete clause?",
    )
    label = "Compare Versions" if compare else "Run Analysis"
    if st.button(label, disabled=not session["canSubmit"], type="primary", use_container_width=True):
        with st.spinner("Comparing versions..." if compare else "Analyzing contract... This may take a minute."):
            try:
                run_analysis(session_id, query)
            except Exception as e:
                st.error(f"Error analyzing contract: {str(e)}")
        st.rerun()


# Pages
try:
    current = None
    if "session_id" in st.session_state:
        try:
            current = get_session(st.session_state.session_id)
        except RuntimeError:
            # The API restarted and dropped its in-memory sessions
            current = None
    if current is None:
        current = create_session()
        st.session_state.session_id = current["sessionId"]
except Exception as e:
    st.error(f"Cannot reach the LegalLens API at {API_URL}: {str(e)}")
    st.stop()

if st.sidebar.button("New Analysis"):
    reset_session(current["sessionId"])
    st.rerun()

if current["state"] == "RESULTS" and current["analysis"]:
    render_dashboard(current)
elif current["state"] == "ERROR":
    st.error(current["error"])
    if st.button("Try Again"):
        reset_session(current["sessionId"])
        st.rerun()
else:
    render_upload_form(current)

# Footer
st.sidebar.markdown("---")
st.sidebar.caption("Powered by Gemini · No documents are stored")
