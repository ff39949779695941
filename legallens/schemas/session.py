from typing import Dict, List, Optional

from legallens.core.session import ReviewSession, SessionState
from legallens.schemas.analysis import AnalysisMode, ChatTurn, ContractAnalysis, RiskLevel, WireModel


class FileInfo(WireModel):
    """An uploaded file without its payload."""
    name: str
    mime_type: str
    size: int


class SessionView(WireModel):
    """Client-facing snapshot of a review session."""
    session_id: str
    state: SessionState
    mode: AnalysisMode
    contract_file: Optional[FileInfo] = None
    comparison_file: Optional[FileInfo] = None
    user_query: str = ""
    can_submit: bool
    analysis: Optional[ContractAnalysis] = None
    risk_band: Optional[RiskLevel] = None
    risk_counts: Optional[Dict[RiskLevel, int]] = None
    has_version_comparison: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None
    chat_history: List[ChatTurn] = []

    @classmethod
    def from_session(cls, session: ReviewSession) -> "SessionView":
        def info(uploaded):
            if uploaded is None:
                return None
            return FileInfo(name=uploaded.name, mime_type=uploaded.mime_type, size=uploaded.size)

        analysis = session.analysis
        return cls(
            session_id=session.session_id,
            state=session.state,
            mode=session.mode,
            contract_file=info(session.contract_file),
            comparison_file=info(session.comparison_file),
            user_query=session.user_query,
            can_submit=session.can_submit,
            analysis=analysis,
            risk_band=analysis.risk_band() if analysis else None,
            risk_counts=analysis.risk_counts() if analysis else None,
            has_version_comparison=bool(analysis and analysis.has_version_comparison),
            error=session.error,
            error_code=session.last_error.code if session.last_error else None,
            chat_history=list(session.chat_history),
        )


class ModeUpdate(WireModel):
    mode: AnalysisMode


class AnalysisSubmit(WireModel):
    query: str = ""


class ChatQuestion(WireModel):
    question: str


class FilePayload(WireModel):
    """A file sent as base64 text, optionally as a ``data:`` URI."""
    name: str
    mime_type: str
    data: str
