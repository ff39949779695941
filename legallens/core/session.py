"""Per-user review session: files, mode, the current analysis and the chat.

Nothing here is persisted. A session lives in memory until it is reset or
discarded.
"""

import asyncio
import logging
import uuid
from enum import Enum
from typing import Dict, List, Optional

from legallens.agents.chat_agent import ChatAgent
from legallens.agents.contract_analysis_agent import ContractAnalysisAgent
from legallens.core.errors import (
    LegalLensError,
    SessionBusyError,
    SessionNotFoundError,
    ValidationError,
)
from legallens.schemas.analysis import AnalysisMode, ChatRole, ChatTurn, ContractAnalysis, UploadedFile

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Please upload a valid contract file (PDF or image)."


class SessionState(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    RESULTS = "RESULTS"
    ERROR = "ERROR"


class FileSlot(str, Enum):
    PRIMARY = "primary"
    COMPARISON = "comparison"


class ReviewSession:
    """State of one user's contract review."""

    def __init__(
        self,
        analysis_agent: ContractAnalysisAgent,
        chat_agent: ChatAgent,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.analysis_agent = analysis_agent
        self.chat_agent = chat_agent
        self._analysis_lock = asyncio.Lock()
        self._chat_lock = asyncio.Lock()
        self._clear()

    def _clear(self) -> None:
        self.state = SessionState.IDLE
        self.mode = AnalysisMode.AUDIT
        self.files: Dict[FileSlot, UploadedFile] = {}
        self.user_query = ""
        self.analysis: Optional[ContractAnalysis] = None
        self.error: Optional[str] = None
        self.last_error: Optional[LegalLensError] = None
        self.chat_history: List[ChatTurn] = []

    @property
    def contract_file(self) -> Optional[UploadedFile]:
        return self.files.get(FileSlot.PRIMARY)

    @property
    def comparison_file(self) -> Optional[UploadedFile]:
        return self.files.get(FileSlot.COMPARISON)

    @property
    def can_submit(self) -> bool:
        if self.contract_file is None:
            return False
        return self.mode is not AnalysisMode.COMPARE or self.comparison_file is not None

    @property
    def is_analyzing(self) -> bool:
        return self._analysis_lock.locked()

    @property
    def is_chatting(self) -> bool:
        return self._chat_lock.locked()

    def set_file(self, slot: FileSlot, uploaded: UploadedFile) -> None:
        slot = FileSlot(slot)
        if slot is FileSlot.COMPARISON and self.mode is not AnalysisMode.COMPARE:
            raise ValidationError("A comparison file can only be added in COMPARE mode")
        self.files[slot] = uploaded

    def remove_file(self, slot: FileSlot) -> None:
        self.files.pop(FileSlot(slot), None)

    def set_mode(self, mode: AnalysisMode) -> None:
        self.mode = AnalysisMode(mode)
        if self.mode is not AnalysisMode.COMPARE:
            self.files.pop(FileSlot.COMPARISON, None)

    async def run_analysis(self, user_query: Optional[str] = None) -> Optional[ContractAnalysis]:
        """Run the analysis for the current files and mode.

        Failures from the model or the files put the session in the ERROR state
        with a generic message and return None.

        Raises:
            SessionBusyError: If an analysis or a chat answer is already in flight
            ValidationError: If the files do not match the mode
        """
        if self._analysis_lock.locked():
            raise SessionBusyError("An analysis is already in progress for this session")
        # A pending answer belongs to the current analysis and its chat history
        if self._chat_lock.locked():
            raise SessionBusyError("Wait for the pending answer before starting a new analysis")
        if user_query is not None:
            self.user_query = user_query
        # Checked before the state changes so a rejected submit leaves it untouched
        self.analysis_agent.builder.validate(self.contract_file, self.comparison_file, self.mode)

        async with self._analysis_lock:
            self.state = SessionState.ANALYZING
            self.error = None
            self.last_error = None
            try:
                analysis = await self.analysis_agent.analyze(
                    self.contract_file, self.comparison_file, self.mode, self.user_query
                )
            except ValidationError:
                self.state = SessionState.IDLE
                raise
            except LegalLensError as e:
                logger.error(f"Analysis failed for session {self.session_id}: {e.code}: {e.message}")
                self.state = SessionState.ERROR
                self.error = ANALYSIS_FAILED_MESSAGE
                self.last_error = e
                return None

            self.analysis = analysis
            self.chat_history = []
            self.state = SessionState.RESULTS
            return analysis

    async def ask(self, question: str) -> ChatTurn:
        """Ask a follow-up question and append both turns to the chat history.

        Raises:
            SessionBusyError: If a previous question or an analysis is still pending
            ValidationError: If there is no analysis yet or the question is empty
        """
        if self._chat_lock.locked():
            raise SessionBusyError("Wait for the previous answer before asking again")
        if self._analysis_lock.locked():
            raise SessionBusyError("Wait for the analysis to finish before asking questions")
        if self.analysis is None:
            raise ValidationError("Run an analysis before asking follow-up questions")
        if not question or not question.strip():
            raise ValidationError("Question must not be empty")

        async with self._chat_lock:
            prior = list(self.chat_history)
            self.chat_history.append(ChatTurn(role=ChatRole.USER, text=question))
            answer = await self.chat_agent.ask(prior, question, self.analysis.chat_context())
            reply = ChatTurn(role=ChatRole.MODEL, text=answer)
            self.chat_history.append(reply)
            return reply

    def reset(self) -> None:
        if self.is_analyzing or self.is_chatting:
            raise SessionBusyError("Cannot reset while a request is in progress")
        self._clear()


class SessionStore:
    """In-memory registry of active review sessions."""

    def __init__(self, analysis_agent: ContractAnalysisAgent, chat_agent: ChatAgent):
        self.analysis_agent = analysis_agent
        self.chat_agent = chat_agent
        self._sessions: Dict[str, ReviewSession] = {}

    def create(self) -> ReviewSession:
        session = ReviewSession(self.analysis_agent, self.chat_agent)
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id}")
        return session

    def get(self, session_id: str) -> ReviewSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session {session_id} not found") from None

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        logger.info(f"Discarded session {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)
