"""FastAPI dependencies. Override these in tests to inject doubles."""

from functools import lru_cache

from legallens.agents.chat_agent import ChatAgent
from legallens.agents.contract_analysis_agent import ContractAnalysisAgent
from legallens.agents.file_ingest_agent import FileIngestAgent
from legallens.core.session import SessionStore


@lru_cache
def get_file_ingest_agent() -> FileIngestAgent:
    return FileIngestAgent()


@lru_cache
def get_analysis_agent() -> ContractAnalysisAgent:
    return ContractAnalysisAgent()


@lru_cache
def get_chat_agent() -> ChatAgent:
    return ChatAgent()


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore(get_analysis_agent(), get_chat_agent())
