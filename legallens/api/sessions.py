from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
import logging

from legallens.agents.file_ingest_agent import FileIngestAgent
from legallens.api.deps import get_file_ingest_agent, get_session_store
from legallens.core.errors import (
    IngestionError,
    SessionBusyError,
    SessionNotFoundError,
    ValidationError,
)
from legallens.core.session import FileSlot, ReviewSession, SessionState, SessionStore
from legallens.schemas.analysis import ChatTurn
from legallens.schemas.session import AnalysisSubmit, ChatQuestion, FilePayload, ModeUpdate, SessionView

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_session(session_id: str, store: SessionStore) -> ReviewSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


def _reject(e: ValidationError) -> HTTPException:
    """Map a precondition failure to its HTTP status."""
    if isinstance(e, SessionBusyError):
        return HTTPException(status_code=409, detail=e.message)
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=422, detail=e.message)


@router.post("/", response_model=SessionView, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """Start a new review session."""
    return SessionView.from_session(store.create())


@router.get("/{session_id}", response_model=SessionView)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Get the current state of a session."""
    return SessionView.from_session(_get_session(session_id, store))


@router.delete("/{session_id}", status_code=204)
async def discard_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Drop a session and everything it holds."""
    try:
        store.discard(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/{session_id}/files/{slot}", response_model=SessionView)
async def upload_file(
    session_id: str,
    slot: FileSlot,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store),
    ingest_agent: FileIngestAgent = Depends(get_file_ingest_agent),
):
    """Upload the contract (``primary``) or the revised version (``comparison``)."""
    session = _get_session(session_id, store)
    try:
        uploaded = await ingest_agent.ingest_upload(file)
        session.set_file(slot, uploaded)
    except IngestionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationError as e:
        raise _reject(e)
    return SessionView.from_session(session)


@router.put("/{session_id}/files/{slot}/encoded", response_model=SessionView)
async def upload_encoded_file(
    session_id: str,
    slot: FileSlot,
    payload: FilePayload,
    store: SessionStore = Depends(get_session_store),
    ingest_agent: FileIngestAgent = Depends(get_file_ingest_agent),
):
    """Upload a file as base64 text, such as a browser data URI."""
    session = _get_session(session_id, store)
    try:
        uploaded = ingest_agent.from_data_uri(payload.data, payload.mime_type, payload.name)
        session.set_file(slot, uploaded)
    except IngestionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationError as e:
        raise _reject(e)
    return SessionView.from_session(session)


@router.delete("/{session_id}/files/{slot}", response_model=SessionView)
async def remove_file(session_id: str, slot: FileSlot, store: SessionStore = Depends(get_session_store)):
    """Remove an uploaded file."""
    session = _get_session(session_id, store)
    session.remove_file(slot)
    return SessionView.from_session(session)


@router.put("/{session_id}/mode", response_model=SessionView)
async def set_mode(session_id: str, update: ModeUpdate, store: SessionStore = Depends(get_session_store)):
    """Switch analysis mode. Leaving COMPARE drops the comparison file."""
    session = _get_session(session_id, store)
    session.set_mode(update.mode)
    return SessionView.from_session(session)


@router.post("/{session_id}/analysis", response_model=SessionView)
async def run_analysis(
    session_id: str,
    submit: AnalysisSubmit,
    store: SessionStore = Depends(get_session_store),
):
    """Run the analysis for the session's files and mode."""
    session = _get_session(session_id, store)
    try:
        await session.run_analysis(submit.query)
    except ValidationError as e:
        raise _reject(e)

    if session.state is SessionState.ERROR:
        raise HTTPException(status_code=502, detail=session.error)
    return SessionView.from_session(session)


@router.post("/{session_id}/chat", response_model=ChatTurn)
async def ask_question(
    session_id: str,
    body: ChatQuestion,
    store: SessionStore = Depends(get_session_store),
):
    """Ask a follow-up question about the current analysis."""
    session = _get_session(session_id, store)
    try:
        return await session.ask(body.question)
    except ValidationError as e:
        raise _reject(e)


@router.post("/{session_id}/reset", response_model=SessionView)
async def reset_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Clear files, analysis and chat, back to the initial state."""
    session = _get_session(session_id, store)
    try:
        session.reset()
    except ValidationError as e:
        raise _reject(e)
    return SessionView.from_session(session)
