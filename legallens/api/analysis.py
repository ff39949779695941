from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from typing import Optional
import logging

from legallens.agents.contract_analysis_agent import ContractAnalysisAgent
from legallens.agents.file_ingest_agent import FileIngestAgent
from legallens.api.deps import get_analysis_agent, get_file_ingest_agent
from legallens.core.errors import IngestionError, LegalLensError, ValidationError
from legallens.core.session import ANALYSIS_FAILED_MESSAGE
from legallens.schemas.analysis import AnalysisMode, ContractAnalysis

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=ContractAnalysis)
async def analyze_contract(
    file: UploadFile = File(...),
    comparison_file: Optional[UploadFile] = File(None),
    mode: AnalysisMode = Form(AnalysisMode.AUDIT),
    query: str = Form(""),
    ingest_agent: FileIngestAgent = Depends(get_file_ingest_agent),
    analysis_agent: ContractAnalysisAgent = Depends(get_analysis_agent),
):
    """Analyze one contract, or two versions in COMPARE mode, in a single request."""
    try:
        primary = await ingest_agent.ingest_upload(file)
        comparison = await ingest_agent.ingest_upload(comparison_file) if comparison_file else None
        return await analysis_agent.analyze(primary, comparison, mode, query)

    except IngestionError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except LegalLensError as e:
        logger.error(f"Error analyzing contract: {e.code}: {e.message}")
        raise HTTPException(status_code=502, detail=ANALYSIS_FAILED_MESSAGE)
