from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from legallens import __version__
from legallens.api import analysis, sessions
from legallens.core.config import settings, require_api_key
from legallens.schemas.analysis import AnalysisMode

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail at startup, before any request reaches the model
    require_api_key(settings)
    logger.info(f"{settings.APP_NAME} ready (model {settings.GEMINI_MODEL})")
    yield


# Initialize FastAPI app
app = FastAPI(
    title="LegalLens 360 API",
    description="AI contract auditor: risk audit, version comparison, clause rewrites and plain-English explanations",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for now
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["sessions"])


@app.get("/", tags=["root"])
async def read_root():
    """Root endpoint providing API information."""
    return {
        "app": settings.APP_NAME,
        "description": "AI Contract Auditor",
        "version": __version__,
        "modes": [mode.value for mode in AnalysisMode],
        "status": "operational",
    }


@app.get("/health", tags=["root"])
async def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("legallens.main:app", host="0.0.0.0", port=8000, reload=True)
