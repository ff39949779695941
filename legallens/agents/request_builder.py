import logging
from typing import Any, Dict, Optional

from legallens.core.errors import ValidationError
from legallens.core.prompts import ANALYSIS_PROMPT, DEFAULT_USER_INSTRUCTION, instruction_block_for
from legallens.schemas.analysis import (
    ANALYSIS_RESPONSE_SCHEMA,
    AnalysisMode,
    AnalysisRequest,
    InlinePart,
    TextPart,
    UploadedFile,
)

logger = logging.getLogger(__name__)


class AnalysisRequestBuilder:
    """Builds the model request for a contract analysis."""

    def __init__(self, response_schema: Optional[Dict[str, Any]] = None):
        self.response_schema = response_schema or ANALYSIS_RESPONSE_SCHEMA

    def build(
        self,
        primary: Optional[UploadedFile],
        comparison: Optional[UploadedFile] = None,
        mode: AnalysisMode = AnalysisMode.AUDIT,
        user_query: str = "",
    ) -> AnalysisRequest:
        """Build the ordered content parts and output shape for one analysis.

        Args:
            primary: The contract (the baseline in COMPARE mode)
            comparison: The revised contract, COMPARE mode only
            mode: Analysis mode
            user_query: Optional free-text question or instruction

        Returns:
            Analysis request ready for the invocation client

        Raises:
            ValidationError: If the files do not match what the mode requires
        """
        mode = AnalysisMode(mode)
        self.validate(primary, comparison, mode)

        parts = [InlinePart(mime_type=primary.mime_type, data=primary.data)]
        if mode is AnalysisMode.COMPARE:
            parts.append(InlinePart(mime_type=comparison.mime_type, data=comparison.data))

        instruction = self.render_instruction(mode, user_query)
        parts.append(TextPart(text=instruction))

        logger.info(f"Built {mode.value} request with {len(parts) - 1} file(s)")
        return AnalysisRequest(
            mode=mode,
            parts=parts,
            instruction=instruction,
            response_schema=self.response_schema,
        )

    @staticmethod
    def validate(
        primary: Optional[UploadedFile],
        comparison: Optional[UploadedFile],
        mode: AnalysisMode,
    ) -> None:
        """Check that the supplied files match the mode's file count."""
        if primary is None:
            raise ValidationError("A contract file is required")
        supplied = 1 if comparison is None else 2
        if supplied < mode.required_file_count:
            raise ValidationError("COMPARE mode requires a second contract file to compare against")
        if supplied > mode.required_file_count:
            raise ValidationError(f"{mode.value} mode takes exactly one contract file")

    @staticmethod
    def render_instruction(mode: AnalysisMode, user_query: str = "") -> str:
        """Render the instruction text for ``mode``; blank queries get the default instruction."""
        query = (user_query or "").strip() or DEFAULT_USER_INSTRUCTION
        return ANALYSIS_PROMPT.format(
            mode_block=instruction_block_for(mode).render(),
            user_query=query,
        )
