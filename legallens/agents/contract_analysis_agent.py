import base64
import logging
import re
from typing import List, Optional

from google.genai import types
from pydantic import ValidationError as SchemaValidationError

from legallens.agents.request_builder import AnalysisRequestBuilder
from legallens.core.errors import DecodeError, EmptyResponseError, TransportError
from legallens.core.llm import GeminiChatModel
from legallens.schemas.analysis import (
    AnalysisMode,
    AnalysisRequest,
    ContractAnalysis,
    InlinePart,
    UploadedFile,
)

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ContractAnalysisAgent:
    """Agent that sends analysis requests to Gemini and decodes the report."""

    def __init__(
        self,
        llm: Optional[GeminiChatModel] = None,
        builder: Optional[AnalysisRequestBuilder] = None,
    ):
        """Initialize the contract analysis agent.

        Args:
            llm: Model wrapper; built from settings when omitted
            builder: Request builder; the default one when omitted
        """
        self.llm = llm or GeminiChatModel.for_analysis()
        self.builder = builder or AnalysisRequestBuilder()

    async def analyze(
        self,
        primary: UploadedFile,
        comparison: Optional[UploadedFile] = None,
        mode: AnalysisMode = AnalysisMode.AUDIT,
        user_query: str = "",
    ) -> ContractAnalysis:
        """Build the request for ``mode`` and run it."""
        request = self.builder.build(primary, comparison, mode, user_query)
        return await self.invoke(request)

    async def invoke(self, request: AnalysisRequest) -> ContractAnalysis:
        """Send one analysis request and decode the structured result.

        Raises:
            TransportError: If the model call fails
            EmptyResponseError: If the model returns no content
            DecodeError: If the content does not match the analysis schema
        """
        config = self.llm.build_config(
            response_mime_type="application/json",
            response_schema=request.response_schema,
        )
        try:
            response = await self.llm.client.aio.models.generate_content(
                model=self.llm.model_name,
                contents=[types.Content(role="user", parts=self._to_parts(request))],
                config=config,
            )
        except Exception as e:
            logger.error(f"Error calling Gemini for {request.mode.value} analysis: {str(e)}")
            raise TransportError(f"Analysis request failed: {str(e)}") from e

        text = getattr(response, "text", None)
        if not text or not text.strip():
            logger.error(f"Gemini returned no content for {request.mode.value} analysis")
            raise EmptyResponseError("No analysis generated")

        analysis = decode_analysis(text)
        logger.info(
            f"Decoded {request.mode.value} analysis: score {analysis.risk_score}, "
            f"{len(analysis.risks)} risks"
        )
        return analysis

    @staticmethod
    def _to_parts(request: AnalysisRequest) -> List[types.Part]:
        parts = []
        for part in request.parts:
            if isinstance(part, InlinePart):
                parts.append(types.Part.from_bytes(
                    data=base64.b64decode(part.data),
                    mime_type=part.mime_type,
                ))
            else:
                parts.append(types.Part.from_text(text=part.text))
        return parts


def decode_analysis(text: str) -> ContractAnalysis:
    """Validate model output against the analysis schema.

    Tolerates a Markdown code fence around the JSON document.
    """
    cleaned = text.strip()
    match = _FENCE.match(cleaned)
    if match:
        cleaned = match.group(1)
    try:
        return ContractAnalysis.model_validate_json(cleaned)
    except SchemaValidationError as e:
        logger.error(f"Analysis does not match schema: {e.error_count()} error(s)")
        raise DecodeError(f"Model output does not match the analysis schema: {str(e)}") from e
