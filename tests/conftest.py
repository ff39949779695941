import os

os.environ.setdefault("GEMINI_API_KEY", "test-key")

import base64
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from legallens.agents.chat_agent import ChatAgent
from legallens.agents.contract_analysis_agent import ContractAnalysisAgent
from legallens.core.llm import GeminiChatModel
from legallens.schemas.analysis import UploadedFile

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << /Root 1 0 R >>\n%%EOF\n"
REVISED_PDF_BYTES = PDF_BYTES.replace(b"Catalog", b"Catalog /Version /1.7")


def make_client(text=None, error=None, side_effect=None):
    """Stand-in for ``google.genai.Client`` whose async call returns ``text``."""
    if error is not None:
        generate = AsyncMock(side_effect=error)
    elif side_effect is not None:
        generate = AsyncMock(side_effect=side_effect)
    else:
        generate = AsyncMock(return_value=SimpleNamespace(text=text))
    return SimpleNamespace(
        aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)),
        models=SimpleNamespace(generate_content=MagicMock(return_value=SimpleNamespace(text=text))),
    )


def analysis_agent_for(client) -> ContractAnalysisAgent:
    return ContractAnalysisAgent(llm=GeminiChatModel.for_analysis(client=client))


def chat_agent_for(client) -> ChatAgent:
    return ChatAgent(llm=GeminiChatModel.for_chat(client=client))


@pytest.fixture
def pdf_file():
    return UploadedFile(
        data=base64.b64encode(PDF_BYTES).decode("ascii"),
        mime_type="application/pdf",
        name="msa_v1.pdf",
    )


@pytest.fixture
def revised_pdf_file():
    return UploadedFile(
        data=base64.b64encode(REVISED_PDF_BYTES).decode("ascii"),
        mime_type="application/pdf",
        name="msa_v2.pdf",
    )


@pytest.fixture
def analysis_payload():
    """A fully conforming model response for an AUDIT run."""
    return {
        "summary": "Master services agreement between Acme Corp and Globex Ltd for software support.",
        "documentType": "Master Services Agreement",
        "documentTypeExplanation": "An MSA sets the baseline terms for future statements of work.",
        "riskScore": 45,
        "partiesInvolved": ["Acme Corp", "Globex Ltd"],
        "risks": [
            {
                "clauseReference": "Clause 4.2",
                "riskLevel": "HIGH",
                "description": "Unlimited liability for the supplier.",
                "recommendation": "Cap liability at twelve months of fees.",
            },
            {
                "clauseReference": "Clause 7.1",
                "riskLevel": "MEDIUM",
                "description": "Automatic renewal with a 90-day notice window.",
                "recommendation": "Shorten the notice period to 30 days.",
            },
            {
                "clauseReference": "Clause 9.3",
                "riskLevel": "MEDIUM",
                "description": "Customer owns all pre-existing supplier IP used in deliverables.",
                "recommendation": "Carve out background IP with a licence back.",
            },
            {
                "clauseReference": "Clause 12",
                "riskLevel": "LOW",
                "description": "Governing law is a foreign jurisdiction.",
                "recommendation": "Agree on a neutral venue for disputes.",
            },
        ],
        "obligations": [
            {
                "description": "Deliver monthly service reports.",
                "responsibleParty": "Globex Ltd",
                "dueDate": "5th business day of each month",
            },
            {
                "description": "Pay invoices.",
                "responsibleParty": "Acme Corp",
                "dueDate": "Net 30",
                "penalty": "1.5% monthly late fee",
            },
        ],
        "financialTerms": [
            {"category": "Payment", "amount": "$12,000", "details": "Monthly support fee."},
            {"category": "Penalty", "details": "Late fee on overdue invoices."},
        ],
        "missingClauses": ["Force Majeure", "Data Processing Addendum"],
        "complianceChecks": [
            {"category": "Data Privacy (GDPR/CCPA)", "status": "FAIL", "details": "No DPA referenced."},
            {"category": "IP Rights", "status": "WARNING", "details": "Background IP not carved out."},
            {"category": "Termination", "status": "PASS", "details": "Mutual termination for convenience."},
        ],
        "generalRecommendations": ["Negotiate a liability cap.", "Add a DPA before signature."],
        "autoFixes": [
            {
                "clauseReference": "Clause 4.2",
                "originalText": "Supplier shall be liable for all losses howsoever arising.",
                "fixedText": "Each party's aggregate liability is limited to the fees paid in the "
                             "preceding twelve months.",
                "explanation": "Mutual, capped liability is market standard.",
            }
        ],
    }


@pytest.fixture
def analysis_json(analysis_payload):
    return json.dumps(analysis_payload)
