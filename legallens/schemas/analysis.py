import base64
import binascii
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


class WireModel(BaseModel):
    """Base for models exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class AnalysisMode(str, Enum):
    """Analysis modes offered to the user."""
    AUDIT = "AUDIT"
    COMPARE = "COMPARE"
    REWRITE = "REWRITE"
    EXPLAIN = "EXPLAIN"

    @property
    def required_file_count(self) -> int:
        return 2 if self is AnalysisMode.COMPARE else 1


class RiskLevel(str, Enum):
    """Risk levels for contract clauses."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ComplianceStatus(str, Enum):
    """Outcome of a compliance check."""
    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"


class ChangeType(str, Enum):
    """Kinds of change between two contract versions."""
    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class UploadedFile(WireModel):
    """A contract file held in memory for the active session."""
    data: str = Field(description="Base64 payload without any data-URI prefix.")
    mime_type: str
    name: str

    def content_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"File '{self.name}' does not carry valid base64 data") from e

    @property
    def size(self) -> int:
        return len(self.content_bytes())


class Risk(WireModel):
    """A risky clause found in the contract."""
    clause_reference: NonEmptyStr
    risk_level: RiskLevel
    description: NonEmptyStr
    recommendation: NonEmptyStr


class Obligation(WireModel):
    """A duty one of the parties has to fulfil."""
    description: str
    responsible_party: str
    due_date: Optional[str] = None
    penalty: Optional[str] = None


class FinancialTerm(WireModel):
    """A payment, fee or other monetary term."""
    category: str
    details: str
    amount: Optional[str] = None


class ComplianceCheck(WireModel):
    """Assessment against a named legal category."""
    category: str
    status: ComplianceStatus
    details: str


class VersionDiff(WireModel):
    """A semantic change between the baseline and the revised contract."""
    change_type: ChangeType
    description: str
    impact: str
    negotiation_tip: str
    clause_reference: Optional[str] = None


class AutoFix(WireModel):
    """A suggested rewrite of an unfair or risky clause."""
    clause_reference: str
    fixed_text: str
    explanation: str
    original_text: Optional[str] = None


class ContractAnalysis(WireModel):
    """Complete analysis of one contract, or of a revision against its baseline."""
    summary: NonEmptyStr
    document_type: str
    document_type_explanation: str
    risk_score: int = Field(strict=True, ge=0, le=100)
    parties_involved: List[str] = []
    risks: List[Risk]
    obligations: List[Obligation]
    financial_terms: List[FinancialTerm]
    missing_clauses: List[str]
    compliance_checks: List[ComplianceCheck]
    version_comparison: Optional[List[VersionDiff]] = None
    comparison_analysis: Optional[str] = None
    general_recommendations: List[str]
    auto_fixes: List[AutoFix]

    def risk_counts(self) -> Dict[RiskLevel, int]:
        """Number of risks per level; every level is present."""
        counts = {level: 0 for level in RiskLevel}
        for risk in self.risks:
            counts[risk.risk_level] += 1
        return counts

    def risk_band(self) -> RiskLevel:
        """Coarse band for the overall score (gauge colour)."""
        if self.risk_score < 30:
            return RiskLevel.LOW
        if self.risk_score < 70:
            return RiskLevel.MEDIUM
        return RiskLevel.HIGH

    @property
    def has_version_comparison(self) -> bool:
        return bool(self.version_comparison)

    def chat_context(self) -> Dict[str, Any]:
        """Condensed context handed to the follow-up assistant."""
        return {
            "summary": self.summary,
            "risks": [r.model_dump(by_alias=True, mode="json") for r in self.risks],
            "obligations": [
                o.model_dump(by_alias=True, mode="json", exclude_none=True)
                for o in self.obligations
            ],
            "missing": list(self.missing_clauses),
        }


class ChatTurn(WireModel):
    """One message of the follow-up conversation."""
    role: ChatRole
    text: str


class InlinePart(WireModel):
    """File content sent inline with the request."""
    kind: Literal["inline_data"] = "inline_data"
    mime_type: str
    data: str


class TextPart(WireModel):
    """Instruction text sent with the request."""
    kind: Literal["text"] = "text"
    text: str


ContentPart = Annotated[Union[InlinePart, TextPart], Field(discriminator="kind")]


class AnalysisRequest(WireModel):
    """Provider-neutral analysis request: ordered parts plus the output shape."""
    mode: AnalysisMode
    parts: List[ContentPart]
    instruction: str
    response_schema: Dict[str, Any]

    @property
    def inline_parts(self) -> List[InlinePart]:
        return [p for p in self.parts if isinstance(p, InlinePart)]

    @property
    def text_parts(self) -> List[TextPart]:
        return [p for p in self.parts if isinstance(p, TextPart)]


# Output shape handed to the model. Kept in the provider's schema dialect and
# checked against ContractAnalysis by the test suite.
ANALYSIS_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING", "description": "A concise executive summary of the contract."},
        "documentType": {
            "type": "STRING",
            "description": "Type of document (e.g., NDA, SLA, Employment Agreement, SaaS Contract).",
        },
        "documentTypeExplanation": {
            "type": "STRING",
            "description": "A one-sentence explanation of what this contract type typically entails.",
        },
        "riskScore": {
            "type": "INTEGER",
            "description": "A calculated risk score from 0 (Safe) to 100 (Extremely Risky).",
        },
        "partiesInvolved": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of parties mentioned in the contract.",
        },
        "risks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "clauseReference": {
                        "type": "STRING",
                        "description": "The specific section or clause number (e.g., 'Clause 4.2').",
                    },
                    "riskLevel": {"type": "STRING", "enum": ["HIGH", "MEDIUM", "LOW"]},
                    "description": {"type": "STRING", "description": "Explanation of why this is risky."},
                    "recommendation": {"type": "STRING", "description": "How to mitigate this risk."},
                },
                "required": ["clauseReference", "riskLevel", "description", "recommendation"],
            },
        },
        "obligations": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "description": {"type": "STRING"},
                    "dueDate": {"type": "STRING", "description": "Date or timeframe if applicable."},
                    "responsibleParty": {"type": "STRING"},
                    "penalty": {"type": "STRING", "description": "Consequence of failure."},
                },
                "required": ["description", "responsibleParty"],
            },
        },
        "financialTerms": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {
                        "type": "STRING",
                        "description": "e.g., Payment, Retainer, Penalty, Renewal Cost",
                    },
                    "amount": {"type": "STRING"},
                    "details": {"type": "STRING"},
                },
                "required": ["category", "details"],
            },
        },
        "missingClauses": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Standard clauses that are suspiciously missing.",
        },
        "complianceChecks": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {
                        "type": "STRING",
                        "description": "e.g., Data Privacy (GDPR/CCPA), IP Rights, Termination, "
                                       "Liability, Consumer Protection.",
                    },
                    "status": {"type": "STRING", "enum": ["PASS", "WARNING", "FAIL"]},
                    "details": {"type": "STRING", "description": "Reason for the status."},
                },
                "required": ["category", "status", "details"],
            },
            "description": "Checklist of critical legal/compliance categories.",
        },
        "versionComparison": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "changeType": {"type": "STRING", "enum": ["ADDED", "REMOVED", "MODIFIED"]},
                    "clauseReference": {"type": "STRING"},
                    "description": {"type": "STRING", "description": "What specifically changed."},
                    "impact": {"type": "STRING", "description": "Legal or financial impact of this change."},
                    "negotiationTip": {
                        "type": "STRING",
                        "description": "Suggestion on how to handle this change.",
                    },
                },
                "required": ["changeType", "description", "impact", "negotiationTip"],
            },
            "description": "List of significant changes between versions (Only for Compare Mode).",
        },
        "comparisonAnalysis": {
            "type": "STRING",
            "description": "Narrative summary of the analysis or answer to specific user query.",
        },
        "generalRecommendations": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Strategic negotiation points and general improvements.",
        },
        "autoFixes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "clauseReference": {"type": "STRING"},
                    "originalText": {
                        "type": "STRING",
                        "description": "Brief snippet of the original problematic text.",
                    },
                    "fixedText": {
                        "type": "STRING",
                        "description": "Rewritten version that is balanced and fair.",
                    },
                    "explanation": {"type": "STRING", "description": "Why this change is better."},
                },
                "required": ["clauseReference", "fixedText", "explanation"],
            },
            "description": "Suggested rewrites for the 3-5 most critical or unfair clauses.",
        },
    },
    "required": [
        "summary", "documentType", "documentTypeExplanation", "riskScore", "risks", "obligations",
        "financialTerms", "missingClauses", "complianceChecks", "generalRecommendations", "autoFixes",
    ],
}
