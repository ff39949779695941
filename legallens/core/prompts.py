"""Prompt templates for contract analysis and the follow-up assistant."""

from typing import Dict, NamedTuple, Tuple

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder, PromptTemplate

from legallens.schemas.analysis import AnalysisMode

DEFAULT_USER_INSTRUCTION = "Perform the analysis as defined by the mode."


class InstructionBlock(NamedTuple):
    """Mode-specific task list placed in the analysis prompt."""
    title: str
    tasks: Tuple[str, ...]
    inputs: Tuple[str, ...] = ()

    def render(self) -> str:
        lines = [f"**MODE: {self.title}**", ""]
        if self.inputs:
            lines.append("INPUTS:")
            lines.extend(f"{i}. {item}" for i, item in enumerate(self.inputs, start=1))
            lines.append("")
        lines.append("TASKS:")
        lines.extend(f"{i}. {task}" for i, task in enumerate(self.tasks, start=1))
        return "\n".join(lines)


AUDIT_BLOCK = InstructionBlock(
    title="RISK AUDIT (STANDARD)",
    tasks=(
        "Extract clause list with clause numbers.",
        "Identify High/Medium/Low risks and map them to the 'risks' array, citing the clause reference of each.",
        "Calculate a Risk Score (0-100) based on the severity of clauses.",
        "Extract Financial Obligations (payments, penalties) -> 'financialTerms'.",
        "Extract Dates & Deadlines -> 'obligations'.",
        "Build an Obligation Timeline.",
        "Run Compliance Scanning -> 'complianceChecks' (Check Data Privacy (GDPR/CCPA), IP Rights, "
        "Termination, Liability).",
        "Detect Contract Type -> 'documentType'.",
    ),
)

COMPARE_BLOCK = InstructionBlock(
    title="COMPARE VERSIONS",
    inputs=(
        "Primary File (First attachment): The original or reference contract.",
        "Comparison File (Second attachment): The new or redlined version.",
    ),
    tasks=(
        "Extract text from BOTH files.",
        "Generate a structured 'versionComparison' list:\n"
        "   - Identify clauses that were ADDED in the second file.\n"
        "   - Identify clauses that were REMOVED from the first file.\n"
        "   - Identify clauses that were MODIFIED (semantic changes, not just formatting).",
        "For each change, explain the 'impact' and provide a 'negotiationTip'.",
        "In 'comparisonAnalysis', write a high-level summary of whether the new version is more or "
        "less favorable.",
        "Populate standard fields (Risks, Obligations, Financials) based on the **Comparison File** "
        "(the second attachment, i.e. the latest version).",
    ),
)

REWRITE_BLOCK = InstructionBlock(
    title="REWRITE / AUTO-FIX",
    tasks=(
        "Analyze the contract to find the most biased, unclear, or risky clauses.",
        "Focus heavily on filling the 'autoFixes' array with 3-5 entries for the most critical clauses.",
        "For each 'autoFix', provide a 'fixedText' that is balanced, fair, and legally sound "
        "(standard industry terms).",
        "Explain strictly *why* the original was bad and *why* the fix is better.",
        "Still populate the remaining fields, treating them as secondary.",
    ),
)

EXPLAIN_BLOCK = InstructionBlock(
    title="EXPLAIN IN SIMPLE ENGLISH",
    tasks=(
        "Simplify the entire contract logic.",
        "In 'summary', write a \"Plain English\" guide to this contract.",
        "In 'risks' and 'obligations', use very simple, non-legalistic language.",
        "Populate the remaining fields as in a standard risk audit.",
        "If the user asked about specific clauses in the user query, answer it directly in "
        "'comparisonAnalysis'.",
    ),
)

MODE_INSTRUCTIONS: Dict[AnalysisMode, InstructionBlock] = {
    AnalysisMode.AUDIT: AUDIT_BLOCK,
    AnalysisMode.COMPARE: COMPARE_BLOCK,
    AnalysisMode.REWRITE: REWRITE_BLOCK,
    AnalysisMode.EXPLAIN: EXPLAIN_BLOCK,
}

_missing_modes = set(AnalysisMode) - set(MODE_INSTRUCTIONS)
if _missing_modes:
    raise RuntimeError(f"No instruction block for modes: {sorted(m.value for m in _missing_modes)}")


def instruction_block_for(mode: AnalysisMode) -> InstructionBlock:
    return MODE_INSTRUCTIONS[AnalysisMode(mode)]


ANALYSIS_PROMPT = PromptTemplate.from_template(
    """You are LegalLens 360, an expert AI contract auditor.
Analyze the provided contract document(s) rigorously.
The input provided contains one or more image/PDF files which you must read and understand completely.

{mode_block}

USER QUERY / SPECIFIC INSTRUCTIONS:
"{user_query}"

OUTPUT REQUIREMENT:
Return a valid JSON object matching the defined schema.
Ensure all lists (risks, obligations, etc.) are populated if data exists."""
)

CHAT_SYSTEM_PROMPT = """You are LegalLens 360 Assistant. Use the following contract analysis context to answer user questions.
Context: {context}

If the user asks to "Rewrite" a clause, provide a legally safer, balanced version in Plain English and then formal legal text.
Keep answers concise and helpful."""

CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", CHAT_SYSTEM_PROMPT),
    MessagesPlaceholder("history"),
    ("human", "{question}"),
])
