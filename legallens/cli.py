"""Command-line analysis of local contract files."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from legallens.agents.contract_analysis_agent import ContractAnalysisAgent
from legallens.agents.file_ingest_agent import FileIngestAgent
from legallens.core.errors import LegalLensError
from legallens.schemas.analysis import AnalysisMode

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LegalLens 360 contract analysis")
    parser.add_argument("contract", help="Path to the contract (PDF or image)")
    parser.add_argument("--compare", metavar="REVISED", help="Revised version to compare against (COMPARE mode)")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in AnalysisMode],
        help="Analysis mode (default: COMPARE with --compare, otherwise AUDIT)",
    )
    parser.add_argument("--query", default="", help="Specific question or instruction")
    return parser


async def run(
    args: argparse.Namespace,
    ingest_agent: FileIngestAgent,
    analysis_agent: ContractAnalysisAgent,
) -> str:
    """Analyze the files named in ``args`` and return the report as JSON."""
    mode = AnalysisMode(args.mode) if args.mode else (AnalysisMode.COMPARE if args.compare else AnalysisMode.AUDIT)
    primary = await ingest_agent.ingest_path(args.contract)
    comparison = await ingest_agent.ingest_path(args.compare) if args.compare else None

    analysis = await analysis_agent.analyze(primary, comparison, mode, args.query)
    return analysis.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def main(
    argv: Optional[List[str]] = None,
    ingest_agent: Optional[FileIngestAgent] = None,
    analysis_agent: Optional[ContractAnalysisAgent] = None,
) -> int:
    args = build_parser().parse_args(argv)
    try:
        report = asyncio.run(run(
            args,
            ingest_agent or FileIngestAgent(),
            analysis_agent or ContractAnalysisAgent(),
        ))
    except LegalLensError as e:
        logger.error(f"Analysis failed: {e.code}: {e.message}")
        print(json.dumps({"error": e.code, "detail": e.message}), file=sys.stderr)
        return 1

    print(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
