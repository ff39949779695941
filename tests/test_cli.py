import json

import pytest

from conftest import PDF_BYTES, REVISED_PDF_BYTES, analysis_agent_for, make_client
from legallens.agents.file_ingest_agent import FileIngestAgent
from legallens.cli import main


@pytest.fixture
def contract_path(tmp_path):
    path = tmp_path / "msa.pdf"
    path.write_bytes(PDF_BYTES)
    return path


def test_audit_prints_report(contract_path, analysis_json, capsys):
    client = make_client(text=analysis_json)

    code = main([str(contract_path)], FileIngestAgent(), analysis_agent_for(client))

    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["riskScore"] == 45
    parts = client.aio.models.generate_content.await_args.kwargs["contents"][0].parts
    assert len(parts) == 2
    assert "RISK AUDIT" in parts[-1].text


def test_compare_flag_selects_compare_mode(contract_path, tmp_path, analysis_json, capsys):
    revised = tmp_path / "msa_v2.pdf"
    revised.write_bytes(REVISED_PDF_BYTES)
    client = make_client(text=analysis_json)

    code = main(
        [str(contract_path), "--compare", str(revised), "--query", "What got worse?"],
        FileIngestAgent(),
        analysis_agent_for(client),
    )

    assert code == 0
    parts = client.aio.models.generate_content.await_args.kwargs["contents"][0].parts
    assert len(parts) == 3
    assert "COMPARE VERSIONS" in parts[-1].text
    assert '"What got worse?"' in parts[-1].text


def test_missing_file_exits_with_error(tmp_path, capsys):
    client = make_client(text="{}")

    code = main([str(tmp_path / "missing.pdf")], FileIngestAgent(), analysis_agent_for(client))

    assert code == 1
    assert json.loads(capsys.readouterr().err.strip().splitlines()[-1])["error"] == "INGESTION_ERROR"
    client.aio.models.generate_content.assert_not_awaited()


def test_model_failure_exits_with_error(contract_path, capsys):
    code = main([str(contract_path)], FileIngestAgent(), analysis_agent_for(make_client(text="")))

    assert code == 1
    assert json.loads(capsys.readouterr().err.strip().splitlines()[-1])["error"] == "EMPTY_RESPONSE"
