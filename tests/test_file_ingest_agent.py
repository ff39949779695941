import asyncio
import base64
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from conftest import PDF_BYTES
from legallens.agents.file_ingest_agent import FileIngestAgent, strip_data_uri
from legallens.core.errors import IngestionError

agent = FileIngestAgent()


def test_encode_keeps_type_and_name():
    uploaded = agent.encode(PDF_BYTES, "application/pdf", "Lease Agreement (final).pdf")

    assert uploaded.mime_type == "application/pdf"
    assert uploaded.name == "Lease Agreement (final).pdf"
    assert base64.b64decode(uploaded.data) == PDF_BYTES
    assert uploaded.content_bytes() == PDF_BYTES
    assert uploaded.size == len(PDF_BYTES)


def test_data_uri_prefix_is_stripped():
    encoded = base64.b64encode(PDF_BYTES).decode("ascii")

    uploaded = agent.from_data_uri(f"data:application/pdf;base64,{encoded}", "application/pdf", "a.pdf")

    assert uploaded.data == encoded
    assert not uploaded.data.startswith("data:")


def test_plain_payload_passes_through_strip():
    assert strip_data_uri("QUJD") == "QUJD"


def test_invalid_base64_is_rejected():
    with pytest.raises(IngestionError):
        agent.from_data_uri("data:application/pdf;base64,@@not-base64@@", "application/pdf", "a.pdf")


@pytest.mark.parametrize("mime_type", ["image/png", "image/jpeg", "image/webp", "image/heic"])
def test_images_are_accepted(mime_type):
    assert agent.encode(b"\x89PNG...", mime_type, "scan").mime_type == mime_type


@pytest.mark.parametrize("mime_type", ["text/plain", "application/msword", ""])
def test_unsupported_type_is_rejected(mime_type):
    with pytest.raises(IngestionError):
        agent.encode(b"hello", mime_type, "contract.doc")


def test_empty_file_is_rejected():
    with pytest.raises(IngestionError):
        agent.encode(b"", "application/pdf", "empty.pdf")


def test_oversized_file_is_rejected():
    small = FileIngestAgent(max_bytes=16)
    with pytest.raises(IngestionError):
        small.encode(PDF_BYTES, "application/pdf", "big.pdf")


def test_ingest_path_reads_whole_file(tmp_path):
    path = tmp_path / "nda.pdf"
    path.write_bytes(PDF_BYTES)

    uploaded = asyncio.run(agent.ingest_path(path))

    assert uploaded.name == "nda.pdf"
    assert uploaded.mime_type == "application/pdf"
    assert uploaded.content_bytes() == PDF_BYTES


def test_ingest_path_honours_declared_type(tmp_path):
    path = tmp_path / "scan.bin"
    path.write_bytes(b"\xff\xd8\xff\xe0jpeg")

    uploaded = asyncio.run(agent.ingest_path(path, mime_type="image/jpeg"))

    assert uploaded.mime_type == "image/jpeg"


def test_unreadable_path_is_an_ingestion_error(tmp_path):
    with pytest.raises(IngestionError):
        asyncio.run(agent.ingest_path(tmp_path / "missing.pdf"))


def test_ingest_upload_reads_content_and_headers():
    upload = UploadFile(
        file=io.BytesIO(PDF_BYTES),
        filename="contract.pdf",
        headers=Headers({"content-type": "application/pdf"}),
    )

    uploaded = asyncio.run(agent.ingest_upload(upload))

    assert uploaded.name == "contract.pdf"
    assert uploaded.mime_type == "application/pdf"
    assert uploaded.content_bytes() == PDF_BYTES
