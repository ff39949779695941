import asyncio
import base64
import binascii
import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional, Union

from starlette.datastructures import UploadFile

from legallens.core.config import settings
from legallens.core.errors import IngestionError
from legallens.schemas.analysis import UploadedFile

logger = logging.getLogger(__name__)

# HEIC is not in every platform's mimetypes table
mimetypes.add_type("image/heic", ".heic")
mimetypes.add_type("image/heif", ".heif")
mimetypes.add_type("image/webp", ".webp")


class FileIngestAgent:
    """Agent for turning user-selected files into transport-ready payloads."""

    def __init__(
        self,
        accepted_mime_types: Optional[Iterable[str]] = None,
        max_bytes: Optional[int] = None,
    ):
        """Initialize the file ingestion agent.

        Args:
            accepted_mime_types: Declared media types to accept
            max_bytes: Largest accepted file size in bytes
        """
        self.accepted_mime_types = frozenset(accepted_mime_types or settings.ACCEPTED_MIME_TYPES)
        self.max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

    def encode(self, content: bytes, mime_type: str, name: str) -> UploadedFile:
        """Encode raw file content as an ``UploadedFile``.

        Args:
            content: Full binary content of the file
            mime_type: Declared media type, kept unmodified
            name: Display name, kept unmodified

        Returns:
            Uploaded file with base64 data
        """
        self._check_declared_type(mime_type, name)
        if not content:
            raise IngestionError(f"File '{name}' is empty")
        if len(content) > self.max_bytes:
            raise IngestionError(
                f"File '{name}' is {len(content)} bytes; the limit is {self.max_bytes} bytes"
            )
        return UploadedFile(
            data=base64.b64encode(content).decode("ascii"),
            mime_type=mime_type,
            name=name,
        )

    def from_data_uri(self, payload: str, mime_type: str, name: str) -> UploadedFile:
        """Build an ``UploadedFile`` from a base64 payload, dropping any data-URI prefix."""
        data = strip_data_uri(payload)
        try:
            content = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise IngestionError(f"File '{name}' is not valid base64 data") from e
        return self.encode(content, mime_type, name)

    async def ingest_upload(self, upload: UploadFile) -> UploadedFile:
        """Read an HTTP upload completely and encode it."""
        name = upload.filename or "contract"
        try:
            content = await upload.read()
        except OSError as e:
            logger.error(f"Error reading upload {name}: {str(e)}")
            raise IngestionError(f"Could not read file '{name}'") from e

        uploaded = self.encode(content, upload.content_type or "", name)
        logger.info(f"Ingested upload {name} ({uploaded.mime_type}, {len(content)} bytes)")
        return uploaded

    async def ingest_path(
        self,
        path: Union[str, Path],
        mime_type: Optional[str] = None,
    ) -> UploadedFile:
        """Read a local file off the event loop and encode it.

        Args:
            path: Path to the contract file
            mime_type: Declared media type; guessed from the extension when omitted

        Returns:
            Uploaded file with base64 data
        """
        path = Path(path)
        declared = mime_type or mimetypes.guess_type(path.name)[0] or ""
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            logger.error(f"Error reading {path}: {str(e)}")
            raise IngestionError(f"Could not read file '{path.name}'") from e

        uploaded = self.encode(content, declared, path.name)
        logger.info(f"Ingested {path.name} ({declared}, {len(content)} bytes)")
        return uploaded

    def _check_declared_type(self, mime_type: str, name: str) -> None:
        if mime_type not in self.accepted_mime_types:
            raise IngestionError(
                f"File '{name}' has unsupported type '{mime_type or 'unknown'}'. "
                "Upload a PDF or an image (PNG, JPEG, WEBP, HEIC)."
            )


def strip_data_uri(payload: str) -> str:
    """Return only the encoded bytes of a ``data:<type>;base64,<data>`` string."""
    payload = payload.strip()
    if payload.startswith("data:") and "," in payload:
        return payload.split(",", 1)[1]
    return payload
