"""
=============================================================================
FILE HANDLER
=============================================================================

Serves and stores files under the configured directory:

    GET  /files/{name}   →  200 application/octet-stream, file bytes
                             404 if no directory is configured
                             404 if the file cannot be stat'ed
    POST /files/{name}   →  201 Created after writing the body
                             404 if no directory is configured

{name} is used verbatim: the URL tail is turned back into its original
bytes and joined onto the directory. No decoding, no sanitizing beyond
what the OS path rules already do.

Files are always read and written as bytes, so binary content survives
the round trip untouched.

=============================================================================
"""

import logging
import os
from pathlib import Path
from typing import Optional

from ..errors import FileMissingError, FileReadError, FileWriteError
from ..http.request import HEADER_ENCODING, HTTPRequest
from ..http.response import HTTPResponse, created, not_found, ok_bytes


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Handler pair for the /files/ routes.

    Usage:
        files = FileHandler(config.directory)
        router.get("/files/", kind=RouteType.PREFIX)(files.download)
        router.post("/files/", kind=RouteType.PREFIX, requires_body=True)(files.upload)
    """

    def __init__(self, directory: Optional[str] = None):
        """
        Args:
            directory: Root directory for files. None disables both routes
                       (they answer 404).
        """
        self.directory = Path(directory) if directory is not None else None

    def resolve(self, name: str) -> Path:
        """
        Join a URL tail onto the directory.

        The tail was decoded from raw bytes as latin-1; encoding it back
        gives those bytes, and os.fsdecode maps them to a filesystem name.
        """
        return self.directory / os.fsdecode(name.encode(HEADER_ENCODING))

    def download(self, request: HTTPRequest, name: str) -> HTTPResponse:
        """GET /files/{name}."""
        if self.directory is None:
            return not_found()

        try:
            data = self._read(self.resolve(name))
        except FileMissingError as e:
            logger.debug(str(e))
            return not_found()

        return ok_bytes(data)

    def upload(self, request: HTTPRequest, name: str) -> HTTPResponse:
        """POST /files/{name}. Truncates any existing file."""
        if self.directory is None:
            return not_found()

        path = self.resolve(name)
        self._write(path, request.body or b"")
        logger.info(f"Stored {len(request.body or b'')} bytes at {path}")
        return created()

    def _read(self, path: Path) -> bytes:
        try:
            path.stat()
        except (OSError, ValueError) as e:
            raise FileMissingError(f"File not found: {path}") from e

        try:
            return path.read_bytes()
        except (OSError, ValueError) as e:
            raise FileReadError(f"Failed to read {path}: {e}") from e

    def _write(self, path: Path, data: bytes) -> None:
        try:
            path.write_bytes(data)
        except (OSError, ValueError) as e:
            raise FileWriteError(f"Failed to write {path}: {e}") from e
