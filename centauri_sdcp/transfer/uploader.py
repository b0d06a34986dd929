"""Chunked HTTP file upload to SDCP printers."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import aiohttp

from centauri_sdcp.const import (
    UPLOAD_CHUNK_SIZE,
    UPLOAD_ENDPOINT,
    UPLOAD_SUCCESS_CODE,
)
from centauri_sdcp.sdcp.const import DEBUG, LOGGER
from centauri_sdcp.sdcp.exceptions import SDCPUploadFailedError
from centauri_sdcp.sdcp.models.printer import Session
from centauri_sdcp.sdcp.models.transfer import UploadTransfer

ProgressCallback = Callable[[int], Any]


def acknowledgement_failed(body: Any) -> bool:
    """
    Return True if an upload acknowledgement reports a rejected chunk.

    Printers answer with either a numeric "Code" (0 is success) or a string
    "code" ("000000" is success). Any other value rejects the chunk.
    """
    if not isinstance(body, dict):
        return True
    code = body.get("Code")
    if isinstance(code, bool):
        code = int(code)
    if isinstance(code, (int, float)) and code != 0:
        return True
    if isinstance(code, str) and code.strip() not in ("", "0", UPLOAD_SUCCESS_CODE):
        return True
    lower_code = body.get("code")
    return bool(lower_code) and str(lower_code) != UPLOAD_SUCCESS_CODE


class ChunkedUploader:
    """
    Sends a file to the printer over HTTP in fixed-size chunks.

    The upload does not travel on the websocket. Each chunk is a multipart
    POST carrying the whole-file MD5 so the printer can verify the assembled
    file once the last chunk lands.
    """

    def __init__(
        self,
        session: Session,
        http_session: aiohttp.ClientSession,
        logger: Any = LOGGER,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
    ) -> None:
        """Initialize an uploader for the printer a session points at."""
        self.session = session
        self.logger = logger
        self.chunk_size = chunk_size
        self._http_session = http_session

    @property
    def upload_url(self) -> str:
        return f"{self.session.http_url}{UPLOAD_ENDPOINT}"

    async def upload_file(
        self,
        filename: str,
        data: bytes,
        on_progress: ProgressCallback | None = None,
        *,
        uuid: str | None = None,
        offset: int = 0,
    ) -> dict[str, Any] | None:
        """
        Upload a file, one chunk at a time in ascending offset order.

        Arguments:
            filename: The name the file is stored under on the printer.
            data: The complete file contents.
            on_progress: Called with a whole percent after every acknowledged
                chunk and with exactly 100 once the file is done.
            uuid: Transfer id to continue an earlier transfer with. A fresh
                one is generated when omitted.
            offset: Byte offset to start sending from when continuing.

        Returns:
            The acknowledgement body of the last chunk, or None for an empty file.

        Raises:
            SDCPUploadFailedError: If the printer rejects a chunk.

        """
        transfer_args: dict[str, Any] = {
            "chunk_size": self.chunk_size,
            "offset": offset,
        }
        if uuid:
            transfer_args["uuid"] = uuid
        transfer = UploadTransfer(filename, data, **transfer_args)
        self.logger.info(
            "Uploading %s (%s bytes, %s chunks, md5 %s)",
            filename,
            transfer.total_size,
            transfer.chunk_count,
            transfer.md5,
        )

        last_response: dict[str, Any] | None = None
        while not transfer.done:
            last_response = await self._send_chunk(transfer)
            if on_progress:
                on_progress(transfer.progress)
            transfer.advance()

        if on_progress:
            on_progress(100)
        self.logger.info("Upload of %s complete", filename)
        return last_response

    async def _send_chunk(self, transfer: UploadTransfer) -> dict[str, Any]:
        chunk = transfer.current_chunk()
        form = aiohttp.FormData()
        form.add_field("TotalSize", str(transfer.total_size))
        form.add_field("Uuid", transfer.uuid)
        form.add_field("Offset", str(transfer.offset))
        form.add_field("Check", "1")
        form.add_field("S-File-MD5", transfer.md5)
        form.add_field(
            "File",
            chunk,
            filename=transfer.filename,
            content_type="application/octet-stream",
        )
        if DEBUG:
            self.logger.debug(
                "chunk << offset=%s size=%s uuid=%s",
                transfer.offset,
                len(chunk),
                transfer.uuid,
            )

        try:
            async with self._http_session.post(self.upload_url, data=form) as response:
                status = response.status
                text = await response.text()
        except aiohttp.ClientError as e:
            raise SDCPUploadFailedError(transfer.offset, str(e)) from e

        try:
            body = json.loads(text)
        except json.JSONDecodeError:
            body = None

        if not 200 <= status < 300:  # noqa: PLR2004
            msg = f"HTTP {status}: {text[:200]}"
            raise SDCPUploadFailedError(
                transfer.offset, msg, body if isinstance(body, dict) else None
            )
        if acknowledgement_failed(body):
            msg = f"printer rejected chunk: {text[:200]}"
            raise SDCPUploadFailedError(
                transfer.offset, msg, body if isinstance(body, dict) else None
            )
        return body
