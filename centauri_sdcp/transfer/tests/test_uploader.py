"""Tests for the ChunkedUploader."""

import hashlib
import json
from typing import Any
from unittest.mock import MagicMock, Mock

import aiohttp
import pytest

from centauri_sdcp.sdcp.exceptions import SDCPUploadFailedError
from centauri_sdcp.sdcp.models.printer import Session
from centauri_sdcp.transfer import uploader as uploader_module
from centauri_sdcp.transfer.uploader import ChunkedUploader, acknowledgement_failed

PRINTER_IP = "10.0.0.5"


class RecordingForm:
    """Stand-in for aiohttp.FormData that keeps fields readable."""

    def __init__(self) -> None:
        self.fields: dict[str, Any] = {}
        self.filename: str | None = None

    def add_field(self, name: str, value: Any, **kwargs: Any) -> None:
        self.fields[name] = value
        if "filename" in kwargs:
            self.filename = kwargs["filename"]


class FakeResponse:
    """Async context manager mimicking an aiohttp response."""

    def __init__(self, status: int, body: Any) -> None:
        self.status = status
        self._text = body if isinstance(body, str) else json.dumps(body)

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *args: Any) -> None:
        return None


@pytest.fixture(autouse=True)
def recording_form(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace FormData so posted chunks can be inspected."""
    monkeypatch.setattr(uploader_module.aiohttp, "FormData", RecordingForm)


@pytest.fixture
def http_session() -> MagicMock:
    """Create an http session whose posts all succeed."""
    session = MagicMock(spec=aiohttp.ClientSession)
    session.post = Mock(side_effect=lambda *a, **kw: FakeResponse(200, {"Code": 0}))
    return session


@pytest.fixture
def uploader(http_session: MagicMock) -> ChunkedUploader:
    """Create an uploader with a tiny chunk size."""
    return ChunkedUploader(Session(PRINTER_IP), http_session, Mock(), chunk_size=10)


def posted_forms(http_session: MagicMock) -> list[RecordingForm]:
    return [call.kwargs["data"] for call in http_session.post.call_args_list]


class TestAcknowledgement:
    """Test cases for acknowledgement_failed."""

    @pytest.mark.parametrize(
        "body",
        [{"Code": 0}, {"Code": "0"}, {"Code": "000000"}, {"code": "000000"}, {}],
    )
    def test_success(self, body: dict[str, Any]) -> None:
        """Test acknowledgements that accept the chunk."""
        assert not acknowledgement_failed(body)

    @pytest.mark.parametrize(
        "body",
        [
            None,
            "ok",
            {"Code": 1},
            {"Code": -1},
            {"Code": "E1001"},
            {"code": "100001"},
        ],
    )
    def test_failure(self, body: Any) -> None:
        """Test acknowledgements that reject the chunk."""
        assert acknowledgement_failed(body)


class TestChunkedUploader:
    """Test cases for ChunkedUploader.upload_file."""

    @pytest.mark.anyio
    async def test_chunks_in_order(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a file is split into ascending chunks with shared metadata."""
        data = bytes(range(25))

        result = await uploader.upload_file("part.gcode", data)

        assert result == {"Code": 0}
        forms = posted_forms(http_session)
        assert len(forms) == 3
        assert [form.fields["Offset"] for form in forms] == ["0", "10", "20"]
        assert [len(form.fields["File"]) for form in forms] == [10, 10, 5]
        assert b"".join(form.fields["File"] for form in forms) == data
        md5 = hashlib.md5(data).hexdigest()  # noqa: S324
        for form in forms:
            assert form.fields["TotalSize"] == "25"
            assert form.fields["S-File-MD5"] == md5
            assert form.fields["Check"] == "1"
            assert form.filename == "part.gcode"
        assert len({form.fields["Uuid"] for form in forms}) == 1
        assert http_session.post.call_args.args[0] == (
            f"http://{PRINTER_IP}:3030/uploadFile/upload"
        )

    @pytest.mark.anyio
    async def test_progress(self, uploader: ChunkedUploader) -> None:
        """Test progress is reported per chunk and ends at exactly 100."""
        progress = Mock()

        await uploader.upload_file("part.gcode", bytes(25), progress)

        values = [call.args[0] for call in progress.call_args_list]
        assert values == [0, 40, 80, 100]
        assert values == sorted(values)

    @pytest.mark.anyio
    async def test_rejected_chunk_aborts(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a nonzero code stops the upload before the next chunk."""
        responses = iter(
            [FakeResponse(200, {"Code": 0}), FakeResponse(200, {"Code": 3})]
        )
        http_session.post.side_effect = lambda *a, **kw: next(responses)
        progress = Mock()

        with pytest.raises(SDCPUploadFailedError) as excinfo:
            await uploader.upload_file("part.gcode", bytes(25), progress)

        assert excinfo.value.offset == 10
        assert excinfo.value.response == {"Code": 3}
        assert http_session.post.call_count == 2
        assert 100 not in [call.args[0] for call in progress.call_args_list]

    @pytest.mark.anyio
    async def test_negative_code_aborts(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a negative status code is treated as a rejection."""
        http_session.post.side_effect = lambda *a, **kw: FakeResponse(
            200, {"Code": -1}
        )
        progress = Mock()

        with pytest.raises(SDCPUploadFailedError) as excinfo:
            await uploader.upload_file("a.gcode", b"0123456789", progress)

        assert excinfo.value.offset == 0
        assert http_session.post.call_count == 1
        progress.assert_not_called()

    @pytest.mark.anyio
    async def test_http_error_status(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a non-2xx response fails the upload."""
        http_session.post.side_effect = lambda *a, **kw: FakeResponse(500, "boom")

        with pytest.raises(SDCPUploadFailedError, match="HTTP 500"):
            await uploader.upload_file("part.gcode", bytes(5))

    @pytest.mark.anyio
    async def test_client_error(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a transport failure is reported as an upload failure."""
        http_session.post.side_effect = aiohttp.ClientError("reset")

        with pytest.raises(SDCPUploadFailedError) as excinfo:
            await uploader.upload_file("part.gcode", bytes(5))

        assert excinfo.value.offset == 0

    @pytest.mark.anyio
    async def test_string_success_code(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test the string success code is accepted."""
        http_session.post.side_effect = lambda *a, **kw: FakeResponse(
            200, {"code": "000000", "messages": None}
        )

        result = await uploader.upload_file("part.gcode", bytes(5))

        assert result == {"code": "000000", "messages": None}

    @pytest.mark.anyio
    async def test_empty_file(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test an empty file sends nothing and completes at 100."""
        progress = Mock()

        result = await uploader.upload_file("empty.gcode", b"", progress)

        assert result is None
        http_session.post.assert_not_called()
        progress.assert_called_once_with(100)

    @pytest.mark.anyio
    async def test_resume(
        self, uploader: ChunkedUploader, http_session: MagicMock
    ) -> None:
        """Test a transfer continues from an offset under its original uuid."""
        data = bytes(range(25))

        await uploader.upload_file("part.gcode", data, uuid="abc", offset=10)

        forms = posted_forms(http_session)
        assert [form.fields["Offset"] for form in forms] == ["10", "20"]
        assert {form.fields["Uuid"] for form in forms} == {"abc"}
        assert forms[0].fields["S-File-MD5"] == hashlib.md5(data).hexdigest()  # noqa: S324
