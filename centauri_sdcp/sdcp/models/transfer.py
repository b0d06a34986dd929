"""Upload transfer model."""

from __future__ import annotations

import hashlib
import math
import uuid as uuid_lib
from dataclasses import dataclass, field

from centauri_sdcp.const import UPLOAD_CHUNK_SIZE


def file_md5(data: bytes) -> str:
    """Return the hex MD5 digest the printer checks a finished upload against."""
    return hashlib.md5(data).hexdigest()  # noqa: S324


@dataclass
class UploadTransfer:
    """
    One in-flight file upload.

    Offsets advance by chunk_size from the starting offset until they reach
    total_size. The checksum always covers the whole file, whatever the
    starting offset.
    """

    filename: str
    data: bytes = field(repr=False)
    chunk_size: int = UPLOAD_CHUNK_SIZE
    uuid: str = field(default_factory=lambda: str(uuid_lib.uuid4()))
    offset: int = 0
    md5: str = ""

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            msg = "chunk_size must be a positive integer"
            raise ValueError(msg)
        if not 0 <= self.offset <= self.total_size:
            msg = f"offset {self.offset} is outside the file (0..{self.total_size})"
            raise ValueError(msg)
        if not self.md5:
            self.md5 = file_md5(self.data)

    @property
    def total_size(self) -> int:
        return len(self.data)

    @property
    def chunk_count(self) -> int:
        return math.ceil(self.total_size / self.chunk_size)

    @property
    def done(self) -> bool:
        return self.offset >= self.total_size

    @property
    def progress(self) -> int:
        """Whole percent of the file acknowledged so far."""
        if self.total_size == 0:
            return 100
        return math.floor(self.offset / self.total_size * 100)

    def current_chunk(self) -> bytes:
        return self.data[self.offset : self.offset + self.chunk_size]

    def advance(self) -> None:
        self.offset = min(self.offset + self.chunk_size, self.total_size)
