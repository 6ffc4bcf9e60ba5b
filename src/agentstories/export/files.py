"""Exported file value object shared by every exporter and adapter."""

from __future__ import annotations

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class ExportedFile:
    """
    One generated file.

    ``path`` is slash-separated and relative to the export root. Binary
    files carry base64 text in ``content`` and set ``binary``.
    """

    path: str
    content: str
    binary: bool = False

    @classmethod
    def from_bytes(cls, path: str, data: bytes) -> ExportedFile:
        return cls(path=path, content=base64.b64encode(data).decode("ascii"), binary=True)

    def data(self) -> bytes:
        """Return the file's real bytes (base64-decoded for binary files)."""
        if self.binary:
            return base64.b64decode(self.content)
        return self.content.encode("utf-8")

    def under(self, directory: str) -> ExportedFile:
        """Return a copy of this file placed inside ``directory``."""
        return ExportedFile(
            path=f"{directory.rstrip('/')}/{self.path}",
            content=self.content,
            binary=self.binary,
        )
