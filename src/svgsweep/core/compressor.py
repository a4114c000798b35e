"""SVGZ compressors."""

from __future__ import annotations

import gzip
import logging
import shutil
import subprocess
import tempfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path

from svgsweep.errors import CompressionFailed

log = logging.getLogger(__name__)

COMPRESSED_EXTENSION = ".svgz"

_SEVEN_ZIP_BINARIES = ("7z", "7za", "7zz")
_SEVEN_ZIP_TIMEOUT = 120  # seconds


class Compressor(ABC):
    """Wraps cleaned markup into a gzip container."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Identifier used in configs, e.g. 'gzip'."""

    @property
    def unavailable_reason(self) -> str | None:
        """Why this compressor cannot work on this system, or None if supported."""
        return None

    def is_available(self) -> bool:
        return self.unavailable_reason is None

    @abstractmethod
    def compress(self, data: bytes, level: int) -> bytes:
        """Return ``data`` compressed at ``level``.

        Raises:
            CompressionFailed: if the container could not be produced.
        """


class GzipCompressor(Compressor):
    """In-process gzip with a fixed header timestamp, so output is reproducible."""

    @property
    def id(self) -> str:
        return "gzip"

    def compress(self, data: bytes, level: int) -> bytes:
        try:
            return gzip.compress(data, compresslevel=level, mtime=0)
        except (ValueError, OSError, zlib.error) as exc:
            raise CompressionFailed(f"gzip compression failed: {exc}") from exc


class SevenZipCompressor(Compressor):
    """Compresses through the external 7-Zip tool in gzip mode.

    7-Zip works on files, so the data goes through a scratch directory.
    """

    @property
    def id(self) -> str:
        return "7z"

    @staticmethod
    def _binary() -> str | None:
        for name in _SEVEN_ZIP_BINARIES:
            path = shutil.which(name)
            if path:
                return path
        return None

    @property
    def unavailable_reason(self) -> str | None:
        if self._binary() is None:
            return "7-Zip executable (7z, 7za or 7zz) not found"
        return None

    def compress(self, data: bytes, level: int) -> bytes:
        binary = self._binary()
        if binary is None:
            raise CompressionFailed(self.unavailable_reason or "7-Zip not available")

        with tempfile.TemporaryDirectory(prefix="svgsweep-7z-") as scratch:
            source = Path(scratch) / "document.svg"
            archive = Path(scratch) / "document.svgz"
            source.write_bytes(data)
            cmd = [binary, "a", "-tgzip", f"-mx={level}", "-bd", "-y", str(archive), str(source)]
            try:
                proc = subprocess.run(cmd, capture_output=True, timeout=_SEVEN_ZIP_TIMEOUT)
            except (OSError, subprocess.TimeoutExpired) as exc:
                raise CompressionFailed(f"7-Zip could not be run: {exc}") from exc

            if proc.returncode != 0 or not archive.exists():
                stderr = proc.stderr.decode(errors="replace").strip()
                raise CompressionFailed(
                    f"7-Zip exited with code {proc.returncode}: {stderr or 'no output'}"
                )
            return archive.read_bytes()


_COMPRESSORS: dict[str, type[Compressor]] = {
    "gzip": GzipCompressor,
    "7z": SevenZipCompressor,
}


def get_compressor(name: str) -> Compressor:
    """Return a compressor instance by ID.

    Raises:
        KeyError: if no compressor has this ID.
    """
    return _COMPRESSORS[name]()
