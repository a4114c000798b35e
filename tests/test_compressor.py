"""Tests for the SVGZ compressors."""

from __future__ import annotations

import gzip
import shutil
import subprocess

import pytest

from svgsweep.core.compressor import GzipCompressor, SevenZipCompressor, get_compressor
from svgsweep.errors import CompressionFailed
from tests.conftest import CLEANED_SVG


class TestGzipCompressor:
    def test_round_trip(self):
        data = GzipCompressor().compress(CLEANED_SVG, 9)
        assert data[:2] == b"\x1f\x8b"
        assert gzip.decompress(data) == CLEANED_SVG

    def test_reproducible(self):
        compressor = GzipCompressor()
        assert compressor.compress(CLEANED_SVG, 6) == compressor.compress(CLEANED_SVG, 6)

    def test_always_available(self):
        assert GzipCompressor().is_available()


class TestSevenZipCompressor:
    def test_unavailable_without_binary(self, monkeypatch):
        monkeypatch.setattr(shutil, "which", lambda name: None)
        compressor = SevenZipCompressor()
        assert not compressor.is_available()
        assert "not found" in compressor.unavailable_reason
        with pytest.raises(CompressionFailed):
            compressor.compress(CLEANED_SVG, 9)

    def test_tool_failure(self, monkeypatch):
        monkeypatch.setattr(SevenZipCompressor, "_binary", staticmethod(lambda: "/usr/bin/7z"))
        monkeypatch.setattr(
            subprocess, "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 2, b"", b"broken pipe"),
        )
        with pytest.raises(CompressionFailed, match="code 2: broken pipe"):
            SevenZipCompressor().compress(CLEANED_SVG, 9)

    def test_passes_level(self, monkeypatch):
        seen = {}

        def fake_run(cmd, **kwargs):
            seen["cmd"] = cmd
            # Pretend 7-Zip wrote the archive
            with open(cmd[-2], "wb") as f:
                f.write(gzip.compress(CLEANED_SVG))
            return subprocess.CompletedProcess(cmd, 0, b"", b"")

        monkeypatch.setattr(SevenZipCompressor, "_binary", staticmethod(lambda: "/usr/bin/7z"))
        monkeypatch.setattr(subprocess, "run", fake_run)
        data = SevenZipCompressor().compress(CLEANED_SVG, 3)
        assert "-mx=3" in seen["cmd"]
        assert "-tgzip" in seen["cmd"]
        assert gzip.decompress(data) == CLEANED_SVG

    @pytest.mark.skipif(SevenZipCompressor().unavailable_reason is not None,
                        reason="7-Zip is not installed")
    def test_real_tool(self):
        data = SevenZipCompressor().compress(CLEANED_SVG, 9)
        assert gzip.decompress(data) == CLEANED_SVG


class TestGetCompressor:
    def test_known(self):
        assert get_compressor("gzip").id == "gzip"
        assert get_compressor("7z").id == "7z"

    def test_unknown(self):
        with pytest.raises(KeyError):
            get_compressor("zstd")
