"""Shared test fixtures."""

from __future__ import annotations

import gzip

import pytest

import svgsweep.storage as storage
from svgsweep.core.registry import RuleRegistry
from svgsweep.core.rule_loader import load_rules
from svgsweep.settings import Settings

SVG_NS_DECL = 'xmlns="http://www.w3.org/2000/svg"'

VALID_SVG = b"""<?xml version="1.0" encoding="UTF-8"?>
<!-- Generator: Test Editor -->
<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     width="100" height="100" viewBox="0 0 100.000 100.000" inkscape:version="1.0">
  <metadata><rdf>author</rdf></metadata>
  <!-- a comment -->
  <g opacity="1" stroke-width="1">
    <rect x="0" y="0" width="10.123456789" height="20" fill="red"/>
    <path d="M 10 20 L 30 40 Z"/>
  </g>
</svg>
"""

CLEANED_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">'
    b'<g><rect width="10.123457" height="20" fill="red"/><path d="M10 20 30 40Z"/></g>'
    b"</svg>"
)

TRUNCATED_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"><g><rect width="1"'


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect run history to a temp directory."""
    data_dir = tmp_path / "svgsweep_data"
    data_dir.mkdir()
    history_file = data_dir / "history.json"
    monkeypatch.setattr(storage, "HISTORY_FILE", history_file)
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return history_file


@pytest.fixture
def isolate_config(tmp_path, monkeypatch):
    """Point settings and presets at a temp config home."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home


@pytest.fixture
def registry():
    """Registry with every built-in rule."""
    reg = RuleRegistry()
    load_rules(reg, external=False)
    return reg


@pytest.fixture
def input_dir(tmp_path):
    """Folder with one valid svg, one truncated svg and one valid svgz."""
    folder = tmp_path / "input"
    folder.mkdir()
    (folder / "a.svg").write_bytes(VALID_SVG)
    (folder / "b.svg").write_bytes(TRUNCATED_SVG)
    (folder / "c.svgz").write_bytes(gzip.compress(VALID_SVG))
    (folder / "notes.txt").write_text("not an image")
    return folder
