"""Exception hierarchy for the cleaning pipeline."""

from __future__ import annotations


class SweepError(Exception):
    """Base class for all svgsweep errors."""


class FatalError(SweepError):
    """Error that prevents a run from starting."""


class InputNotFound(FatalError):
    """The input root (or a listed input file) does not exist."""


class EmptyInput(FatalError):
    """No eligible SVG or SVGZ files were found."""


class InvalidConfig(FatalError):
    """The run configuration is inconsistent or out of range."""


class FileError(SweepError):
    """Per-file failure. Reported as a crashed result, never fatal."""


class TransformError(FileError):
    """The document could not be decompressed, parsed or serialized."""


class CompressionFailed(FileError):
    """The compressor could not produce an SVGZ container."""


class WriteDenied(FileError):
    """The destination could not be written because of permissions."""


class PathConflict(FileError):
    """The destination already exists and the naming policy forbids replacing it."""


class PresetError(SweepError):
    """Base class for preset store errors."""


class NameRequired(PresetError):
    """A preset name was empty."""


class PresetExists(PresetError):
    """A preset with this name exists and overwrite was not confirmed."""


class PresetNotFound(PresetError):
    """No preset with this name exists."""


class CannotRemoveDefault(PresetError):
    """The reserved default preset cannot be removed."""
