"""Run configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

from svgsweep.errors import InvalidConfig

DEFAULT_SUFFIX = "_cleaned"

MIN_LEVEL = 1
MAX_LEVEL = 9

MIN_PRECISION = 1
MAX_PRECISION = 12

COMPRESSORS = ("gzip", "7z")


class NamingMode(str, Enum):
    """How the destination path of a cleaned file is chosen."""

    PREFIX_SUFFIX = "prefix_suffix"
    OUTPUT_FOLDER = "output_folder"
    OVERWRITE = "overwrite"


@dataclass(frozen=True, slots=True)
class NamingPolicy:
    """Destination naming policy.

    ``replace_existing`` only matters for the prefix/suffix and output
    folder modes; overwrite mode always replaces its source.
    """

    mode: NamingMode = NamingMode.PREFIX_SUFFIX
    prefix: str = ""
    suffix: str = ""
    output_dir: Path | None = None
    replace_existing: bool = False

    @property
    def effective_suffix(self) -> str:
        if not self.prefix and not self.suffix:
            return DEFAULT_SUFFIX
        return self.suffix


@dataclass(frozen=True, slots=True)
class CompressionSpec:
    """Optional SVGZ post-compression settings."""

    enabled: bool = False
    compressor: str = "gzip"
    level: int = 9
    compress_all: bool = False


@dataclass(frozen=True, slots=True)
class CleanOptions:
    """Rule selection and numeric precision used by the transformer.

    ``rules`` is None for the default selection (every safe rule).
    """

    rules: tuple[str, ...] | None = None
    coordinates_precision: int = 6
    properties_precision: int = 6
    transforms_precision: int = 8
    paths_precision: int = 8


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Immutable description of one batch run."""

    naming: NamingPolicy = field(default_factory=NamingPolicy)
    compression: CompressionSpec = field(default_factory=CompressionSpec)
    clean: CleanOptions = field(default_factory=CleanOptions)
    thread_count: int = 1
    recursive: bool = False
    input_root: Path | None = None
    input_files: tuple[Path, ...] = ()

    def with_input(self, root: Path | None = None, files: tuple[Path, ...] = ()) -> RunConfig:
        """Return a copy of this config pointed at a different input."""
        return replace(self, input_root=root, input_files=tuple(files))

    def validate(self) -> None:
        """Raise InvalidConfig if the configuration cannot be run."""
        if self.thread_count < 1:
            raise InvalidConfig(f"Thread count must be at least 1, got {self.thread_count}")

        if self.input_root is None and not self.input_files:
            raise InvalidConfig("No input folder or input files were given")

        naming = self.naming
        if naming.mode is NamingMode.OUTPUT_FOLDER and naming.output_dir is None:
            raise InvalidConfig("Output folder is not selected")

        comp = self.compression
        if comp.compressor not in COMPRESSORS:
            raise InvalidConfig(f"Unknown compressor '{comp.compressor}'")
        if not MIN_LEVEL <= comp.level <= MAX_LEVEL:
            raise InvalidConfig(
                f"Compression level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {comp.level}"
            )

        if naming.mode is NamingMode.OVERWRITE and comp.enabled:
            if comp.compressor == "7z":
                raise InvalidConfig("The 7z compressor cannot overwrite original files")
            if comp.compress_all:
                raise InvalidConfig(
                    "Compressing all files to svgz cannot overwrite plain svg originals"
                )

        for name in ("coordinates_precision", "properties_precision",
                     "transforms_precision", "paths_precision"):
            value = getattr(self.clean, name)
            if not MIN_PRECISION <= value <= MAX_PRECISION:
                raise InvalidConfig(
                    f"{name} must be between {MIN_PRECISION} and {MAX_PRECISION}, got {value}"
                )

    # -- Serialization --

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-safe representation."""
        return {
            "naming": {
                "mode": self.naming.mode.value,
                "prefix": self.naming.prefix,
                "suffix": self.naming.suffix,
                "output_dir": str(self.naming.output_dir) if self.naming.output_dir else None,
                "replace_existing": self.naming.replace_existing,
            },
            "compression": {
                "enabled": self.compression.enabled,
                "compressor": self.compression.compressor,
                "level": self.compression.level,
                "compress_all": self.compression.compress_all,
            },
            "clean": {
                "rules": list(self.clean.rules) if self.clean.rules is not None else None,
                "coordinates_precision": self.clean.coordinates_precision,
                "properties_precision": self.clean.properties_precision,
                "transforms_precision": self.clean.transforms_precision,
                "paths_precision": self.clean.paths_precision,
            },
            "thread_count": self.thread_count,
            "recursive": self.recursive,
            "input_root": str(self.input_root) if self.input_root else None,
            "input_files": [str(p) for p in self.input_files],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunConfig:
        """Build a RunConfig from ``to_dict()`` output. Missing keys fall back to defaults."""
        naming = data.get("naming", {})
        comp = data.get("compression", {})
        clean = data.get("clean", {})
        defaults = CleanOptions()

        output_dir = naming.get("output_dir")
        rules = clean.get("rules")
        input_root = data.get("input_root")

        try:
            return cls(
                naming=NamingPolicy(
                    mode=NamingMode(naming.get("mode", NamingMode.PREFIX_SUFFIX.value)),
                    prefix=naming.get("prefix", ""),
                    suffix=naming.get("suffix", ""),
                    output_dir=Path(output_dir) if output_dir else None,
                    replace_existing=bool(naming.get("replace_existing", False)),
                ),
                compression=CompressionSpec(
                    enabled=bool(comp.get("enabled", False)),
                    compressor=comp.get("compressor", "gzip"),
                    level=int(comp.get("level", 9)),
                    compress_all=bool(comp.get("compress_all", False)),
                ),
                clean=CleanOptions(
                    rules=tuple(rules) if rules is not None else None,
                    coordinates_precision=int(
                        clean.get("coordinates_precision", defaults.coordinates_precision)
                    ),
                    properties_precision=int(
                        clean.get("properties_precision", defaults.properties_precision)
                    ),
                    transforms_precision=int(
                        clean.get("transforms_precision", defaults.transforms_precision)
                    ),
                    paths_precision=int(clean.get("paths_precision", defaults.paths_precision)),
                ),
                thread_count=int(data.get("thread_count", 1)),
                recursive=bool(data.get("recursive", False)),
                input_root=Path(input_root) if input_root else None,
                input_files=tuple(Path(p) for p in data.get("input_files", [])),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(f"Malformed configuration: {exc}") from exc
