"""Input file discovery."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from svgsweep.errors import EmptyInput, InputNotFound
from svgsweep.models.config import NamingMode, RunConfig
from svgsweep.models.task import FileTask

log = logging.getLogger(__name__)

PLAIN_SUFFIXES = frozenset({".svg"})
COMPRESSED_SUFFIXES = frozenset({".svgz"})


def classify(path: Path) -> bool | None:
    """Return True for compressed markup, False for plain markup, None otherwise."""
    suffix = path.suffix.lower()
    if suffix in COMPRESSED_SUFFIXES:
        return True
    if suffix in PLAIN_SUFFIXES:
        return False
    return None


class FileScanner:
    """Enumerates SVG and SVGZ files from a folder or an explicit file list.

    Iterating the scanner walks the filesystem again each time, so the
    sequence can be restarted. Files with other extensions are skipped.
    """

    def __init__(
        self,
        root: Path | None = None,
        recursive: bool = False,
        files: Iterable[Path] = (),
        exclude: Iterable[Path] = (),
    ) -> None:
        self.root = root
        self.recursive = recursive
        self.files = tuple(files)
        self._exclude = {_normalize(p) for p in exclude}

    @classmethod
    def for_config(cls, config: RunConfig) -> FileScanner:
        """Build the scanner for a run, skipping the run's own output folder."""
        exclude = []
        if config.naming.mode is NamingMode.OUTPUT_FOLDER and config.naming.output_dir is not None:
            exclude.append(config.naming.output_dir)
        return cls(
            root=config.input_root,
            recursive=config.recursive,
            files=config.input_files,
            exclude=exclude,
        )

    def __iter__(self) -> Iterator[FileTask]:
        if self.files:
            yield from self._iter_files()
            return
        root = self.root
        if root is None:
            raise InputNotFound("Input folder is not selected")
        if not root.exists():
            raise InputNotFound(f"Input folder does not exist: {root}")
        if root.is_file():
            yield from self._iter_files((root,))
        elif root.is_dir():
            yield from self._iter_folder(root)
        else:
            raise InputNotFound(f"Input path is neither a folder nor a file: {root}")

    def collect(self) -> list[FileTask]:
        """Scan fully and return every task.

        Raises:
            InputNotFound: if the root or a listed file does not exist or
                cannot be read.
            EmptyInput: if no eligible file was found.
        """
        tasks = list(self)
        if not tasks:
            where = self.root if not self.files else "the given file list"
            raise EmptyInput(f"No svg or svgz files found in {where}")
        log.info("Found %d files to clean", len(tasks))
        return tasks

    def _iter_files(self, files: Iterable[Path] | None = None) -> Iterator[FileTask]:
        for path in files if files is not None else self.files:
            if not path.exists():
                raise InputNotFound(f"Input file does not exist: {path}")
            task = self._make_task(path, Path(path.name))
            if task is not None:
                yield task

    def _iter_folder(self, root: Path) -> Iterator[FileTask]:
        if not self.recursive:
            try:
                entries = sorted(root.iterdir())
            except OSError as exc:
                raise InputNotFound(f"Cannot read input folder {root}: {exc}") from exc
            for path in entries:
                if path.is_file():
                    task = self._make_task(path, Path(path.name))
                    if task is not None:
                        yield task
            return

        # Unreadable subfolders are skipped, an unreadable root is fatal
        if not os.access(root, os.R_OK | os.X_OK):
            raise InputNotFound(f"Cannot read input folder {root}: permission denied")
        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            current = Path(dirpath)
            dirnames[:] = sorted(d for d in dirnames if not self._excluded(current / d))
            for name in sorted(filenames):
                path = current / name
                task = self._make_task(path, path.relative_to(root))
                if task is not None:
                    yield task

    def _make_task(self, path: Path, relative: Path) -> FileTask | None:
        compressed = classify(path)
        if compressed is None:
            return None
        try:
            size = path.stat().st_size
        except OSError:
            log.debug("Cannot access: %s", path)
            return None
        return FileTask(
            source_path=path,
            is_compressed_input=compressed,
            size_before=size,
            relative_path=relative,
        )

    def _excluded(self, path: Path) -> bool:
        return bool(self._exclude) and _normalize(path) in self._exclude


def _normalize(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path.absolute()


def _log_walk_error(exc: OSError) -> None:
    log.debug("Cannot read directory: %s", exc)
