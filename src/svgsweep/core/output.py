"""Destination naming and atomic output writes."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable

from svgsweep.core.compressor import COMPRESSED_EXTENSION
from svgsweep.errors import FileError, InvalidConfig, PathConflict, WriteDenied
from svgsweep.models.config import NamingMode, NamingPolicy, RunConfig
from svgsweep.models.task import FileTask

log = logging.getLogger(__name__)

PLAIN_EXTENSION = ".svg"

# errno values meaning the filesystem cannot hard-link
_NO_LINK_ERRNOS = {errno.EPERM, errno.EXDEV, errno.EMLINK, errno.ENOTSUP, errno.EOPNOTSUPP}


def should_compress(task: FileTask, config: RunConfig) -> bool:
    """Decide whether the cleaned output of ``task`` goes into an SVGZ container.

    Overwrite mode keeps every original in its own format, so compressed
    inputs are compressed again even when compression is disabled.
    """
    comp = config.compression
    if comp.enabled and (comp.compress_all or task.is_compressed_input):
        return True
    return config.naming.mode is NamingMode.OVERWRITE and task.is_compressed_input


class OutputResolver:
    """Computes destination paths and writes cleaned files."""

    def __init__(self, naming: NamingPolicy, recursive: bool = False) -> None:
        if naming.mode is NamingMode.OUTPUT_FOLDER and naming.output_dir is None:
            raise InvalidConfig("Output folder mode requires an output folder")
        self._naming = naming
        self._recursive = recursive

    @property
    def naming(self) -> NamingPolicy:
        return self._naming

    def destination(self, task: FileTask, compressed: bool) -> Path:
        """Return the path the cleaned output of ``task`` is written to."""
        naming = self._naming
        ext = COMPRESSED_EXTENSION if compressed else PLAIN_EXTENSION
        source = task.source_path
        stem = source.stem

        match naming.mode:
            case NamingMode.OVERWRITE:
                return source
            case NamingMode.OUTPUT_FOLDER if naming.output_dir is not None:
                if self._recursive:
                    relative_dir = task.relative_path.parent
                    return naming.output_dir / relative_dir / f"{stem}{ext}"
                return naming.output_dir / f"{stem}{ext}"
            case _:
                return source.parent / f"{naming.prefix}{stem}{naming.effective_suffix}{ext}"

    def shared_destinations(self, tasks: Iterable[FileTask], config: RunConfig) -> dict[Path, Path]:
        """Find tasks whose destination is already claimed by an earlier task.

        ``a.svg`` and ``a.svgz`` both become ``a.svg`` without compression,
        for example. The first task in scan order keeps the destination.

        Returns:
            Source path of every later task, mapped to the source of the
            task that keeps the destination.
        """
        owners: dict[Path, Path] = {}
        shared: dict[Path, Path] = {}
        for task in tasks:
            destination = self.destination(task, should_compress(task, config))
            owner = owners.setdefault(destination, task.source_path)
            if owner != task.source_path:
                shared[task.source_path] = owner
        return shared

    def write(self, task: FileTask, destination: Path, data: bytes) -> None:
        """Atomically write ``data`` to ``destination``.

        The data lands in a temp file next to the destination first, so a
        crash never leaves a half-written file behind.

        Raises:
            PathConflict: if the destination exists and may not be replaced.
            WriteDenied: if the destination directory is not writable.
            FileError: for any other I/O failure.
        """
        replace = self._naming.mode is NamingMode.OVERWRITE or self._naming.replace_existing
        if not replace and destination.exists():
            raise PathConflict(f"Destination already exists: {destination}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
            )
        except PermissionError as exc:
            raise WriteDenied(f"Permission denied: {destination.parent}") from exc
        except OSError as exc:
            raise FileError(f"Cannot create {destination.parent}: {exc}") from exc

        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            try:
                shutil.copymode(task.source_path, tmp)
            except OSError:
                log.debug("Could not copy permissions of %s", task.source_path)

            if replace:
                os.replace(tmp, destination)
            else:
                self._publish_exclusive(tmp, destination)
        except PermissionError as exc:
            raise WriteDenied(f"Permission denied: {destination}") from exc
        except FileError:
            raise
        except OSError as exc:
            raise FileError(f"Cannot write {destination}: {exc}") from exc
        finally:
            tmp.unlink(missing_ok=True)

    @staticmethod
    def _publish_exclusive(tmp: Path, destination: Path) -> None:
        """Move ``tmp`` to ``destination`` unless something already exists there."""
        try:
            os.link(tmp, destination)
            return
        except FileExistsError as exc:
            raise PathConflict(f"Destination already exists: {destination}") from exc
        except OSError as exc:
            if exc.errno not in _NO_LINK_ERRNOS:
                raise
        # Filesystem without hard links
        if destination.exists():
            raise PathConflict(f"Destination already exists: {destination}")
        os.replace(tmp, destination)
