"""Cleaning rule discovery.

Rules are searched in this order:

1. the built-in ``svgsweep.rules`` package,
2. ``/usr/share/svgsweep/rules``,
3. ``$XDG_DATA_HOME/svgsweep/rules``,
4. every directory listed in the ``rules.paths`` setting.

A rule directory holds plain ``.py`` modules or packages (a folder with an
``__init__.py``, the rule living in ``rule.py`` if present). The first rule
registered under an ID wins.
"""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import itertools
import logging
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import Iterable, Iterator

from svgsweep.core.registry import RuleRegistry
from svgsweep.models.rule import CleanRule
from svgsweep.settings import Settings
from svgsweep.utils import xdg_data_home

log = logging.getLogger(__name__)

SYSTEM_RULE_DIR = Path("/usr/share/svgsweep/rules")

_EXTERNAL_PREFIX = "svgsweep_ext_rule_"


def user_rule_dir() -> Path:
    return xdg_data_home() / "svgsweep" / "rules"


def rule_classes(module: ModuleType) -> list[type[CleanRule]]:
    """Concrete CleanRule subclasses defined in ``module`` (not imported into it)."""
    return [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if issubclass(obj, CleanRule)
        and not inspect.isabstract(obj)
        and obj.__module__ == module.__name__
    ]


def iter_builtin_modules() -> Iterator[ModuleType]:
    import svgsweep.rules as package

    for info in pkgutil.iter_modules(package.__path__, prefix="svgsweep.rules."):
        try:
            yield importlib.import_module(info.name)
        except Exception:
            log.exception("Failed to import built-in rule module %s", info.name)


def _module_file(entry: Path) -> Path | None:
    if entry.is_dir():
        if not (entry / "__init__.py").exists():
            return None
        rule_file = entry / "rule.py"
        return rule_file if rule_file.exists() else entry / "__init__.py"
    if entry.suffix == ".py" and not entry.name.startswith(("_", ".")):
        return entry
    return None


def iter_directory_modules(directory: Path) -> Iterator[ModuleType]:
    """Import every rule module found directly inside ``directory``.

    Modules that fail to import are logged and skipped.
    """
    if not directory.is_dir():
        return
    for entry in sorted(directory.iterdir()):
        module_file = _module_file(entry)
        if module_file is None:
            continue
        spec = importlib.util.spec_from_file_location(_EXTERNAL_PREFIX + entry.stem, module_file)
        if spec is None or spec.loader is None:
            continue
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception:
            log.exception("Failed to load rule module %s", module_file)
            continue
        log.debug("Loaded external rule module %s", module_file)
        yield module


def rule_directories(settings: Settings) -> list[Path]:
    return [SYSTEM_RULE_DIR, user_rule_dir(), *settings.rule_paths]


def load_rules(
    registry: RuleRegistry,
    settings: Settings | None = None,
    *,
    external: bool = True,
) -> None:
    """Discover rules and register one instance of each.

    Args:
        registry: Registry to fill.
        settings: Source of ``rules.paths``; the global settings by default.
        external: Also search the system, user and configured directories.
    """
    modules: Iterable[ModuleType] = iter_builtin_modules()
    if external:
        directories = rule_directories(settings or Settings.instance())
        modules = itertools.chain(modules, *(iter_directory_modules(d) for d in directories))

    for module in modules:
        for cls in rule_classes(module):
            try:
                registry.register(cls())
            except Exception:
                log.exception("Failed to instantiate rule %s from %s", cls.__name__, module.__name__)

    log.info("Loaded %d rules", len(registry))
