"""Rules that prune unreferenced definitions and ids."""

from __future__ import annotations

import logging

from lxml import etree

from svgsweep.models.rule import CleanRule, RuleContext
from svgsweep.svg import collect_references, remove_node, svg_name

log = logging.getLogger(__name__)

# defs children that act without being referenced
_ALWAYS_KEEP = frozenset({"style", "script", "font-face"})


class RemoveUnusedDefsRule(CleanRule):
    """Removes ``<defs>`` children that nothing references.

    Runs until no more definitions can be removed, so chains such as a
    gradient that only an unused gradient links to are removed too.
    """

    @property
    def id(self) -> str:
        return "remove_unused_defs"

    @property
    def name(self) -> str:
        return "Remove Unused Definitions"

    @property
    def description(self) -> str:
        return (
            "Removes gradients, patterns, filters and other definitions that are "
            "never referenced, and empty <defs> elements."
        )

    @property
    def risk_level(self) -> str:
        return "moderate"

    @property
    def order(self) -> int:
        return 50

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        while self._prune_once(root):
            pass
        for defs in list(root.iter(tag=etree.Element)):
            if svg_name(defs) == "defs" and len(defs) == 0 and not (defs.text or "").strip():
                remove_node(defs)

    @staticmethod
    def _prune_once(root: etree._Element) -> bool:
        referenced = collect_references(root)
        removed = False
        for defs in list(root.iter(tag=etree.Element)):
            if svg_name(defs) != "defs":
                continue
            for child in list(defs):
                if not isinstance(child.tag, str) or svg_name(child) in _ALWAYS_KEEP:
                    continue
                ids = {e.get("id") for e in child.iter(tag=etree.Element)}
                if ids & referenced:
                    continue
                log.debug("Removing unused definition <%s id=%s>", svg_name(child), child.get("id"))
                remove_node(child)
                removed = True
        return removed


class RemoveUnusedIdsRule(CleanRule):
    """Removes ``id`` attributes that nothing in the document references.

    Not part of the default selection: other documents may still link to
    these ids through fragment URLs.
    """

    @property
    def id(self) -> str:
        return "remove_unused_ids"

    @property
    def name(self) -> str:
        return "Remove Unused IDs"

    @property
    def description(self) -> str:
        return "Removes id attributes that are not referenced inside the document."

    @property
    def risk_level(self) -> str:
        return "moderate"

    @property
    def order(self) -> int:
        return 55

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        referenced = collect_references(root)
        for elem in root.iter(tag=etree.Element):
            value = elem.get("id")
            if value is not None and value not in referenced:
                del elem.attrib["id"]
