"""Rule that drops XML comments."""

from __future__ import annotations

from lxml import etree

from svgsweep.models.rule import CleanRule, RuleContext
from svgsweep.svg import remove_node


class RemoveCommentsRule(CleanRule):
    """Removes every comment inside the root element."""

    @property
    def id(self) -> str:
        return "remove_comments"

    @property
    def name(self) -> str:
        return "Remove Comments"

    @property
    def description(self) -> str:
        return "Removes XML comments. Comments are never rendered."

    @property
    def order(self) -> int:
        return 10

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        for comment in list(root.iter(tag=etree.Comment)):
            remove_node(comment)
