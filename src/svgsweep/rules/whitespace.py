"""Whitespace normalization."""

from __future__ import annotations

from lxml import etree

from svgsweep.models.rule import ElementRule, RuleContext
from svgsweep.svg import in_text_content, parse_style, serialize_style


class TrimWhitespaceRule(ElementRule):
    """Drops indentation between elements and normalizes ``style`` attributes."""

    @property
    def id(self) -> str:
        return "trim_whitespace"

    @property
    def name(self) -> str:
        return "Trim Whitespace"

    @property
    def description(self) -> str:
        return (
            "Removes whitespace-only text between elements outside of text content, "
            "and redundant spaces and empty declarations in style attributes."
        )

    @property
    def order(self) -> int:
        return 90

    def process(self, elem: etree._Element, context: RuleContext) -> None:
        if elem.text is not None and not elem.text.strip() and not in_text_content(elem):
            elem.text = None

        # The tail belongs to the parent's content
        parent = elem.getparent()
        if elem.tail is not None and not elem.tail.strip() \
                and (parent is None or not in_text_content(parent)):
            elem.tail = None

        style = elem.get("style")
        props = parse_style(style) if style is not None else None
        if props == {}:
            del elem.attrib["style"]
        elif props:
            new = serialize_style(props)
            if new != style:
                elem.set("style", new)
