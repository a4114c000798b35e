"""Removal of attributes that repeat their default or inherited value."""

from __future__ import annotations

from lxml import etree

from svgsweep.models.rule import CleanRule, RuleContext
from svgsweep.svg import (
    collect_references,
    parse_style,
    property_value,
    serialize_style,
    stylesheet_links,
    svg_name,
)

# Inherited presentation properties and their initial values
INHERITED_DEFAULTS = {
    "fill-opacity": "1",
    "fill-rule": "nonzero",
    "clip-rule": "nonzero",
    "stroke": "none",
    "stroke-opacity": "1",
    "stroke-width": "1",
    "stroke-linecap": "butt",
    "stroke-linejoin": "miter",
    "stroke-miterlimit": "4",
    "stroke-dasharray": "none",
    "stroke-dashoffset": "0",
    "visibility": "visible",
}

# Non-inherited presentation properties and their initial values
PLAIN_DEFAULTS = {
    "opacity": "1",
    "stop-opacity": "1",
    "flood-opacity": "1",
    "display": "inline",
    "clip-path": "none",
    "mask": "none",
    "filter": "none",
}

# Geometry attributes that default to zero on specific elements
GEOMETRY_DEFAULTS = {
    "rect": ("x", "y"),
    "use": ("x", "y"),
    "image": ("x", "y"),
    "circle": ("cx", "cy"),
    "ellipse": ("cx", "cy"),
    "line": ("x1", "y1", "x2", "y2"),
}

# Containers whose content may be rendered in another inheritance context
_REUSABLE = frozenset({"defs", "symbol", "pattern", "marker", "clipPath", "mask"})


def _same_value(value: str, other: str) -> bool:
    value = value.strip()
    other = other.strip()
    if value.lower() == other.lower():
        return True
    try:
        return float(value) == float(other)
    except ValueError:
        return False


class RemoveDefaultAttributesRule(CleanRule):
    """Removes presentation attributes equal to their default value.

    Inherited properties are only dropped when they repeat the value the
    element would inherit anyway, and never inside reusable content.
    Documents with a stylesheet keep every inherited property and every
    ``style`` declaration because selectors may depend on them.
    """

    @property
    def id(self) -> str:
        return "remove_default_attributes"

    @property
    def name(self) -> str:
        return "Remove Default Attributes"

    @property
    def description(self) -> str:
        return (
            "Removes presentation attributes and style properties that equal "
            "their SVG default or the value inherited from the parent."
        )

    @property
    def order(self) -> int:
        return 40

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        elements = [e for e in root.iter(tag=etree.Element) if svg_name(e) is not None]
        has_stylesheet = bool(stylesheet_links(root)) or any(svg_name(e) == "style" for e in elements)
        referenced = collect_references(root)

        for elem in elements:
            reusable = self._in_reusable_content(elem, referenced)
            self._strip_attributes(elem, has_stylesheet, reusable)
            if not has_stylesheet:
                self._strip_style(elem, reusable)

    def _strip_attributes(self, elem: etree._Element, has_stylesheet: bool, reusable: bool) -> None:
        for prop, default in PLAIN_DEFAULTS.items():
            value = elem.get(prop)
            if value is not None and _same_value(value, default):
                del elem.attrib[prop]

        for attr in GEOMETRY_DEFAULTS.get(svg_name(elem), ()):
            value = elem.get(attr)
            if value is not None and _same_value(value, "0"):
                del elem.attrib[attr]

        if has_stylesheet or reusable:
            return
        for prop in INHERITED_DEFAULTS:
            value = elem.get(prop)
            if value is not None and _same_value(value, self._inherited_value(elem, prop)):
                del elem.attrib[prop]

    def _strip_style(self, elem: etree._Element, reusable: bool) -> None:
        style = elem.get("style")
        if style is None:
            return
        props = parse_style(style)
        if props is None:
            return
        for prop in list(props):
            attr_value = elem.get(prop)
            # The presentation attribute would take over once the declaration is gone
            if attr_value is not None and not _same_value(attr_value, props[prop]):
                continue
            if prop in PLAIN_DEFAULTS:
                target = PLAIN_DEFAULTS[prop]
            elif prop in INHERITED_DEFAULTS and not reusable:
                target = self._inherited_value(elem, prop)
            else:
                continue
            if _same_value(props[prop], target):
                del props[prop]
        if props:
            new = serialize_style(props)
            if new != style:
                elem.set("style", new)
        else:
            del elem.attrib["style"]

    @staticmethod
    def _inherited_value(elem: etree._Element, prop: str) -> str:
        parent = elem.getparent()
        while parent is not None:
            value = property_value(parent, prop)
            if value is not None:
                return value
            parent = parent.getparent()
        return INHERITED_DEFAULTS[prop]

    @staticmethod
    def _in_reusable_content(elem: etree._Element, referenced: set[str]) -> bool:
        node: etree._Element | None = elem
        while node is not None:
            if svg_name(node) in _REUSABLE or node.get("id") in referenced:
                return True
            node = node.getparent()
        return False
