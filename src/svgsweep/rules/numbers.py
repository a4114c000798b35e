"""Numeric precision reduction."""

from __future__ import annotations

import logging
import re

from lxml import etree

from svgsweep.models.rule import ElementRule, RuleContext
from svgsweep.svg import (
    NUMBER_RE,
    PathSyntaxError,
    format_number,
    is_svg_element,
    join_numbers,
    namespace,
    parse_style,
    round_numbers_in,
    round_path,
    serialize_style,
)

log = logging.getLogger(__name__)

COORDINATE_ATTRS = frozenset({
    "x", "y", "dx", "dy", "x1", "y1", "x2", "y2",
    "r", "rx", "ry", "cx", "cy", "fx", "fy",
    "width", "height", "stroke-dasharray",
})

PROPERTY_ATTRS = frozenset({
    "stroke-dashoffset", "stroke-miterlimit", "stroke-width",
    "opacity", "fill-opacity", "flood-opacity", "stroke-opacity", "stop-opacity",
    "font-size",
})

TRANSFORM_ATTRS = frozenset({"transform", "gradientTransform", "patternTransform"})

LIST_ATTRS = frozenset({"viewBox", "points"})

_TRANSFORM_RE = re.compile(r"\s*([A-Za-z]+)\s*\(([^)]*)\)\s*,?")


class RoundNumbersRule(ElementRule):
    """Rounds coordinates, properties, transforms and path data.

    Each attribute class has its own precision; translation parts of a
    transform use the coordinate precision.
    """

    @property
    def id(self) -> str:
        return "round_numbers"

    @property
    def name(self) -> str:
        return "Round Numbers"

    @property
    def description(self) -> str:
        return (
            "Reduces numeric precision of coordinates, paths, transforms and "
            "properties, and writes numbers in their shortest form."
        )

    @property
    def order(self) -> int:
        return 30

    def process(self, elem: etree._Element, context: RuleContext) -> None:
        if not is_svg_element(elem):
            return
        options = context.options

        for attr, value in list(elem.attrib.items()):
            if namespace(attr) is not None:
                continue
            if attr in COORDINATE_ATTRS:
                new = round_numbers_in(value, options.coordinates_precision)
            elif attr in PROPERTY_ATTRS:
                new = round_numbers_in(value, options.properties_precision)
            elif attr in TRANSFORM_ATTRS:
                new = round_transform(
                    value, options.transforms_precision, options.coordinates_precision
                )
            elif attr == "d":
                try:
                    new = round_path(value, options.paths_precision)
                except PathSyntaxError as exc:
                    log.debug("Leaving malformed path data untouched: %s", exc)
                    continue
            elif attr in LIST_ATTRS:
                new = round_list(value, options.paths_precision)
            elif attr == "style":
                new = self._round_style(value, options.coordinates_precision,
                                        options.properties_precision)
            else:
                continue
            if new != value:
                elem.set(attr, new)

    @staticmethod
    def _round_style(style: str, coord_precision: int, prop_precision: int) -> str:
        props = parse_style(style)
        if props is None:
            return style
        changed = False
        for key, value in props.items():
            if key in PROPERTY_ATTRS:
                rounded = round_numbers_in(value, prop_precision)
            elif key == "stroke-dasharray":
                rounded = round_numbers_in(value, coord_precision)
            else:
                continue
            if rounded != value:
                props[key] = rounded
                changed = True
        return serialize_style(props) if changed else style


def round_list(value: str, precision: int) -> str:
    """Round a plain number list (``viewBox``, ``points``)."""
    tokens = NUMBER_RE.findall(value)
    if not tokens or NUMBER_RE.sub("", value).strip(" \t\r\n,"):
        return value
    return join_numbers([format_number(float(t), precision) for t in tokens])


def round_transform(value: str, ts_precision: int, coord_precision: int) -> str:
    """Round a transform list; leaves the value unchanged if it cannot be parsed."""
    functions: list[str] = []
    pos = 0
    while pos < len(value):
        match = _TRANSFORM_RE.match(value, pos)
        if not match:
            if value[pos:].strip():
                return value
            break
        name, args = match.group(1), match.group(2)
        numbers = [float(t) for t in NUMBER_RE.findall(args)]
        precisions = _transform_precisions(name, len(numbers), ts_precision, coord_precision)
        if precisions is None:
            return value
        formatted = [format_number(n, p) for n, p in zip(numbers, precisions)]
        functions.append(f"{name}({join_numbers(formatted)})")
        pos = match.end()
    return " ".join(functions) if functions else value


def _transform_precisions(
    name: str, count: int, ts_precision: int, coord_precision: int
) -> list[int] | None:
    match name:
        case "matrix" if count == 6:
            return [ts_precision] * 4 + [coord_precision] * 2
        case "translate" if count in (1, 2):
            return [coord_precision] * count
        case "scale" if count in (1, 2):
            return [ts_precision] * count
        case "rotate" if count in (1, 3):
            return [ts_precision] + [coord_precision] * (count - 1)
        case "skewX" | "skewY" if count == 1:
            return [ts_precision]
    return None
