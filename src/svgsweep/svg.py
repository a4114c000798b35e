"""SVG document helpers shared by the cleaning rules."""

from __future__ import annotations

import re

from lxml import etree

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Elements whose whitespace is significant
TEXT_CONTENT_ELEMENTS = frozenset({
    "text", "tspan", "textPath", "tref", "altGlyph",
    "title", "desc", "style", "script", "foreignObject",
})

NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
URL_REF_RE = re.compile(r"url\(\s*['\"]?#([^)'\"\s]+)['\"]?\s*\)")
HASH_REF_RE = re.compile(r"#([A-Za-z_][\w.:-]*)")

# Number of parameters per path command
_PATH_ARITY = {
    "M": 2, "L": 2, "T": 2,
    "H": 1, "V": 1,
    "C": 6, "S": 4, "Q": 4,
    "A": 7,
    "Z": 0,
}
_PATH_CMD_RE = re.compile(r"[MmLlTtHhVvCcSsQqAaZz]")
_SEPARATOR_RE = re.compile(r"[\s,]*")
_FLAG_RE = re.compile(r"[01]")


def localname(name: str) -> str:
    """Strip the ``{namespace}`` part of an lxml tag or attribute name."""
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name


def namespace(name: str) -> str | None:
    if name.startswith("{"):
        return name[1:].split("}", 1)[0]
    return None


def is_svg_element(elem: etree._Element) -> bool:
    """True for elements in the SVG namespace (or without a namespace)."""
    if not isinstance(elem.tag, str):
        return False
    return namespace(elem.tag) in (SVG_NS, None)


def svg_name(elem: etree._Element) -> str | None:
    """Return the local SVG tag name, or None for foreign elements."""
    if not is_svg_element(elem):
        return None
    return localname(elem.tag)


def remove_node(node: etree._Element) -> None:
    """Detach ``node`` from its parent while keeping its tail text."""
    parent = node.getparent()
    if parent is None:
        return
    tail = node.tail
    if tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(node)


def in_text_content(elem: etree._Element) -> bool:
    """True if ``elem`` or one of its ancestors keeps whitespace significant."""
    node: etree._Element | None = elem
    while node is not None:
        if isinstance(node.tag, str):
            if not is_svg_element(node) or localname(node.tag) in TEXT_CONTENT_ELEMENTS:
                return True
            if node.get("{http://www.w3.org/XML/1998/namespace}space") == "preserve":
                return True
        node = node.getparent()
    return False


def stylesheet_links(root: etree._Element) -> list[etree._Element]:
    """Return the ``xml-stylesheet`` instructions before ``root``, in document order."""
    links = [
        node for node in root.itersiblings(preceding=True)
        if node.tag is etree.PI and node.target == "xml-stylesheet"
    ]
    links.reverse()
    return links


# -- Style attribute --

def _split_declarations(style: str) -> list[str] | None:
    """Split on ``;`` outside quotes and brackets, or None if they are unbalanced."""
    chunks: list[str] = []
    start = 0
    depth = 0
    quote: str | None = None
    i = 0
    while i < len(style):
        ch = style[i]
        if ch == "\\":
            i += 2
            continue
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            if depth == 0:
                return None
            depth -= 1
        elif ch == ";" and depth == 0:
            chunks.append(style[start:i])
            start = i + 1
        i += 1
    if quote is not None or depth:
        return None
    chunks.append(style[start:])
    return chunks


def parse_style(style: str) -> dict[str, str] | None:
    """Split a ``style`` attribute into an ordered property dict.

    Quoted strings and ``url(...)`` values may contain ``;``. Returns None
    when the attribute cannot be split safely (comments, unbalanced quotes
    or brackets, a declaration without a name or value), in which case
    callers leave it untouched.
    """
    if "/*" in style:
        return None
    chunks = _split_declarations(style)
    if chunks is None:
        return None
    props: dict[str, str] = {}
    for chunk in chunks:
        if not chunk.strip():
            continue
        key, sep, value = chunk.partition(":")
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            return None
        props[key] = value
    return props


def serialize_style(props: dict[str, str]) -> str:
    return ";".join(f"{key}:{value}" for key, value in props.items())


def property_value(elem: etree._Element, prop: str) -> str | None:
    """Return the value of a presentation property set directly on ``elem``.

    The ``style`` attribute wins over the presentation attribute.
    """
    style = elem.get("style")
    if style:
        value = (parse_style(style) or {}).get(prop)
        if value is not None:
            return value
    return elem.get(prop)


# -- Numbers --

def format_number(value: float, precision: int) -> str:
    """Format ``value`` rounded to ``precision`` decimals in the shortest form.

    Trailing zeros and the leading zero are dropped and ``-0`` becomes ``0``.
    """
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    text = f"{rounded:.{precision}f}".rstrip("0").rstrip(".")
    if text.startswith("0."):
        text = text[1:]
    elif text.startswith("-0."):
        text = "-" + text[2:]
    return text


def join_numbers(numbers: list[str]) -> str:
    """Join formatted numbers, omitting the separator before a minus sign."""
    parts: list[str] = []
    for number in numbers:
        if parts and not number.startswith("-"):
            parts.append(" ")
        parts.append(number)
    return "".join(parts)


def round_numbers_in(text: str, precision: int) -> str:
    """Round every number inside ``text``, keeping units and separators.

    A space is inserted where two rounded numbers would otherwise merge.
    """
    out: list[str] = []
    last_end = 0
    for match in NUMBER_RE.finditer(text):
        out.append(text[last_end:match.start()])
        number = format_number(float(match.group(0)), precision)
        if match.start() == last_end and out and _ends_with_number(out) and number[0] not in "-+":
            out.append(" ")
        out.append(number)
        last_end = match.end()
    out.append(text[last_end:])
    return "".join(out)


def _ends_with_number(parts: list[str]) -> bool:
    for part in reversed(parts):
        if part:
            return part[-1].isdigit() or part[-1] == "."
    return False


# -- Path data --

class PathSyntaxError(ValueError):
    """Raised when path data cannot be tokenized."""


def parse_path(data: str) -> list[tuple[str, list[float]]]:
    """Tokenize path data into ``(command, params)`` segments.

    Implicit repeated commands are split into separate segments. Arc flags
    are read as single digits so compact forms like ``a1 1 0 00 1 1`` work.
    """
    segments: list[tuple[str, list[float]]] = []
    pos = _skip(data, 0)
    command: str | None = None

    while pos < len(data):
        match = _PATH_CMD_RE.match(data, pos)
        if match:
            command = match.group(0)
            pos = _skip(data, match.end())
        elif command is None:
            raise PathSyntaxError(f"Path data must start with a command: {data[:20]!r}")
        elif command in "Zz":
            raise PathSyntaxError("Unexpected number after closepath")

        arity = _PATH_ARITY[command.upper()]
        params: list[float] = []
        for index in range(arity):
            if command in "Aa" and index in (3, 4):
                flag = _FLAG_RE.match(data, pos)
                if not flag:
                    raise PathSyntaxError(f"Invalid arc flag at offset {pos}")
                params.append(float(flag.group(0)))
                pos = _skip(data, flag.end())
                continue
            number = NUMBER_RE.match(data, pos)
            if not number:
                raise PathSyntaxError(f"Expected number at offset {pos}")
            params.append(float(number.group(0)))
            pos = _skip(data, number.end())
        segments.append((command, params))

        # Implicit lineto after moveto
        if command == "M":
            command = "L"
        elif command == "m":
            command = "l"

        if arity == 0 and pos < len(data) and not _PATH_CMD_RE.match(data, pos):
            raise PathSyntaxError("Unexpected number after closepath")

    return segments


def _skip(data: str, pos: int) -> int:
    return _SEPARATOR_RE.match(data, pos).end()


def serialize_path(segments: list[tuple[str, list[float]]], precision: int) -> str:
    """Write path segments back, repeating no command letter that is implicit."""
    out: list[str] = []
    previous: str | None = None
    for command, params in segments:
        implicit = previous is not None and (
            (command == previous and command not in "MmZz")
            or (previous == "M" and command == "L")
            or (previous == "m" and command == "l")
        )
        numbers = [format_number(value, precision) for value in params]
        if implicit:
            text = join_numbers(numbers)
            if not text.startswith("-"):
                out.append(" ")
            out.append(text)
        else:
            out.append(command)
            out.append(join_numbers(numbers))
        previous = command
    return "".join(out)


def round_path(data: str, precision: int) -> str:
    return serialize_path(parse_path(data), precision)


# -- References --

def collect_references(root: etree._Element) -> set[str]:
    """Collect every id referenced via ``url(#id)``, ``href="#id"`` or CSS text."""
    refs: set[str] = set()
    for elem in root.iter(tag=etree.Element):
        for attr, value in elem.attrib.items():
            if localname(attr) == "href":
                value = value.strip()
                if value.startswith("#"):
                    refs.add(value[1:])
                continue
            if "url(" in value:
                refs.update(URL_REF_RE.findall(value))
        if svg_name(elem) in ("style", "script") and elem.text:
            refs.update(HASH_REF_RE.findall(elem.text))
            refs.update(URL_REF_RE.findall(elem.text))
    return refs
