"""Document transformation: decompress, parse, apply rules, serialize."""

from __future__ import annotations

import gzip
import logging
import zlib
from dataclasses import dataclass

from lxml import etree

from svgsweep.errors import TransformError
from svgsweep.models.config import CleanOptions
from svgsweep.models.rule import CleanRule, RuleContext
from svgsweep.svg import stylesheet_links, svg_name

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformOutcome:
    """Cleaned bytes, or the reason the document could not be cleaned."""

    data: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContentTransformer:
    """Turns raw SVG/SVGZ bytes into cleaned SVG markup.

    Holds only immutable configuration, so one instance can be shared by
    every worker. A fresh lxml parser is created per document because
    parser objects must not be used from several threads at once.
    """

    def __init__(self, rules: list[CleanRule], options: CleanOptions | None = None) -> None:
        self._rules = tuple(sorted(rules, key=lambda r: (r.order, r.id)))
        self._context = RuleContext(options=options or CleanOptions())

    @property
    def rules(self) -> tuple[CleanRule, ...]:
        return self._rules

    def transform(self, data: bytes, is_compressed: bool = False) -> TransformOutcome:
        """Clean ``data``. Never raises for malformed input."""
        try:
            return TransformOutcome(data=self.clean(data, is_compressed))
        except TransformError as exc:
            return TransformOutcome(error=str(exc))

    def clean(self, data: bytes, is_compressed: bool = False) -> bytes:
        """Clean ``data`` and return the serialized document.

        Raises:
            TransformError: if the input cannot be decompressed or parsed,
                or a rule fails on it.
        """
        if is_compressed:
            data = decompress(data)

        root = parse_document(data)
        for rule in self._rules:
            try:
                rule.apply(root, self._context)
            except Exception as exc:
                raise TransformError(f"Rule '{rule.id}' failed: {exc}") from exc

        etree.cleanup_namespaces(root)
        # Only external stylesheet links survive outside the root element
        head = b"".join(
            etree.tostring(pi, encoding="UTF-8", with_tail=False) for pi in stylesheet_links(root)
        )
        return head + etree.tostring(root, encoding="UTF-8", xml_declaration=False)


def decompress(data: bytes) -> bytes:
    """Unwrap a gzip container."""
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise TransformError(f"Cannot decompress svgz data: {exc}") from exc


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(
        recover=False,
        no_network=True,
        resolve_entities="internal",
        remove_comments=False,
        remove_pis=False,
        strip_cdata=False,
        huge_tree=False,
    )


def parse_document(data: bytes) -> etree._Element:
    """Parse SVG markup and return its root element."""
    if not data.strip():
        raise TransformError("Document is empty")
    try:
        root = etree.fromstring(data, _make_parser())
    except etree.XMLSyntaxError as exc:
        raise TransformError(f"Cannot parse document: {exc}") from exc
    if svg_name(root) != "svg":
        raise TransformError(f"Root element is <{etree.QName(root).localname}>, not <svg>")
    return root
