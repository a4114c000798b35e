"""Rules for metadata and editor-private data."""

from __future__ import annotations

import logging

from lxml import etree

from svgsweep.models.rule import CleanRule, RuleContext
from svgsweep.svg import namespace, remove_node, svg_name

log = logging.getLogger(__name__)

EDITOR_NAMESPACES = frozenset({
    "http://www.inkscape.org/namespaces/inkscape",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "http://ns.adobe.com/AdobeIllustrator/10.0/",
    "http://ns.adobe.com/AdobeSVGViewerExtensions/3.0/",
    "http://ns.adobe.com/Extensibility/1.0/",
    "http://ns.adobe.com/Flows/1.0/",
    "http://ns.adobe.com/Graphs/1.0/",
    "http://ns.adobe.com/ImageReplacement/1.0/",
    "http://ns.adobe.com/SaveForWeb/1.0/",
    "http://ns.adobe.com/Variables/1.0/",
    "http://ns.adobe.com/XPath/1.0/",
    "http://www.bohemiancoding.com/sketch/ns",
    "http://www.serif.com/",
    "http://www.vectornator.io",
})


class RemoveMetadataRule(CleanRule):
    """Removes ``<metadata>`` blocks (RDF, Dublin Core and similar)."""

    @property
    def id(self) -> str:
        return "remove_metadata"

    @property
    def name(self) -> str:
        return "Remove Metadata"

    @property
    def description(self) -> str:
        return "Removes <metadata> elements. Authoring information is not rendered."

    @property
    def order(self) -> int:
        return 20

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        for elem in list(root.iter(tag=etree.Element)):
            if elem is not root and svg_name(elem) == "metadata":
                remove_node(elem)


class RemoveEditorDataRule(CleanRule):
    """Removes elements and attributes owned by drawing applications."""

    @property
    def id(self) -> str:
        return "remove_editor_data"

    @property
    def name(self) -> str:
        return "Remove Editor Data"

    @property
    def description(self) -> str:
        return (
            "Removes Inkscape, Sodipodi, Illustrator and Sketch private elements "
            "and attributes. Renderers ignore these namespaces."
        )

    @property
    def order(self) -> int:
        return 25

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        removed = 0
        for elem in list(root.iter(tag=etree.Element)):
            if elem is not root and namespace(elem.tag) in EDITOR_NAMESPACES:
                if elem.getparent() is not None:
                    remove_node(elem)
                    removed += 1
                continue
            for attr in list(elem.attrib):
                if namespace(attr) in EDITOR_NAMESPACES:
                    del elem.attrib[attr]
                    removed += 1
        if removed:
            log.debug("Removed %d editor elements/attributes", removed)
