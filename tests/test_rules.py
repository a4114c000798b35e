"""Tests for the built-in cleaning rules."""

from __future__ import annotations

import pytest

from svgsweep.core.transformer import ContentTransformer
from svgsweep.models.config import CleanOptions

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg">'
XLINK_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
)


@pytest.fixture
def clean(registry):
    """Clean ``markup`` with only the given rules and return the result as text."""

    def _clean(markup: str, *rule_ids: str, **options) -> str:
        rules = registry.resolve(rule_ids)
        transformer = ContentTransformer(rules, CleanOptions(**options))
        return transformer.clean(markup.encode()).decode()

    return _clean


class TestRemoveComments:
    def test_removes_comments(self, clean):
        result = clean(f"{SVG_OPEN}<!-- note --><g/></svg>", "remove_comments")
        assert result == f"{SVG_OPEN}<g/></svg>"


class TestRemoveMetadata:
    def test_removes_metadata(self, clean):
        result = clean(f"{SVG_OPEN}<metadata><rdf/></metadata><g/></svg>", "remove_metadata")
        assert result == f"{SVG_OPEN}<g/></svg>"


class TestRemoveEditorData:
    def test_removes_editor_elements_and_attributes(self, clean):
        markup = (
            '<svg xmlns="http://www.w3.org/2000/svg"'
            ' xmlns:sodipodi="http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd"'
            ' xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape">'
            '<sodipodi:namedview/><g inkscape:label="Layer 1"/></svg>'
        )
        assert clean(markup, "remove_editor_data") == f"{SVG_OPEN}<g/></svg>"

    def test_keeps_xlink(self, clean):
        markup = f'{XLINK_OPEN}<use xlink:href="#a"/></svg>'
        assert clean(markup, "remove_editor_data") == markup


class TestRoundNumbers:
    def test_coordinates(self, clean):
        result = clean(
            f'{SVG_OPEN}<circle cx="1.23456789" cy="2" r="3.0000001"/></svg>',
            "round_numbers",
            coordinates_precision=3,
        )
        assert result == f'{SVG_OPEN}<circle cx="1.235" cy="2" r="3"/></svg>'

    def test_keeps_units(self, clean):
        result = clean(f'{SVG_OPEN}<rect width="10.123px"/></svg>', "round_numbers",
                       coordinates_precision=2)
        assert result == f'{SVG_OPEN}<rect width="10.12px"/></svg>'

    def test_transform_precisions(self, clean):
        result = clean(
            f'{SVG_OPEN}<g transform="matrix(1.000000001 0 0 1 10.123456 20)"/></svg>',
            "round_numbers",
            transforms_precision=3,
            coordinates_precision=2,
        )
        assert result == f'{SVG_OPEN}<g transform="matrix(1 0 0 1 10.12 20)"/></svg>'

    def test_translate_short_form(self, clean):
        result = clean(f'{SVG_OPEN}<g transform="translate(-0.5, 0.25)"/></svg>',
                       "round_numbers")
        assert result == f'{SVG_OPEN}<g transform="translate(-.5 .25)"/></svg>'

    def test_unknown_transform_left_alone(self, clean):
        markup = f'{SVG_OPEN}<g transform="perspective(1.123456789)"/></svg>'
        assert clean(markup, "round_numbers") == markup

    def test_path_data(self, clean):
        result = clean(f'{SVG_OPEN}<path d="M 0.5 -0.5 L -1.25 2"/></svg>', "round_numbers")
        assert result == f'{SVG_OPEN}<path d="M.5-.5-1.25 2"/></svg>'

    def test_malformed_path_left_alone(self, clean):
        markup = f'{SVG_OPEN}<path d="M 10 abc"/></svg>'
        assert clean(markup, "round_numbers") == markup

    def test_style_properties(self, clean):
        result = clean(f'{SVG_OPEN}<rect style="stroke-width:1.23456789;fill:red"/></svg>',
                       "round_numbers", properties_precision=2)
        assert result == f'{SVG_OPEN}<rect style="stroke-width:1.23;fill:red"/></svg>'

    def test_style_with_data_url(self, clean):
        result = clean(
            f'{SVG_OPEN}<rect style="stroke-width:1.23456789;fill:url(data:image/png;base64,AAAA)"/></svg>',
            "round_numbers", properties_precision=2,
        )
        assert result == (
            f'{SVG_OPEN}<rect style="stroke-width:1.23;fill:url(data:image/png;base64,AAAA)"/></svg>'
        )

    def test_view_box(self, clean):
        result = clean('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0,0,24.0000,24.5"/>',
                       "round_numbers")
        assert result == '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24.5"/>'


class TestRemoveDefaultAttributes:
    def test_plain_and_geometry_defaults(self, clean):
        result = clean(f'{SVG_OPEN}<rect x="0" y="0.0" width="5" opacity="1" fill="red"/></svg>',
                       "remove_default_attributes")
        assert result == f'{SVG_OPEN}<rect width="5" fill="red"/></svg>'

    def test_inherited_equal_to_parent(self, clean):
        result = clean(f'{SVG_OPEN}<g stroke-width="2"><rect stroke-width="2"/></g></svg>',
                       "remove_default_attributes")
        assert result == f'{SVG_OPEN}<g stroke-width="2"><rect/></g></svg>'

    def test_inherited_override_kept(self, clean):
        markup = f'{SVG_OPEN}<g stroke-width="2"><rect stroke-width="1"/></g></svg>'
        assert clean(markup, "remove_default_attributes") == markup

    def test_reusable_content_keeps_inherited(self, clean):
        markup = f'{SVG_OPEN}<defs><g id="shape" stroke-width="1"/></defs></svg>'
        assert clean(markup, "remove_default_attributes") == markup

    def test_referenced_element_keeps_inherited(self, clean):
        markup = f'{SVG_OPEN}<g id="shape" stroke="none"/><use href="#shape"/></svg>'
        assert clean(markup, "remove_default_attributes") == markup

    def test_stylesheet_keeps_inherited_and_style(self, clean):
        markup = (
            f'{SVG_OPEN}<style>rect{{fill:blue}}</style>'
            '<rect stroke="none" style="stroke:none"/></svg>'
        )
        assert clean(markup, "remove_default_attributes") == markup

    def test_external_stylesheet_keeps_inherited(self, clean):
        markup = (
            '<?xml-stylesheet href="theme.css"?>'
            f'{SVG_OPEN}<g stroke="none"><rect stroke="none" class="a"/></g></svg>'
        )
        assert clean(markup, "remove_default_attributes") == markup

    def test_style_with_quoted_semicolon(self, clean):
        result = clean(f"{SVG_OPEN}<text style=\"font-family:'A;B';opacity:1\">x</text></svg>",
                       "remove_default_attributes")
        assert result == f"{SVG_OPEN}<text style=\"font-family:'A;B'\">x</text></svg>"

    def test_style_declarations(self, clean):
        result = clean(f'{SVG_OPEN}<rect style="opacity:1;fill:red"/></svg>',
                       "remove_default_attributes")
        assert result == f'{SVG_OPEN}<rect style="fill:red"/></svg>'

    def test_empty_style_removed(self, clean):
        result = clean(f'{SVG_OPEN}<rect style="opacity:1"/></svg>', "remove_default_attributes")
        assert result == f"{SVG_OPEN}<rect/></svg>"


class TestRemoveUnusedDefs:
    def test_removes_unreferenced_chain(self, clean):
        markup = (
            f"{XLINK_OPEN}<defs>"
            '<linearGradient id="used"/>'
            '<linearGradient id="unused" xlink:href="#chain"/>'
            '<linearGradient id="chain"/>'
            '</defs><rect fill="url(#used)"/></svg>'
        )
        assert clean(markup, "remove_unused_defs") == (
            f'{SVG_OPEN}<defs><linearGradient id="used"/></defs><rect fill="url(#used)"/></svg>'
        )

    def test_removes_empty_defs(self, clean):
        result = clean(f'{SVG_OPEN}<defs><linearGradient id="x"/></defs><rect/></svg>',
                       "remove_unused_defs")
        assert result == f"{SVG_OPEN}<rect/></svg>"

    def test_keeps_style(self, clean):
        markup = f"{SVG_OPEN}<defs><style>rect{{fill:red}}</style></defs><rect/></svg>"
        assert clean(markup, "remove_unused_defs") == markup

    def test_not_in_default_selection(self, registry):
        assert "remove_unused_defs" not in {r.id for r in registry.get_default()}


class TestRemoveUnusedIds:
    def test_removes_unreferenced_ids(self, clean):
        result = clean(f'{SVG_OPEN}<g id="a"><rect id="b"/></g><use href="#b"/></svg>',
                       "remove_unused_ids")
        assert result == f'{SVG_OPEN}<g><rect id="b"/></g><use href="#b"/></svg>'


class TestTrimWhitespace:
    def test_removes_indentation(self, clean):
        result = clean(f"{SVG_OPEN}\n  <g>\n    <rect/>\n  </g>\n</svg>", "trim_whitespace")
        assert result == f"{SVG_OPEN}<g><rect/></g></svg>"

    def test_preserves_text_content(self, clean):
        result = clean(
            f"{SVG_OPEN}\n  <text> Hello <tspan> world </tspan> </text>\n</svg>",
            "trim_whitespace",
        )
        assert result == f"{SVG_OPEN}<text> Hello <tspan> world </tspan> </text></svg>"

    def test_normalizes_style(self, clean):
        result = clean(f'{SVG_OPEN}<rect style=" fill : red ; ; "/></svg>', "trim_whitespace")
        assert result == f'{SVG_OPEN}<rect style="fill:red"/></svg>'

    def test_style_with_quoted_semicolon(self, clean):
        result = clean(f"""{SVG_OPEN}<text style="font-family:'A;B'; fill:red">x</text></svg>""",
                       "trim_whitespace")
        assert result == f"""{SVG_OPEN}<text style="font-family:'A;B';fill:red">x</text></svg>"""

    def test_style_with_data_url(self, clean):
        markup = f'{SVG_OPEN}<rect style="fill:url(data:image/png;base64,AAAA)"/></svg>'
        assert clean(markup, "trim_whitespace") == markup

    def test_unparseable_style_untouched(self, clean):
        markup = f'{SVG_OPEN}<rect style="fill: red; oops"/></svg>'
        assert clean(markup, "trim_whitespace") == markup
