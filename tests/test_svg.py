"""Tests for the shared SVG helpers."""

from __future__ import annotations

import pytest
from lxml import etree

from svgsweep.svg import (
    PathSyntaxError,
    collect_references,
    format_number,
    in_text_content,
    join_numbers,
    parse_path,
    parse_style,
    remove_node,
    round_numbers_in,
    round_path,
    serialize_style,
    stylesheet_links,
)


class TestNumbers:
    @pytest.mark.parametrize(
        "value, precision, expected",
        [
            (1.0, 3, "1"),
            (100.0, 2, "100"),
            (0.5, 3, ".5"),
            (-0.5, 3, "-.5"),
            (-0.0001, 3, "0"),
            (1.23456, 2, "1.23"),
            (1e-7, 8, ".0000001"),
        ],
    )
    def test_format_number(self, value, precision, expected):
        assert format_number(value, precision) == expected

    def test_join_skips_space_before_minus(self):
        assert join_numbers(["1", "-2", "3"]) == "1-2 3"

    def test_round_numbers_keeps_units(self):
        assert round_numbers_in("10.123px", 2) == "10.12px"

    def test_round_numbers_exponent(self):
        assert round_numbers_in("1.5e2", 2) == "150"

    def test_round_numbers_keeps_negative_separation(self):
        assert round_numbers_in("1-2", 2) == "1-2"


class TestPathData:
    def test_implicit_lineto_after_moveto(self):
        assert parse_path("M10 20 30 40") == [("M", [10, 20]), ("L", [30, 40])]

    def test_implicit_relative_lineto(self):
        assert parse_path("m1 2 3 4") == [("m", [1, 2]), ("l", [3, 4])]

    def test_compact_arc_flags(self):
        segments = parse_path("M0 0a1 1 0 00 1 1")
        assert segments[1] == ("a", [1, 1, 0, 0, 0, 1, 1])

    def test_serialize_omits_repeated_command(self):
        assert round_path("H 1 H 2", 3) == "H1 2"

    def test_serialize_keeps_repeated_moveto(self):
        assert round_path("M 10 10 M 20 20", 3) == "M10 10M20 20"

    def test_serialize_closepath_then_moveto(self):
        assert round_path("M0 0 z m 5 5", 3) == "M0 0zm5 5"

    def test_serialize_negative_numbers(self):
        assert round_path("M 0.5 -0.5 L -1.25 2", 8) == "M.5-.5-1.25 2"

    def test_rounding(self):
        assert round_path("M 1.23456 2.98765", 2) == "M1.23 2.99"

    def test_output_reparses_to_same_segments(self):
        data = "M 10 20 L 30 40 C 1 2 3 4 5 6 s 1 1 2 2 A 5 5 0 1 0 10 10 Z"
        once = round_path(data, 4)
        assert round_path(once, 4) == once
        assert parse_path(once) == parse_path(data)

    @pytest.mark.parametrize("data", ["10 20", "M 10", "M0 0Z 5", "M 0 0 A 1 1 0 2 0 3 3"])
    def test_malformed(self, data):
        with pytest.raises(PathSyntaxError):
            parse_path(data)


class TestStyle:
    def test_parse_skips_empty_declarations(self):
        assert parse_style(" fill : red ;; stroke:none;") == {"fill": "red", "stroke": "none"}

    def test_semicolon_inside_quotes(self):
        assert parse_style("font-family:'A;B';fill:red") == {"font-family": "'A;B'", "fill": "red"}

    def test_semicolon_inside_url(self):
        style = "fill:url(data:image/png;base64,AAAA);stroke:none"
        assert parse_style(style) == {"fill": "url(data:image/png;base64,AAAA)", "stroke": "none"}

    def test_escaped_quote(self):
        assert parse_style(r'font-family:"a\";b"') == {"font-family": r'"a\";b"'}

    @pytest.mark.parametrize(
        "style",
        ["fill:red;bogus", "font-family:'open", "fill:url(#a", "fill:red)", "fill:/* c */red", ":red", "fill:"],
    )
    def test_unparseable(self, style):
        assert parse_style(style) is None

    def test_empty(self):
        assert parse_style(" ; ") == {}

    def test_serialize(self):
        assert serialize_style({"fill": "red", "stroke": "none"}) == "fill:red;stroke:none"


class TestTree:
    def test_collect_references(self):
        root = etree.fromstring(
            b'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
            b'<style>#styled { fill: url(#pattern) }</style>'
            b'<rect fill="url(#grad)"/><use href="#shape"/><use xlink:href="#legacy"/>'
            b'<a href="http://example.com/#outside"/>'
            b"</svg>"
        )
        assert collect_references(root) == {"styled", "pattern", "grad", "shape", "legacy"}

    def test_stylesheet_links(self):
        root = etree.fromstring(
            b'<?xml-stylesheet href="a.css"?><?tool x?><?xml-stylesheet href="b.css"?><svg/>'
        )
        assert [pi.get("href") for pi in stylesheet_links(root)] == ["a.css", "b.css"]
        assert stylesheet_links(etree.fromstring(b"<svg/>")) == []

    def test_remove_node_keeps_tail(self):
        root = etree.fromstring(b"<svg><a/>text<b/></svg>")
        remove_node(root[0])
        assert root.text == "text"
        assert etree.tostring(root) == b"<svg>text<b/></svg>"

    def test_in_text_content(self):
        root = etree.fromstring(
            b'<svg xmlns="http://www.w3.org/2000/svg"><text><tspan/></text><g/></svg>'
        )
        assert in_text_content(root[0][0])
        assert not in_text_content(root[1])
