"""Tests for rule discovery and loading."""

from __future__ import annotations

import textwrap

import pytest

from svgsweep.core.registry import RuleRegistry
from svgsweep.core.rule_loader import iter_directory_modules, load_rules, rule_classes
from svgsweep.errors import InvalidConfig
from svgsweep.settings import Settings

BUILTIN_RULES = {
    "remove_comments",
    "remove_metadata",
    "remove_editor_data",
    "round_numbers",
    "remove_default_attributes",
    "remove_unused_defs",
    "remove_unused_ids",
    "trim_whitespace",
}

EXTERNAL_RULE = textwrap.dedent('''
    from svgsweep.models.rule import ElementRule


    class DropTitlesRule(ElementRule):
        @property
        def id(self):
            return "drop_titles"

        @property
        def name(self):
            return "Drop Titles"

        @property
        def description(self):
            return "Removes <title> elements"

        def process(self, elem, context):
            pass
''')


def _class_names(directory):
    return [cls.__name__ for module in iter_directory_modules(directory) for cls in rule_classes(module)]


class TestRuleRegistry:
    def test_register_and_get(self, registry):
        rule = registry.get("remove_comments")
        assert rule is not None
        assert "remove_comments" in registry
        assert len(registry) == len(BUILTIN_RULES)

    def test_duplicate_registration_skipped(self, registry):
        before = len(registry)
        registry.register(type(registry.get("remove_comments"))())
        assert len(registry) == before

    def test_execution_order(self, registry):
        orders = [(r.order, r.id) for r in registry.get_all()]
        assert orders == sorted(orders)
        assert [r.id for r in registry][0] == "remove_comments"
        assert [r.id for r in registry][-1] == "trim_whitespace"

    def test_default_selection_is_safe(self, registry):
        defaults = registry.get_default()
        assert all(r.risk_level == "safe" for r in defaults)
        assert {r.id for r in defaults} == BUILTIN_RULES - {"remove_unused_defs", "remove_unused_ids"}

    def test_resolve_none_is_default(self, registry):
        assert registry.resolve(None) == registry.get_default()

    def test_resolve_sorts_and_dedups(self, registry):
        rules = registry.resolve(["trim_whitespace", "remove_comments", "trim_whitespace"])
        assert [r.id for r in rules] == ["remove_comments", "trim_whitespace"]

    def test_resolve_empty_selection(self, registry):
        assert registry.resolve(()) == []

    def test_resolve_unknown(self, registry):
        with pytest.raises(InvalidConfig, match="bogus"):
            registry.resolve(["remove_comments", "bogus"])


class TestRuleLoader:
    def test_loads_builtin_rules(self, registry):
        assert {r.id for r in registry} == BUILTIN_RULES

    def test_rule_classes_ignore_imported_bases(self):
        import svgsweep.rules.numbers as numbers

        assert [cls.__name__ for cls in rule_classes(numbers)] == ["RoundNumbersRule"]

    def test_load_from_directory(self, tmp_path):
        (tmp_path / "titles.py").write_text(EXTERNAL_RULE)
        assert _class_names(tmp_path) == ["DropTitlesRule"]

    def test_load_from_package_directory(self, tmp_path):
        package = tmp_path / "titles"
        package.mkdir()
        (package / "__init__.py").write_text("")
        (package / "rule.py").write_text(EXTERNAL_RULE)
        assert _class_names(tmp_path) == ["DropTitlesRule"]

    def test_private_modules_are_skipped(self, tmp_path):
        (tmp_path / "_helpers.py").write_text(EXTERNAL_RULE)
        assert _class_names(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        assert list(iter_directory_modules(tmp_path / "nope")) == []

    def test_broken_module_is_skipped(self, tmp_path):
        (tmp_path / "broken.py").write_text("raise ImportError('nope')\n")
        (tmp_path / "titles.py").write_text(EXTERNAL_RULE)
        assert _class_names(tmp_path) == ["DropTitlesRule"]

    def test_settings_paths(self, tmp_path, isolate_config):
        rule_dir = tmp_path / "extra_rules"
        rule_dir.mkdir()
        (rule_dir / "titles.py").write_text(EXTERNAL_RULE)
        settings = Settings(tmp_path / "settings.json")
        settings.set("rules.paths", [str(rule_dir)])

        registry = RuleRegistry()
        load_rules(registry, settings)
        assert "drop_titles" in registry
        assert registry.get("drop_titles").risk_level == "safe"

    def test_malformed_settings_paths(self, tmp_path, isolate_config):
        settings = Settings(tmp_path / "settings.json")
        settings.set("rules.paths", "not-a-list")
        registry = RuleRegistry()
        load_rules(registry, settings)
        assert {r.id for r in registry} >= BUILTIN_RULES
