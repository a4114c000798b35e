"""Central cleaning rule registry."""

from __future__ import annotations

import logging
from typing import Iterator

from svgsweep.errors import InvalidConfig
from svgsweep.models.rule import CleanRule

log = logging.getLogger(__name__)


class RuleRegistry:
    """Stores and retrieves registered cleaning rules."""

    def __init__(self) -> None:
        self._rules: dict[str, CleanRule] = {}

    def register(self, rule: CleanRule) -> None:
        """Register a rule instance."""
        if rule.id in self._rules:
            log.warning("Rule '%s' already registered, skipping duplicate", rule.id)
            return
        self._rules[rule.id] = rule
        log.debug("Registered rule: %s (%s)", rule.id, rule.name)

    def get(self, rule_id: str) -> CleanRule | None:
        """Get a rule by its ID."""
        return self._rules.get(rule_id)

    def get_all(self) -> list[CleanRule]:
        """Get all registered rules in execution order."""
        return sorted(self._rules.values(), key=lambda r: (r.order, r.id))

    def get_default(self) -> list[CleanRule]:
        """Get the rules applied when no explicit selection is given."""
        return [r for r in self.get_all() if r.risk_level == "safe"]

    def resolve(self, rule_ids: tuple[str, ...] | list[str] | None) -> list[CleanRule]:
        """Turn a rule selection into rule instances in execution order.

        Raises:
            InvalidConfig: if a selected rule ID is not registered.
        """
        if rule_ids is None:
            return self.get_default()
        unknown = sorted(rid for rid in set(rule_ids) if rid not in self._rules)
        if unknown:
            raise InvalidConfig(f"Unknown rule(s): {', '.join(unknown)}")
        selected = {self._rules[rid] for rid in rule_ids}
        return sorted(selected, key=lambda r: (r.order, r.id))

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[CleanRule]:
        return iter(self.get_all())

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules
