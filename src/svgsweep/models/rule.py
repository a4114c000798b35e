"""Base cleaning rule interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from lxml import etree

from svgsweep.models.config import CleanOptions

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RuleContext:
    """Read-only data a rule may consult while rewriting a document."""

    options: CleanOptions


class CleanRule(ABC):
    """Base class for all simplification rules.

    A rule rewrites an lxml tree in place. Rules must be stateless,
    deterministic and idempotent: running a rule on its own output
    must not change the document again.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier, e.g. 'remove_comments'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this rule removes and why rendering is unaffected."""

    @property
    def risk_level(self) -> str:
        """Risk level: 'safe' rules are part of the default selection, 'moderate' ones are opt-in."""
        return "safe"

    @property
    def order(self) -> int:
        """Execution order (lower runs first). Default 50."""
        return 50

    @abstractmethod
    def apply(self, root: etree._Element, context: RuleContext) -> None:
        """Rewrite the document rooted at ``root`` in place."""


class ElementRule(CleanRule, ABC):
    """Base class for rules that look at one element at a time.

    Subclasses implement ``process()``; the tree walk is provided.
    Comments and processing instructions are skipped.
    """

    def apply(self, root: etree._Element, context: RuleContext) -> None:
        for elem in list(root.iter(tag=etree.Element)):
            self.process(elem, context)

    @abstractmethod
    def process(self, elem: etree._Element, context: RuleContext) -> None:
        """Rewrite a single element."""
