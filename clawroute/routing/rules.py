"""Ordered rule set: first matching rule decides the category."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from clawroute.config import ConfigError, RuleConfig

Predicate = Callable[[str], bool]


@dataclass(frozen=True)
class CompiledRule:
    """A category bound to OR'd predicates over normalized text."""

    index: int
    category: str
    predicates: tuple[Predicate, ...]
    length_only: bool

    def matches(self, text: str) -> bool:
        return any(predicate(text) for predicate in self.predicates)


def normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def _exact(tokens: list[str]) -> Predicate:
    wanted = frozenset(normalize(t) for t in tokens if normalize(t))
    return lambda text: text in wanted


def _prefix(phrases: list[str]) -> Predicate:
    # Trailing spaces are significant ("define " must not match "defined")
    starts = tuple(p.lstrip().lower() for p in phrases if p.strip())
    return lambda text: text.startswith(starts)


def _contains(phrases: list[str]) -> Predicate:
    needles = tuple(p.lower() for p in phrases if p.strip())
    return lambda text: any(needle in text for needle in needles)


def _words(phrases: list[str]) -> Predicate:
    alternation = "|".join(re.escape(p.strip().lower()) for p in phrases if p.strip())
    pattern = re.compile(rf"(?<!\w)(?:{alternation})(?!\w)")
    return lambda text: pattern.search(text) is not None


def _regex(patterns: list[str], index: int, category: str) -> Predicate:
    compiled = []
    for raw in patterns:
        try:
            compiled.append(re.compile(raw, re.IGNORECASE))
        except re.error as e:
            raise ConfigError(
                f"Rule #{index} ({category}): invalid regex {raw!r}: {e}"
            ) from e
    return lambda text: any(p.search(text) for p in compiled)


def _shorter_than(max_chars: int) -> Predicate:
    return lambda text: len(text) < max_chars


def compile_rule(index: int, rule: RuleConfig) -> CompiledRule:
    category = rule.category.strip()
    if not category:
        raise ConfigError(f"Rule #{index} has an empty category")

    predicates: list[Predicate] = []
    if any(t.strip() for t in rule.exact):
        predicates.append(_exact(rule.exact))
    if any(p.strip() for p in rule.prefix):
        predicates.append(_prefix(rule.prefix))
    if any(p.strip() for p in rule.contains):
        predicates.append(_contains(rule.contains))
    if any(p.strip() for p in rule.words):
        predicates.append(_words(rule.words))
    if rule.regex:
        predicates.append(_regex(rule.regex, index, category))
    if rule.max_chars is not None:
        predicates.append(_shorter_than(rule.max_chars))

    if not predicates:
        raise ConfigError(f"Rule #{index} ({category}) has no match predicates")

    return CompiledRule(
        index=index,
        category=category,
        predicates=tuple(predicates),
        length_only=not rule.has_text_patterns,
    )


class RuleSet:
    """Priority-ordered dispatch table of (category, predicates) pairs."""

    def __init__(self, rules: tuple[CompiledRule, ...], fallback_category: str) -> None:
        self.rules = rules
        self.fallback_category = fallback_category

    @classmethod
    def compile(cls, rules: list[RuleConfig], fallback_category: str) -> RuleSet:
        compiled = tuple(compile_rule(i, rule) for i, rule in enumerate(rules))

        for rule in compiled:
            if rule.category == fallback_category and not rule.length_only:
                raise ConfigError(
                    f"Rule #{rule.index}: fallback category '{fallback_category}' "
                    "may only use max_chars, not text patterns"
                )

        seen_length_rule: CompiledRule | None = None
        for rule in compiled:
            if rule.length_only:
                seen_length_rule = seen_length_rule or rule
            elif seen_length_rule is not None:
                logger.warning(
                    f"Rule #{seen_length_rule.index} ({seen_length_rule.category}) is a "
                    f"length rule placed before rule #{rule.index} ({rule.category}); "
                    "short messages will never reach the later rule"
                )
                break

        return cls(compiled, fallback_category)

    @property
    def categories(self) -> set[str]:
        return {rule.category for rule in self.rules}

    def match(self, text: str | None) -> CompiledRule | None:
        """Return the first rule matching the text, or None."""
        normalized = normalize(text)
        if not normalized:
            return None
        for rule in self.rules:
            if rule.matches(normalized):
                return rule
        return None

    def classify(self, text: str | None) -> str:
        rule = self.match(text)
        if rule is None:
            return self.fallback_category
        return rule.category

    def __len__(self) -> int:
        return len(self.rules)
