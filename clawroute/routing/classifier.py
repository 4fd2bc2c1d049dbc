"""Deterministic tier classifier for auto-routed chat requests."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Mapping

from loguru import logger

from clawroute.config import RouterConfig
from clawroute.routing.messages import content_text, latest_user_index, rewrite_content
from clawroute.routing.override import OverridePosition, extract_override
from clawroute.routing.tables import RouterSnapshot, build_snapshot
from clawroute.routing.tiers import Tier


@dataclass(frozen=True)
class RouteDecision:
    tier: Tier
    model: str
    cleaned_text: str
    category: str | None = None  # None when an override tag pinned the tier

    @property
    def overridden(self) -> bool:
        return self.category is None


class TierClassifier:
    """Routes requests to low/mid/top models using an ordered rule set.

    All tables live in one immutable RouterSnapshot. Each call reads the
    reference once, so a concurrent reload() is never half-observed.
    """

    def __init__(self, config: RouterConfig | None = None) -> None:
        self._snapshot = build_snapshot(config or RouterConfig())

    @property
    def snapshot(self) -> RouterSnapshot:
        return self._snapshot

    @property
    def auto_model_name(self) -> str:
        return self._snapshot.auto_model_name

    def reload(self, config: RouterConfig) -> RouterSnapshot:
        """Validate a new config and swap it in. On error the old tables stay live."""
        snapshot = build_snapshot(config)
        self._snapshot = snapshot
        logger.info(
            f"Auto-router reloaded: {len(snapshot.rules)} rules, "
            f"{len(snapshot.routing)} categories"
        )
        return snapshot

    def is_auto_request(self, request: Mapping[str, Any]) -> bool:
        return request.get("model") == self._snapshot.auto_model_name

    def classify(self, text: str | None) -> str:
        """Return the category for a message. Never raises."""
        return self._snapshot.rules.classify(text)

    def resolve_tier(self, category: str) -> Tier:
        return self._snapshot.resolve_tier(category)

    def model_for_tier(self, tier: Tier) -> str:
        return self._snapshot.model_for_tier(tier)

    def decide(self, text: str | None) -> RouteDecision:
        return self._decide(self._snapshot, text or "")

    def route(self, request: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        """Return (model_id, rewritten_request). The input is not mutated."""
        snapshot = self._snapshot
        rewritten = copy.deepcopy(dict(request))

        idx = latest_user_index(rewritten)
        content = rewritten["messages"][idx].get("content") if idx is not None else None
        decision = self._decide(snapshot, content_text(content))

        if decision.overridden and idx is not None:
            position = snapshot.override_position
            rewritten["messages"][idx]["content"] = _strip_tags(content, position)

        rewritten["model"] = decision.model
        if decision.overridden:
            logger.info(f"Auto-router: override '{decision.tier.value}' -> {decision.model}")
        else:
            logger.info(
                f"Auto-router: '{decision.category}' -> {decision.tier.value} -> {decision.model}"
            )
        return decision.model, rewritten

    @staticmethod
    def _decide(snapshot: RouterSnapshot, text: str) -> RouteDecision:
        if snapshot.override_enabled:
            tier, cleaned = extract_override(text, snapshot.override_position)
            if tier is not None:
                return RouteDecision(
                    tier=tier,
                    model=snapshot.model_for_tier(tier),
                    cleaned_text=cleaned,
                )

        rule = snapshot.rules.match(text)
        if rule is None:
            category = snapshot.fallback_category
            logger.debug(f"Auto-router: no rule matched, falling back to '{category}'")
        else:
            category = rule.category
            logger.debug(f"Auto-router: rule #{rule.index} matched '{category}'")
        tier = snapshot.resolve_tier(category)
        return RouteDecision(
            tier=tier,
            model=snapshot.model_for_tier(tier),
            cleaned_text=text,
            category=category,
        )

    def get_status(self) -> str:
        snapshot = self._snapshot
        fallback_tier = snapshot.resolve_tier(snapshot.fallback_category)
        overrides = snapshot.override_position if snapshot.override_enabled else "disabled"
        lines = [
            "Auto-router:",
            f"  sentinel model : {snapshot.auto_model_name}",
            f"  fallback       : {snapshot.fallback_category} ({fallback_tier.value})",
            f"  overrides      : {overrides}",
            "Tiers:",
        ]
        for tier in sorted(snapshot.models, key=lambda t: t.rank):
            lines.append(f"  {tier.value:<4}: {snapshot.models[tier]}")
        lines.append("Rules (first match wins):")
        for rule in snapshot.rules.rules:
            lines.append(
                f"  {rule.index + 1:>2}. {rule.category} -> {snapshot.resolve_tier(rule.category).value}"
            )
        return "\n".join(lines)


def _strip_tags(content: Any, position: OverridePosition) -> Any:
    # Prefix tags only count in the first non-blank text part
    done = False

    def strip(text: str) -> str:
        nonlocal done
        if done or not text.strip():
            return text
        if position == "prefix":
            done = True
        return extract_override(text, position)[1]

    return rewrite_content(content, strip)
