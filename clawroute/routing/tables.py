"""Routing table (category -> tier) and tier table (tier -> model)."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from clawroute.config import ConfigError, RouterConfig
from clawroute.routing.override import OverridePosition
from clawroute.routing.rules import RuleSet
from clawroute.routing.tiers import Tier


@dataclass(frozen=True)
class RouterSnapshot:
    """Immutable, fully validated routing state. Swapped as a whole on reload."""

    rules: RuleSet
    routing: Mapping[str, Tier]
    models: Mapping[Tier, str]
    fallback_category: str
    auto_model_name: str
    override_enabled: bool
    override_position: OverridePosition

    def resolve_tier(self, category: str) -> Tier:
        return self.routing[category]

    def model_for_tier(self, tier: Tier) -> str:
        return self.models[tier]


def build_snapshot(config: RouterConfig) -> RouterSnapshot:
    """Compile and cross-check the three tables. Raises ConfigError."""
    models: dict[Tier, str] = {}
    for tier in Tier:
        model = config.tiers.model_for(tier)
        if not model:
            raise ConfigError(f"Tier '{tier.value}' has no model configured")
        models[tier] = model

    fallback = config.fallback_category.strip()
    if not fallback:
        raise ConfigError("fallback_category must not be empty")

    routing = {name.strip(): tier for name, tier in config.routing.items()}
    if fallback not in routing:
        raise ConfigError(f"Fallback category '{fallback}' is missing from routing")

    rule_set = RuleSet.compile(config.rules, fallback)
    for rule in rule_set.rules:
        if rule.category not in routing:
            raise ConfigError(
                f"Rule #{rule.index} uses category '{rule.category}' which has no routing entry"
            )

    auto_model_name = config.auto_model_name.strip()
    if not auto_model_name:
        raise ConfigError("auto_model_name must not be empty")

    return RouterSnapshot(
        rules=rule_set,
        routing=MappingProxyType(routing),
        models=MappingProxyType(models),
        fallback_category=fallback,
        auto_model_name=auto_model_name,
        override_enabled=config.override.enabled,
        override_position=config.override.position,
    )
