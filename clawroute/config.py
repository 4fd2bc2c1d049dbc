"""Configuration schema and loader."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from clawroute.routing.tiers import Tier

CONFIG_ENV_VAR = "CLAWROUTE_CONFIG"
DEFAULT_CONFIG_FILE = "routing_rules.yaml"


class ConfigError(ValueError):
    """Raised when the routing configuration is inconsistent or unreadable."""


class TierModelConfig(BaseModel):
    model: str = ""


class TierModelsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    low: TierModelConfig = Field(
        default_factory=lambda: TierModelConfig(model="gemini/gemini-3-flash-preview")
    )
    mid: TierModelConfig = Field(
        default_factory=lambda: TierModelConfig(model="gemini/gemini-3-pro-preview")
    )
    top: TierModelConfig = Field(
        default_factory=lambda: TierModelConfig(model="bedrock/us.anthropic.claude-opus-4-6-v1")
    )

    @field_validator("low", "mid", "top", mode="before")
    @classmethod
    def _accept_bare_model(cls, value: Any) -> Any:
        # "low: gemini/..." is shorthand for "low: {model: gemini/...}"
        if isinstance(value, str):
            return {"model": value}
        return value

    def model_for(self, tier: Tier) -> str:
        return (getattr(self, tier.value).model or "").strip()


class RuleConfig(BaseModel):
    """One classification rule. All predicate lists are OR'd together."""

    model_config = ConfigDict(extra="forbid")

    category: str
    exact: list[str] = Field(default_factory=list)
    prefix: list[str] = Field(default_factory=list)
    contains: list[str] = Field(default_factory=list)
    words: list[str] = Field(default_factory=list)
    regex: list[str] = Field(default_factory=list)
    max_chars: int | None = Field(default=None, ge=1, le=10000)

    @property
    def has_text_patterns(self) -> bool:
        return bool(self.exact or self.prefix or self.contains or self.words or self.regex)


class OverrideConfig(BaseModel):
    enabled: bool = True
    position: Literal["anywhere", "prefix"] = "anywhere"


_DEFAULT_ROUTING: dict[str, Tier] = {
    "heartbeat": Tier.LOW,
    "simple-chat": Tier.LOW,
    "lookup": Tier.LOW,
    "translation": Tier.MID,
    "summarization": Tier.MID,
    "coding": Tier.MID,
    "creative": Tier.MID,
    "reasoning": Tier.TOP,
    "analysis": Tier.TOP,
}

# Evaluation order is priority order: the first matching rule wins.
_DEFAULT_RULES: list[dict[str, Any]] = [
    {
        "category": "heartbeat",
        "exact": [
            "hi", "hello", "hey", "yo", "sup", "ping", "test",
            "ok", "okay", "thanks", "thank you", "thx",
        ],
        "regex": [
            r"^(hi|hey|hello|ping)[!.]+$",
            r"^(are )?(you|u) (there|alive|up|awake)\??$",
            r"^(is )?any(one|body) (there|home)\??$",
        ],
    },
    {
        "category": "lookup",
        "prefix": [
            "what is", "what's", "what are", "who is", "who was", "who are",
            "when is", "when was", "when did", "where is", "where was",
            "how many", "how much", "how old", "how far", "define ",
            "what year", "which country",
        ],
    },
    {
        "category": "translation",
        "prefix": ["translate"],
        "contains": ["translation of"],
        "regex": [
            r"\b(in|into|to) (english|french|spanish|german|italian|portuguese"
            r"|dutch|russian|chinese|mandarin|japanese|korean|arabic|hebrew"
            r"|hindi|turkish|polish|swedish)\b",
        ],
    },
    {
        "category": "summarization",
        "prefix": [
            "summarize", "summarise", "tl;dr", "tldr", "sum up",
            "give me a summary", "give me the gist", "condense",
        ],
        "contains": ["summary of", "key points of", "bullet points from"],
    },
    {
        "category": "coding",
        "contains": ["```", "stack trace", "traceback", "def ", "function(", "=>"],
        "words": [
            "code", "function", "script", "python", "javascript", "typescript",
            "java", "golang", "rust", "c++", "sql", "regex", "bash", "api",
            "debug", "bug", "refactor", "compile", "compiler", "unit test",
            "linked list", "algorithm", "class", "method", "dockerfile",
        ],
    },
    {
        "category": "creative",
        "words": [
            "poem", "poetry", "story", "short story", "haiku", "limerick",
            "lyrics", "song", "novel", "screenplay", "fiction", "fairy tale",
            "sonnet", "slogan",
        ],
    },
    {
        "category": "reasoning",
        "words": [
            "prove", "proof", "derive", "theorem", "lemma", "step by step",
            "logic puzzle", "riddle", "paradox", "deduce", "induction",
        ],
        "regex": [r"\bwhy (does|do|is|are|would)\b.*\?"],
    },
    {
        "category": "analysis",
        "words": [
            "analyze", "analyse", "analysis", "compare", "comparison",
            "evaluate", "assess", "trade-offs", "tradeoffs", "pros and cons",
            "critique", "review", "investigate", "strategy",
        ],
    },
    {
        "category": "simple-chat",
        "max_chars": 40,
    },
]


class RouterConfig(BaseModel):
    """Rule set, routing table and tier table for auto-routing."""

    auto_model_name: str = "auto"
    fallback_category: str = "simple-chat"
    override: OverrideConfig = Field(default_factory=OverrideConfig)
    tiers: TierModelsConfig = Field(default_factory=TierModelsConfig)
    routing: dict[str, Tier] = Field(default_factory=lambda: dict(_DEFAULT_ROUTING))
    rules: list[RuleConfig] = Field(
        default_factory=lambda: [RuleConfig(**rule) for rule in _DEFAULT_RULES]
    )


class ReloadConfig(BaseModel):
    enabled: bool = False
    interval_seconds: float = Field(default=5.0, ge=0.1, le=3600)


class Config(BaseModel):
    """Root configuration."""

    log_level: str = "INFO"
    reload: ReloadConfig = Field(default_factory=ReloadConfig)
    router: RouterConfig = Field(default_factory=RouterConfig)


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Explicit path, then $CLAWROUTE_CONFIG, then ./routing_rules.yaml."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return Path(DEFAULT_CONFIG_FILE)


def load_config(path: str | Path | None = None) -> Config:
    """Load config from YAML file. A missing file yields the defaults."""
    p = resolve_config_path(path)
    if not p.exists():
        logger.info(f"Config {p} not found, using built-in routing rules")
        return Config()

    resolved_path = p.resolve()
    try:
        with open(resolved_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {resolved_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{resolved_path}: top level must be a mapping, got {type(data).__name__}")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {resolved_path}:\n{e}") from e
