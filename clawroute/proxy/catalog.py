"""Advisory checks of tier model ids against LiteLLM's model catalog."""

from __future__ import annotations

from clawroute.routing.tables import RouterSnapshot

# Gateways and self-hosted backends expose catalogs LiteLLM does not track
# (e.g. Bedrock cross-region inference profiles like "us.anthropic...").
_UNCHECKED_PROVIDERS = frozenset(
    {"openrouter", "bedrock", "azure", "ollama", "ollama_chat", "hosted_vllm", "litellm_proxy"}
)


def check_model_id(model: str) -> tuple[bool, str | None]:
    """Validate provider/model against LiteLLM's catalog when available."""
    normalized = model.strip()
    if "/" not in normalized:
        return False, "Expected model format 'provider/model-name'."

    provider, model_id = normalized.split("/", 1)
    provider = provider.lower()
    if provider in _UNCHECKED_PROVIDERS:
        return True, None

    try:
        import litellm
    except Exception:
        return True, None

    models_by_provider = getattr(litellm, "models_by_provider", {}) or {}
    if provider not in models_by_provider:
        return False, f"Unknown provider '{provider}'."

    catalog = models_by_provider.get(provider, [])
    if not catalog:
        return True, None

    catalog_set = {m.lower() for m in catalog}
    candidates = {normalized.lower(), model_id.lower()}
    if catalog_set & candidates:
        return True, None
    return False, f"Model '{model_id}' not found in LiteLLM's '{provider}' catalog."


def check_snapshot_models(snapshot: RouterSnapshot) -> list[str]:
    """Return one warning line per tier whose model id looks wrong."""
    warnings: list[str] = []
    for tier in sorted(snapshot.models, key=lambda t: t.rank):
        ok, err = check_model_id(snapshot.models[tier])
        if not ok:
            warnings.append(f"{tier.value}: {snapshot.models[tier]} - {err}")
    return warnings
