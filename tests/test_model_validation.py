import sys
import types

from clawroute.config import RouterConfig
from clawroute.proxy.catalog import check_model_id, check_snapshot_models
from clawroute.routing.tables import build_snapshot


def _fake_litellm(models_by_provider: dict[str, list[str]]) -> types.ModuleType:
    module = types.ModuleType("litellm")
    module.models_by_provider = models_by_provider
    return module


def test_check_model_id_requires_provider_prefix() -> None:
    ok, err = check_model_id("gpt-4o-mini")
    assert ok is False
    assert err is not None
    assert "provider/model-name" in err


def test_check_model_id_skips_gateway_catalogs(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "litellm", _fake_litellm({}))

    assert check_model_id("bedrock/us.anthropic.claude-opus-4-6-v1") == (True, None)
    assert check_model_id("openrouter/anthropic/claude-sonnet-4.6") == (True, None)


def test_check_model_id_uses_catalog_for_known_providers(monkeypatch) -> None:
    monkeypatch.setitem(
        sys.modules,
        "litellm",
        _fake_litellm({"gemini": ["gemini/gemini-3-flash-preview"], "openai": ["gpt-4o-mini"]}),
    )

    assert check_model_id("gemini/gemini-3-flash-preview") == (True, None)
    assert check_model_id("openai/gpt-4o-mini") == (True, None)

    ok, err = check_model_id("openai/not-a-real-model")
    assert ok is False
    assert "not-a-real-model" in err

    ok, err = check_model_id("nosuchvendor/model")
    assert ok is False
    assert "Unknown provider" in err


def test_check_model_id_accepts_providers_with_empty_catalog(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "litellm", _fake_litellm({"deepseek": []}))
    assert check_model_id("deepseek/deepseek-chat") == (True, None)


def test_check_snapshot_models_reports_bad_tiers(monkeypatch) -> None:
    monkeypatch.setitem(
        sys.modules,
        "litellm",
        _fake_litellm({"gemini": ["gemini/gemini-3-flash-preview"]}),
    )
    snapshot = build_snapshot(
        RouterConfig(
            tiers={
                "low": "gemini/gemini-3-flash-preview",
                "mid": "gemini/gemini-9-ultra",
                "top": "bedrock/us.anthropic.claude-opus-4-6-v1",
            }
        )
    )

    warnings = check_snapshot_models(snapshot)
    assert len(warnings) == 1
    assert warnings[0].startswith("mid: gemini/gemini-9-ultra")
