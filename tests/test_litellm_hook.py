from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from clawroute.config import ConfigError, RouterConfig
from clawroute.proxy.litellm_hook import ClawRouteHook, proxy_handler_instance
from clawroute.routing.classifier import TierClassifier


def _hook() -> ClawRouteHook:
    return ClawRouteHook(
        TierClassifier(RouterConfig(tiers={"low": "v/low", "mid": "v/mid", "top": "v/top"}))
    )


def test_module_instance_is_built_from_shipped_rules() -> None:
    assert isinstance(proxy_handler_instance, ClawRouteHook)
    assert proxy_handler_instance.classifier.auto_model_name == "auto"


@pytest.mark.asyncio
async def test_pre_call_hook_routes_auto_requests() -> None:
    hook = _hook()
    data = {
        "model": "auto",
        "messages": [{"role": "user", "content": "[high] hello"}],
        "stream": True,
    }

    result = await hook.async_pre_call_hook(None, None, data, "acompletion")

    assert result["model"] == "v/top"
    assert result["messages"][0]["content"] == "hello"
    assert result["stream"] is True
    assert data["model"] == "auto"


@pytest.mark.asyncio
async def test_pre_call_hook_leaves_explicit_models_alone() -> None:
    hook = _hook()
    data = {"model": "openai/gpt-4o", "messages": [{"role": "user", "content": "[low] hi"}]}

    result = await hook.async_pre_call_hook(None, None, data, "completion")

    assert result is data


@pytest.mark.asyncio
async def test_pre_call_hook_ignores_non_chat_calls() -> None:
    hook = _hook()
    data = {"model": "auto", "input": ["embed me"]}

    result = await hook.async_pre_call_hook(None, None, data, "embeddings")

    assert result is data


def test_from_config_path_rejects_invalid_config(tmp_path: Path) -> None:
    config_path = tmp_path / "routing_rules.yaml"
    config_path.write_text(
        yaml.safe_dump({"router": {"fallback_category": "missing"}}), encoding="utf-8"
    )
    with pytest.raises(ConfigError, match="missing"):
        ClawRouteHook.from_config_path(config_path)


@pytest.mark.asyncio
async def test_reloader_starts_on_first_routed_call(tmp_path: Path) -> None:
    config_path = tmp_path / "routing_rules.yaml"
    config_path.write_text(
        yaml.safe_dump({"reload": {"enabled": True, "interval_seconds": 60}}), encoding="utf-8"
    )
    hook = ClawRouteHook.from_config_path(config_path)
    try:
        await hook.async_pre_call_hook(
            None, None, {"model": "auto", "messages": [{"role": "user", "content": "hi"}]}, "acompletion"
        )
        assert hook._reloader is not None
        assert hook._reloader.running is True
    finally:
        hook.stop()
    assert hook._reloader is None


@pytest.mark.asyncio
async def test_edit_before_first_routed_call_is_reloaded(tmp_path: Path) -> None:
    config_path = tmp_path / "routing_rules.yaml"

    def write(top_model: str, mtime: float) -> None:
        data = {
            "reload": {"enabled": True, "interval_seconds": 60},
            "router": {"tiers": {"top": top_model}},
        }
        config_path.write_text(yaml.safe_dump(data), encoding="utf-8")
        os.utime(config_path, (mtime, mtime))

    write("v/top-1", mtime=1_000_000)
    hook = ClawRouteHook.from_config_path(config_path)
    write("v/top-2", mtime=1_000_100)
    request = {"model": "auto", "messages": [{"role": "user", "content": "[high] hi"}]}
    try:
        result = await hook.async_pre_call_hook(None, None, request, "acompletion")
        assert result["model"] == "v/top-1"

        assert hook._reloader.check_now() is True
        result = await hook.async_pre_call_hook(None, None, request, "acompletion")
        assert result["model"] == "v/top-2"
    finally:
        hook.stop()
