"""LiteLLM proxy hook: rewrites `model: auto` chat requests to a tier model.

Register in the proxy config:

    litellm_settings:
      callbacks: clawroute.proxy.litellm_hook.proxy_handler_instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from litellm.integrations.custom_logger import CustomLogger
from loguru import logger

from clawroute.config import ReloadConfig, load_config, resolve_config_path
from clawroute.routing.classifier import TierClassifier
from clawroute.routing.reloader import ConfigReloader, Fingerprint, file_fingerprint

_ROUTED_CALL_TYPES = {"completion", "acompletion"}


class ClawRouteHook(CustomLogger):
    """Routes requests for the sentinel model before LiteLLM picks a deployment."""

    def __init__(
        self,
        classifier: TierClassifier,
        config_path: Path | None = None,
        reload_config: ReloadConfig | None = None,
        config_fingerprint: Fingerprint | None = None,
    ):
        super().__init__()
        self.classifier = classifier
        self.config_path = config_path
        self.reload_config = reload_config or ReloadConfig()
        self.config_fingerprint = config_fingerprint
        self._reloader: ConfigReloader | None = None

    @classmethod
    def from_config_path(cls, path: str | Path | None = None) -> ClawRouteHook:
        """Build from a config file. Raises ConfigError so a bad config aborts startup."""
        config_path = resolve_config_path(path)
        # Taken before loading so an edit made while loading is still picked up later
        fingerprint = file_fingerprint(config_path)
        config = load_config(config_path)
        classifier = TierClassifier(config.router)
        logger.info(f"Auto-router ready from {config_path}\n{classifier.get_status()}")
        return cls(
            classifier,
            config_path=config_path,
            reload_config=config.reload,
            config_fingerprint=fingerprint,
        )

    async def async_pre_call_hook(
        self,
        user_api_key_dict: Any,
        cache: Any,
        data: dict,
        call_type: str,
    ) -> dict:
        if call_type not in _ROUTED_CALL_TYPES or not self.classifier.is_auto_request(data):
            return data

        await self._ensure_reloader()
        _, rewritten = self.classifier.route(data)
        return rewritten

    async def _ensure_reloader(self) -> None:
        if self._reloader is not None or not self.reload_config.enabled or self.config_path is None:
            return
        self._reloader = ConfigReloader(
            self.config_path,
            self.classifier,
            interval_seconds=self.reload_config.interval_seconds,
            baseline=self.config_fingerprint,
        )
        await self._reloader.start()

    def stop(self) -> None:
        if self._reloader:
            self._reloader.stop()
            self._reloader = None


proxy_handler_instance = ClawRouteHook.from_config_path()
