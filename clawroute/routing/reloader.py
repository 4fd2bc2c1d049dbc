"""Config reloader - polls the routing config and hot-swaps the classifier tables."""

import asyncio
import hashlib
from pathlib import Path

from loguru import logger

from clawroute.config import ConfigError, load_config
from clawroute.routing.classifier import TierClassifier

# (mtime, sha256 hex digest); both None when the file does not exist
Fingerprint = tuple[float | None, str | None]


def file_fingerprint(path: str | Path) -> Fingerprint:
    p = Path(path).expanduser()
    try:
        mtime = p.stat().st_mtime
        digest = hashlib.sha256(p.read_bytes()).hexdigest()
    except OSError:
        return None, None
    return mtime, digest


class ConfigReloader:
    """Watches a config file and reloads the classifier when its content changes.

    ``baseline`` is the fingerprint of the file the classifier was built from.
    Without it the file as it is now is taken as already loaded.
    """

    def __init__(
        self,
        config_path: str | Path,
        classifier: TierClassifier,
        interval_seconds: float = 5.0,
        baseline: Fingerprint | None = None,
    ):
        self.config_path = Path(config_path).expanduser()
        self.classifier = classifier
        self.interval_seconds = interval_seconds
        self._last_mtime, self._last_hash = baseline or file_fingerprint(self.config_path)
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Config reloader started for {self.config_path} (every {self.interval_seconds}s)")

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.check_now()
            except Exception as e:
                logger.error(f"Config reloader error: {e}")

    def check_now(self) -> bool:
        """Reload if the file changed. Returns True when new tables went live."""
        mtime = self._mtime()
        if mtime is None or mtime == self._last_mtime:
            return False
        self._last_mtime = mtime

        digest = self._digest()
        if digest is None or digest == self._last_hash:
            return False
        self._last_hash = digest

        try:
            config = load_config(self.config_path)
            self.classifier.reload(config.router)
        except ConfigError as e:
            logger.error(f"Rejected config change in {self.config_path}, keeping previous rules: {e}")
            return False
        return True

    def _mtime(self) -> float | None:
        try:
            return self.config_path.stat().st_mtime
        except OSError:
            return None

    def _digest(self) -> str | None:
        try:
            return hashlib.sha256(self.config_path.read_bytes()).hexdigest()
        except OSError:
            return None
