"""Per-installation device identity."""

from __future__ import annotations

import threading
import uuid
from pathlib import Path

from platformdirs import user_data_dir

from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)

_DEVICE_FILE = "device_id"


class DeviceIdentityProvider:
    """Hands out a stable identifier for this installation.

    The id is generated on first use, written to the user data dir and cached
    in memory for the life of the provider. An empty or unreadable file is
    replaced with a fresh id.
    """

    def __init__(self, data_dir: Path | None = None):
        self.data_dir = Path(data_dir) if data_dir else Path(user_data_dir("pinepomo"))
        self.device_file = self.data_dir / _DEVICE_FILE
        self._device_id: str | None = None
        self._lock = threading.Lock()

    def get_device_id(self) -> str:
        """Return the cached device id, creating it if needed."""
        with self._lock:
            if self._device_id is None:
                self._device_id = self._load() or self._create()
            return self._device_id

    __call__ = get_device_id

    def _load(self) -> str | None:
        try:
            value = self.device_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read device id from %s: %s", self.device_file, e)
            return None
        return value or None

    def _create(self) -> str:
        device_id = str(uuid.uuid4())
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self.device_file.write_text(device_id, encoding="utf-8")
            self.device_file.chmod(0o600)
            logger.info("Generated new device id %s", device_id)
        except OSError as e:
            # Still usable for this process; next run will try again.
            logger.warning("Could not persist device id to %s: %s", self.device_file, e)
        return device_id
