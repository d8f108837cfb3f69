"""Persistence of release configurations.

A ConfigurationStore keeps one record per project so that ``release prepare``
can resume after an interruption and ``release perform`` can pick up the
state left by an earlier ``prepare`` run.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from relman.core.release.configuration import ReleaseConfiguration
from relman.core.release.exceptions import (
    ConfigurationNotFoundError,
    ConfigurationStoreError,
)

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".release.json"

# Fields supplied by the operator on every run; never written to disk.
TRANSIENT_FIELDS = ("scm_password",)


class ConfigurationStore(ABC):
    """Storage contract for release configurations keyed by project identity."""

    @abstractmethod
    def read(self, config: ReleaseConfiguration) -> ReleaseConfiguration:
        """Load the record matching ``config.key``.

        Raises:
            ConfigurationNotFoundError: If no record exists
            ConfigurationStoreError: If the record exists but cannot be loaded
        """
        ...

    @abstractmethod
    def write(self, config: ReleaseConfiguration) -> None:
        """Persist ``config``, replacing any previous record.

        Raises:
            ConfigurationStoreError: If the record cannot be written
        """
        ...

    @abstractmethod
    def delete(self, config: ReleaseConfiguration) -> bool:
        """Remove the record for ``config``. Deleting a missing record is not an error.

        Returns:
            True if a record was removed, False if none existed
        """
        ...


def _merge_transient(
    stored: ReleaseConfiguration, requested: ReleaseConfiguration
) -> ReleaseConfiguration:
    """Re-apply operator-supplied secrets that are never persisted."""
    updates = {name: getattr(requested, name) for name in TRANSIENT_FIELDS}
    return stored.model_copy(update=updates)


class FileConfigurationStore(ConfigurationStore):
    """Filesystem-backed store writing one JSON document per release.

    Records are stored as ``{group_id}.{artifact_id}.release.json`` under the
    base directory (``RelmanPaths.get_releases_dir()`` by default).
    """

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """Initialize the store.

        Args:
            base_path: Optional directory override for the records
        """
        if base_path is None:
            from relman.core.paths import RelmanPaths

            base_path = RelmanPaths.get_releases_dir()

        self._base_path = Path(base_path)

    @property
    def base_path(self) -> Path:
        """Directory holding the release records."""
        return self._base_path

    def record_path(self, config: ReleaseConfiguration) -> Path:
        """Get the file path of the record for ``config``."""
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", ".", config.key)
        return self._base_path / f"{safe_key}{RECORD_SUFFIX}"

    def read(self, config: ReleaseConfiguration) -> ReleaseConfiguration:
        path = self.record_path(config)

        if not path.exists():
            raise ConfigurationNotFoundError(f"No release record for {config.key}")

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            stored = ReleaseConfiguration.model_validate(payload["configuration"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            logger.error("Failed to read release record %s: %s", path, e)
            raise ConfigurationStoreError(f"Corrupted release record {path}: {e}") from e

        logger.debug("Read release record %s (completed phase: %s)", path, stored.completed_phase)
        return _merge_transient(stored, config)

    def write(self, config: ReleaseConfiguration) -> None:
        path = self.record_path(config)
        payload: Dict[str, Any] = {
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "configuration": config.model_dump(mode="json"),
        }

        try:
            self._base_path.mkdir(parents=True, exist_ok=True, mode=0o700)
            tmp_path = path.with_name(path.name + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            logger.error("Failed to write release record %s: %s", path, e)
            raise ConfigurationStoreError(f"Failed to write release record {path}: {e}") from e

        logger.debug("Wrote release record %s (completed phase: %s)", path, config.completed_phase)

    def delete(self, config: ReleaseConfiguration) -> bool:
        path = self.record_path(config)

        if not path.exists():
            return False

        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise ConfigurationStoreError(f"Failed to delete release record {path}: {e}") from e

        logger.debug("Deleted release record %s", path)
        return True
