"""Per-host identity persisted in the user's home directory."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from dotenv import dotenv_values, set_key

from pycaliper.errors import HostIdentityError

__all__ = ["RC_FILENAME", "UUID_KEY", "default_rc_path", "resolve_host_uuid"]

logger = logging.getLogger(__name__)

RC_FILENAME = ".caliperrc"
UUID_KEY = "userUuid"


def default_rc_path() -> Path:
    """Return the location of the identity file for the current user."""
    return Path.home() / RC_FILENAME


def resolve_host_uuid(rc_path: Path | None = None) -> str:
    """Return the stored host UUID, generating and persisting one on first use."""
    path = rc_path or default_rc_path()
    try:
        values = dotenv_values(path, encoding="utf-8") if path.exists() else {}
        existing = values.get(UUID_KEY)
        if existing:
            return existing
        generated = str(uuid.uuid4())
        path.touch(exist_ok=True)
        set_key(path, UUID_KEY, generated, quote_mode="never", encoding="utf-8")
    except OSError as exc:
        message = f"Failed to access host identity file {path}: {exc}"
        raise HostIdentityError(message) from exc
    logger.info("Generated host identity %s in %s", generated, path)
    return generated
