"""
Local storage for the Gemini API key.

The key is kept in a small JSON file (default ~/.studiolens/credentials.json).
The stored value is obfuscated with a reversible encoding so it is not
readable at a glance. This is NOT encryption and NOT a security boundary:
anyone who can read the file can recover the key.

Lookup order for get(): stored value, then the environment default
(GEMINI_API_KEY / GOOGLE_API_KEY / API_KEY), then None.
"""

import base64
import binascii
import json
import os
from pathlib import Path

from studiolens.core.config import Config, api_key_from_env, get_config
from studiolens.logging_config import get_logger, redact_secret

logger = get_logger(__name__)

_OBFUSCATION_PREFIX = "obf1:"
_FIELD = "api_key"


def obfuscate(value: str) -> str:
    """Reversibly encode ``value`` (reverse, then base64)."""
    encoded = base64.b64encode(value[::-1].encode("utf-8")).decode("ascii")
    return _OBFUSCATION_PREFIX + encoded


def deobfuscate(value: str) -> str | None:
    """Inverse of obfuscate(); None if ``value`` is not in the expected form."""
    if not value.startswith(_OBFUSCATION_PREFIX):
        return None
    try:
        decoded = base64.b64decode(value[len(_OBFUSCATION_PREFIX) :], validate=True)
        return decoded.decode("utf-8")[::-1]
    except (binascii.Error, UnicodeDecodeError):
        return None


class KeyStore:
    """API key provider with a file-backed local value and an environment fallback."""

    def __init__(self, path: Path | str, env_default: str | None = None) -> None:
        """
        Args:
            path: JSON file holding the obfuscated key
            env_default: Fallback key; if None, the environment is read on each get()
        """
        self.path = Path(path)
        self._env_default = env_default

    def _read_stored(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.path, e)
            return None
        raw = data.get(_FIELD) if isinstance(data, dict) else None
        if not isinstance(raw, str) or not raw:
            return None
        key = deobfuscate(raw)
        if key is None:
            logger.warning("Ignoring malformed key in %s", self.path)
            return None
        return key.strip() or None

    def env_default(self) -> str | None:
        value = self._env_default if self._env_default is not None else api_key_from_env()
        return value.strip() or None

    def get(self) -> str | None:
        """Return the stored key, else the environment default, else None."""
        stored = self._read_stored()
        if stored:
            return stored
        return self.env_default()

    def has_stored_key(self) -> bool:
        return bool(self._read_stored())

    def set(self, api_key: str) -> None:
        """Store ``api_key`` stripped of surrounding whitespace; a blank value clears it."""
        api_key = (api_key or "").strip()
        if not api_key:
            self.clear()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Created owner-only; an existing file keeps its mode until the chmod below
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({_FIELD: obfuscate(api_key)}, f)
        try:
            os.chmod(self.path, 0o600)
        except OSError as e:
            logger.debug("Could not restrict key file permissions: %s", e)
        logger.info("Saved API key %s to %s", redact_secret(api_key), self.path)

    def clear(self) -> None:
        """Remove the stored key. Does nothing if none is stored."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Removed stored API key from %s", self.path)


# Global key store instance, created on first use
_global_key_store: KeyStore | None = None


def get_key_store(config: Config | None = None) -> KeyStore:
    """
    Get the global key store, creating it from config on first call.

    Returns:
        The global KeyStore instance
    """
    global _global_key_store
    if _global_key_store is None:
        cfg = config or get_config()
        _global_key_store = KeyStore(cfg.key_file, env_default=cfg.gemini_api_key or None)
    return _global_key_store


def set_key_store(store: KeyStore | None) -> None:
    """Replace the global key store (None resets it to lazy creation)."""
    global _global_key_store
    _global_key_store = store
