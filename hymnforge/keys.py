"""
API key and provider-choice storage for HymnForge.

Provides storage and retrieval of provider keys using:
1. Environment variables (preferred for CI/production)
2. OS keychain via keyring (secure local storage)
3. Local config file (fallback)

The core service never touches this module: callers load an AISettings
here and pass it into each operation.

Usage:
    from hymnforge.keys import KeyManager

    km = KeyManager()
    km.set_key("gemini", "AIza...")
    settings = km.load_settings()
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError

from hymnforge.config import DEFAULT_PROVIDER, PROVIDERS, SETTINGS_DIR
from hymnforge.models import AISettings, ProviderCredentials

logger = logging.getLogger(__name__)

# Supported services and their env var names
SERVICES = {
    "gemini": "GEMINI_API_KEY",
    "zhipu": "ZHIPU_API_KEY",
}

PROVIDER_ENV_VAR = "HYMNFORGE_PROVIDER"
PROVIDER_CONFIG_KEY = "provider"


@dataclass
class KeyInfo:
    """Information about an API key."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "AIza...abc1"


class KeyManager:
    """Manage provider keys and the active provider choice.

    Priority order for key retrieval:
    1. Environment variable
    2. OS keychain (via keyring)
    3. Local config file (~/.hymnforge/keys.json)
    """

    SERVICE_NAME = "HymnForge"

    def __init__(self, config_dir: Optional[Path] = None, use_keyring: bool = True):
        self.config_dir = Path(config_dir) if config_dir else SETTINGS_DIR
        self.config_file = self.config_dir / "keys.json"
        self._keyring_available = use_keyring and self._check_keyring()

    def _check_keyring(self) -> bool:
        """Check if a usable keyring backend is configured."""
        try:
            backend = keyring.get_keyring()
        except KeyringError:
            return False
        # The fail backend raises on every call; treat it as absent
        return backend.priority > 0

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.config_file, e)
            return {}

    def _write_config(self, config: dict) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)  # Restrict permissions

    def _keyring_get(self, service: str) -> Optional[str]:
        if not self._keyring_available:
            return None
        try:
            return keyring.get_password(self.SERVICE_NAME, service)
        except KeyringError as e:
            logger.debug("keyring lookup failed for %s: %s", service, e)
            return None

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        env_var = SERVICES.get(service, f"{service.upper()}_API_KEY")
        if env_val := os.getenv(env_var):
            return env_val, "env"
        if key := self._keyring_get(service):
            return key, "keyring"
        if key := self._read_config().get(service):
            return key, "config"
        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Get API key for a provider.

        Args:
            service: Provider tag (gemini, zhipu)

        Returns:
            API key string or None if not found
        """
        key, _ = self._lookup(service.lower())
        return key

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Store API key for a provider.

        Returns:
            Storage location used ('keyring' or 'config')
        """
        service = service.lower()

        if use_keyring and self._keyring_available:
            try:
                keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning("keyring write failed, using config file: %s", e)

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Delete stored API key for a provider."""
        service = service.lower()
        deleted = False

        if self._keyring_available:
            try:
                keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except KeyringError:
                pass  # not stored there

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        """Get information about a stored key."""
        service = service.lower()
        key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=self._mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        """List all providers and their key status."""
        return [self.get_key_info(service) for service in SERVICES]

    def _mask_key(self, key: str) -> str:
        """Mask a key for display (show first 4 and last 4 chars)."""
        if len(key) <= 12:
            return "*" * len(key)
        return f"{key[:4]}...{key[-4:]}"

    def export_to_env(self) -> dict[str, str]:
        """Export all keys as environment variables dict."""
        env = {}
        for service, env_var in SERVICES.items():
            if key := self.get_key(service):
                env[env_var] = key
        return env

    def get_provider(self) -> str:
        """Active provider: env var, then config file, then the default."""
        provider = os.getenv(PROVIDER_ENV_VAR) or self._read_config().get(PROVIDER_CONFIG_KEY)
        if provider in PROVIDERS:
            return provider
        if provider:
            logger.warning("Ignoring unknown provider %r", provider)
        return DEFAULT_PROVIDER

    def set_provider(self, provider: str) -> None:
        provider = provider.lower()
        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider}")
        config = self._read_config()
        config[PROVIDER_CONFIG_KEY] = provider
        self._write_config(config)

    def load_settings(self, provider: Optional[str] = None) -> AISettings:
        """Assemble the per-call settings from stored keys.

        Args:
            provider: Override the stored active provider
        """
        return AISettings(
            provider=(provider or self.get_provider()).lower(),
            credentials=ProviderCredentials(
                gemini=self.get_key("gemini"),
                zhipu=self.get_key("zhipu"),
            ),
        )
