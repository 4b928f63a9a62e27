"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, StoreConfig) are defined in src/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from src.core.config import Config, StoreConfig, validate_config
from src.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_store(
    data: dict[str, Any],
    secret_client: Optional[SecretManagerClient] = None,
) -> StoreConfig:
    """Parse the store section from config data."""
    defaults = StoreConfig()

    return StoreConfig(
        backend=data.get("backend", defaults.backend),
        redis_url=_resolve_value(data.get("redis_url", ""), secret_client),
        redis_token=_resolve_value(data.get("redis_token", ""), secret_client),
        key_pattern=data.get("key_pattern", defaults.key_pattern),
        firestore_project=data.get("firestore_project"),
        firestore_database=data.get("firestore_database"),
        firestore_collection=data.get("firestore_collection", defaults.firestore_collection),
        snapshot_path=data.get("snapshot_path", defaults.snapshot_path),
        timeout_seconds=float(data.get("timeout_seconds", defaults.timeout_seconds)),
        batch_size=int(data.get("batch_size", defaults.batch_size)),
        max_workers=int(data.get("max_workers", defaults.max_workers)),
        use_pipeline=bool(data.get("use_pipeline", defaults.use_pipeline)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()
    defaults = Config()

    return Config(
        store=_parse_store(data.get("store", {}), secret_client),
        cache_ttl_seconds=int(data.get("cache_ttl_seconds", defaults.cache_ttl_seconds)),
        nearest_count=int(data.get("nearest_count", defaults.nearest_count)),
        fallback_path=data.get("fallback_path", defaults.fallback_path),
    )


def _log_validation(config: Config) -> None:
    result = validate_config(config)
    for error in result.errors:
        log = logger.error if error.severity == "error" else logger.warning
        log("Config %s: %s", error.field, error.message)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    config = load_config_from_dict(data)
    _log_validation(config)

    logger.info("Loaded config: %s backend", config.store.backend)

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        STORE_BACKEND: redis, firestore or snapshot (default redis)
        UPSTASH_REDIS_REST_URL: Redis REST endpoint
        UPSTASH_REDIS_REST_TOKEN: Redis REST token (or ${secret:name})
        FIRESTORE_PROJECT, FIRESTORE_DATABASE, FIRESTORE_COLLECTION: Firestore target
        SNAPSHOT_PATH: JSON snapshot for the snapshot backend
        STORE_TIMEOUT_SECONDS: Timeout for every store call
        CACHE_TTL_SECONDS: Listing cache lifetime at the HTTP boundary

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()
    defaults = StoreConfig()

    store = StoreConfig(
        backend=os.environ.get("STORE_BACKEND", defaults.backend),
        redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        redis_token=_resolve_value(os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""), secret_client),
        firestore_project=os.environ.get("FIRESTORE_PROJECT"),
        firestore_database=os.environ.get("FIRESTORE_DATABASE"),
        firestore_collection=os.environ.get("FIRESTORE_COLLECTION", defaults.firestore_collection),
        snapshot_path=os.environ.get("SNAPSHOT_PATH", defaults.snapshot_path),
        timeout_seconds=float(os.environ.get("STORE_TIMEOUT_SECONDS", defaults.timeout_seconds)),
    )

    config = Config(
        store=store,
        cache_ttl_seconds=int(os.environ.get("CACHE_TTL_SECONDS", "3600")),
    )
    _log_validation(config)

    return config
