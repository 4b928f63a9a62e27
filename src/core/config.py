"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


STORE_BACKENDS = ("redis", "firestore", "snapshot")


@dataclass
class StoreConfig:
    """Backing store configuration.

    Attributes:
        backend: One of "redis", "firestore", "snapshot"
        redis_url: Redis REST endpoint (Upstash style)
        redis_token: Bearer token for the Redis REST endpoint
        key_pattern: SCAN match pattern for directory keys
        firestore_project: GCP project ID (None for default)
        firestore_database: Firestore database name (None for default)
        firestore_collection: Collection holding one document per slug
        snapshot_path: JSON file used by the snapshot backend
        timeout_seconds: Timeout applied to every store call
        batch_size: Keys per multi-get command
        max_workers: Concurrency cap when per-key fetches fan out
        use_pipeline: Send all multi-get batches in one pipelined request
    """
    backend: str = "redis"
    redis_url: str = ""
    redis_token: str = ""
    key_pattern: str = "*"
    firestore_project: str | None = None
    firestore_database: str | None = None
    firestore_collection: str = "redirects"
    snapshot_path: str = "data/devfest-data.json"
    timeout_seconds: float = 10.0
    batch_size: int = 500
    max_workers: int = 16
    use_pipeline: bool = True


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        store: Backing store configuration
        cache_ttl_seconds: How long the HTTP boundary may serve a cached listing
        nearest_count: Default number of nearest events on the map
        fallback_path: Where the redirect handler sends unresolved slugs
    """
    store: StoreConfig = field(default_factory=StoreConfig)
    cache_ttl_seconds: int = 3600
    nearest_count: int = 5
    fallback_path: str = "/"


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_store_config(store: StoreConfig) -> list[ValidationError]:
    """Validate backing store settings.

    Pure function.

    Args:
        store: Store configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if store.backend not in STORE_BACKENDS:
        errors.append(ValidationError(
            field="store.backend",
            message=f"Unknown backend '{store.backend}', expected one of {', '.join(STORE_BACKENDS)}",
        ))

    if store.backend == "redis":
        if not store.redis_url or store.redis_url.startswith("${"):
            errors.append(ValidationError(
                field="store.redis_url",
                message="Redis REST URL not set (or still contains placeholder)",
            ))
        if not store.redis_token or store.redis_token.startswith("${"):
            errors.append(ValidationError(
                field="store.redis_token",
                message="Redis REST token not resolved",
                severity="warning",
            ))

    if store.backend == "snapshot" and not store.snapshot_path:
        errors.append(ValidationError(
            field="store.snapshot_path",
            message="Snapshot backend needs a snapshot_path",
        ))

    if store.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="store.timeout_seconds",
            message=f"Timeout must be positive, got {store.timeout_seconds}",
        ))

    if store.batch_size <= 0:
        errors.append(ValidationError(
            field="store.batch_size",
            message=f"Batch size must be positive, got {store.batch_size}",
        ))

    if store.max_workers <= 0:
        errors.append(ValidationError(
            field="store.max_workers",
            message=f"Worker cap must be positive, got {store.max_workers}",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors = validate_store_config(config.store)

    if config.cache_ttl_seconds < 0:
        errors.append(ValidationError(
            field="cache_ttl_seconds",
            message=f"Cache TTL cannot be negative, got {config.cache_ttl_seconds}",
        ))

    if config.nearest_count <= 0:
        errors.append(ValidationError(
            field="nearest_count",
            message=f"Nearest count must be positive, got {config.nearest_count}",
        ))

    if not config.fallback_path.startswith("/"):
        errors.append(ValidationError(
            field="fallback_path",
            message="Fallback path should be site-relative (start with '/')",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
