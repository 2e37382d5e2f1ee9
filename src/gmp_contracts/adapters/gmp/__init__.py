"""GMPStats API adapter."""

from .adapter import (
    CountResult,
    GMPAdapterConfig,
    GMPStatsAdapter,
    GMPStatsError,
    NetworkId,
    create_gmp_adapter,
    extract_contract_keys,
)

__all__ = [
    "CountResult",
    "GMPAdapterConfig",
    "GMPStatsAdapter",
    "GMPStatsError",
    "NetworkId",
    "create_gmp_adapter",
    "extract_contract_keys",
]
