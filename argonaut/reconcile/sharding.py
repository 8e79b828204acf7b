import logging
from typing import Optional, Tuple
from argonaut.reconcile.prober import ExistenceProber
from argonaut.types.models.sharding import ShardingSpec
from argonaut.utils.errors import ReconcileError

logger = logging.getLogger(__name__)


def clamp_bounds(
    sharding: ShardingSpec, log: logging.Logger = None
) -> Tuple[int, int, int]:
    """Return ``(min_shards, max_shards, clusters_per_shard)`` made valid.

    Invalid values are corrected with a warning: minimum below 1 becomes 1,
    maximum below minimum becomes minimum, clusters per shard below 1
    becomes 1.
    """
    log = log or logger
    min_shards = sharding.min_shards if sharding.min_shards is not None else 1
    max_shards = sharding.max_shards if sharding.max_shards is not None else 1
    per_shard = sharding.clusters_per_shard if sharding.clusters_per_shard is not None else 1

    if min_shards < 1:
        log.warning(f"Minimum number of shards cannot be less than 1. Setting default value to 1 (was {min_shards})")
        min_shards = 1
    if max_shards < min_shards:
        log.warning(
            f"Maximum number of shards cannot be less than minimum number of shards. "
            f"Setting maximum shards same as minimum shards ({max_shards} -> {min_shards})"
        )
        max_shards = min_shards
    if per_shard < 1:
        log.warning(f"clustersPerShard cannot be less than 1. Defaulting to 1 (was {per_shard})")
        per_shard = 1
    return min_shards, max_shards, per_shard


def compute_replicas(
    sharding: Optional[ShardingSpec],
    inventory_count: Optional[int],
    default: int = 1,
    log: logging.Logger = None,
) -> int:
    """Application controller replica count.

    With dynamic scaling the count is ``inventory_count // clusters_per_shard``
    clamped into the shard bounds, or ``default`` when the inventory is
    unknown. Otherwise a non-negative static ``replicas`` override applies
    when sharding is enabled.
    """
    log = log or logger
    if sharding is None:
        return default

    if sharding.dynamic_scaling_enabled:
        min_shards, max_shards, per_shard = clamp_bounds(sharding, log)
        if inventory_count is None:
            return default
        replicas = inventory_count // per_shard
        if replicas < min_shards:
            return min_shards
        if replicas > max_shards:
            return max_shards
        return replicas

    if sharding.enabled and sharding.replicas is not None and sharding.replicas >= 0:
        return sharding.replicas
    return default


async def count_clusters(
    prober: ExistenceProber, namespace: str, label_selector: str, log: logging.Logger = None
) -> Optional[int]:
    """Number of cluster secrets, or None when they cannot be listed."""
    log = log or logger
    try:
        secrets = await prober.list("Secret", namespace, label_selector)
    except (ReconcileError, OSError) as e:
        log.error(f"Failed to list cluster secrets in {namespace}, using default replicas: {e}")
        return None
    return len(secrets)


async def resolve_controller_replicas(
    prober: ExistenceProber,
    namespace: str,
    sharding: Optional[ShardingSpec],
    default: int,
    label_selector: str,
    log: logging.Logger = None,
) -> int:
    inventory = None
    if sharding is not None and sharding.dynamic_scaling_enabled:
        inventory = await count_clusters(prober, namespace, label_selector, log)
    return compute_replicas(sharding, inventory, default, log)
