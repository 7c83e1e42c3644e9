"""
Integration shell: configuration, the reference dispatcher cycle and snapshots.
"""

from .config import ConfigError, EngineConfig, engine_config_from_mapping, load_engine_config
from .cycle import AdjustmentOutcome, FeeApplicationError, FeeSink, FeeSource, InMemoryFeeLedger, run_adjustment
from .snapshot import engine_digest, restore_engine, snapshot_engine

__all__ = [
    "ConfigError",
    "EngineConfig",
    "engine_config_from_mapping",
    "load_engine_config",
    "AdjustmentOutcome",
    "FeeApplicationError",
    "FeeSink",
    "FeeSource",
    "InMemoryFeeLedger",
    "run_adjustment",
    "engine_digest",
    "restore_engine",
    "snapshot_engine",
]
