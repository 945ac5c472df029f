"""
Ledger configuration parameters.

Defines the listing fee, the allowed auction durations and where
persistent data and logs live.

Values can be overridden through NFTAUCTION_* environment variables,
either exported in the process environment or listed in a .env file.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values


ENV_PREFIX = "NFTAUCTION_"


@dataclass
class LedgerConfig:
    """Ledger-wide configuration parameters"""

    # Listing parameters
    listing_fee: int = 100  # Flat fee attached to every listing (base units)
    min_duration_days: int = 1
    max_duration_days: int = 60
    seconds_per_day: int = 86_400

    # Paths
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")
    db_name: str = "auctions.db"

    def duration_seconds(self, duration_days: int) -> int:
        """Convert a listing duration in days to seconds."""
        return duration_days * self.seconds_per_day


# Global config instance (can be overridden)
config = LedgerConfig()


def _coerce(name: str, raw: str, default):
    if isinstance(default, Path):
        return Path(raw).expanduser()
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}")
    return raw


def load_config(env_file: Optional[str] = None) -> LedgerConfig:
    """
    Load configuration from environment and an optional .env file.
    
    Process environment variables take precedence over the file.
    
    Args:
        env_file: Optional path to a .env file
        
    Returns:
        LedgerConfig instance
    """
    values: Dict[str, Optional[str]] = {}
    if env_file:
        values.update(dotenv_values(env_file))
    values.update(os.environ)

    defaults = LedgerConfig()
    overrides = {}
    for f in fields(LedgerConfig):
        raw = values.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        overrides[f.name] = _coerce(f.name, raw, getattr(defaults, f.name))

    return LedgerConfig(**overrides)
