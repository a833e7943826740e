"""
Engine configuration - immutable assumptions threaded into the metrics pipeline.
Defaults mirror market conventions; override per run for alternate assumptions.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when engine configuration is invalid."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    """Fixed assumptions used by every calculation in one analysis run."""
    trading_days_per_year: int = 252
    risk_free_rate: float = 0.04
    var_z_score: float = 1.645  # one-tailed 95%
    var_horizon_days: int = 1
    min_trading_days: int = 20
    weight_tolerance: float = 1e-3

    def __post_init__(self):
        """Validate assumptions."""
        if self.trading_days_per_year <= 0:
            raise ConfigError("trading_days_per_year must be positive")

        if self.var_horizon_days <= 0:
            raise ConfigError("var_horizon_days must be positive")

        if self.min_trading_days < 2:
            raise ConfigError("min_trading_days must be at least 2")

        if self.weight_tolerance < 0:
            raise ConfigError("weight_tolerance must be non-negative")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'EngineConfig':
        """
        Build configuration from environment variables.

        Reads PORTFOLIO_RISK_FREE_RATE, PORTFOLIO_TRADING_DAYS and
        PORTFOLIO_MIN_TRADING_DAYS; unset variables keep their defaults.

        Args:
            env_file: Optional .env path (defaults to python-dotenv lookup)

        Returns:
            EngineConfig instance

        Raises:
            ConfigError: If a variable cannot be parsed
        """
        load_dotenv(env_file)

        config = cls()
        overrides = {}

        try:
            if os.getenv('PORTFOLIO_RISK_FREE_RATE'):
                overrides['risk_free_rate'] = float(os.environ['PORTFOLIO_RISK_FREE_RATE'])
            if os.getenv('PORTFOLIO_TRADING_DAYS'):
                overrides['trading_days_per_year'] = int(os.environ['PORTFOLIO_TRADING_DAYS'])
            if os.getenv('PORTFOLIO_MIN_TRADING_DAYS'):
                overrides['min_trading_days'] = int(os.environ['PORTFOLIO_MIN_TRADING_DAYS'])
        except ValueError as e:
            raise ConfigError(f"Invalid portfolio environment setting: {e}") from e

        return replace(config, **overrides) if overrides else config


DEFAULT_CONFIG = EngineConfig()
