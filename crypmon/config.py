"""
Monitoring System Configuration
===============================

Default parameters for the scheme, overridable through environment
variables. Scripts and tests read the module-level ``config`` instance.

Environment variables:
- CRYPMON_PAIRING_CURVE: pairing curve identifier (default 'MNT224')
- CRYPMON_BITWIDTH: message space bit-width of each agent (default 8)
- CRYPMON_AGENTS: number of agents used by the demo and benchmark (default 5)
- CRYPMON_SEED: seed for a deterministic random source (default: unset)
- CRYPMON_LOG_LEVEL: logging level name (default 'WARNING')
"""

import logging
import os

DEFAULT_PAIRING_CURVE = os.getenv('CRYPMON_PAIRING_CURVE', 'MNT224')
DEFAULT_BITWIDTH = int(os.getenv('CRYPMON_BITWIDTH', 8))
DEFAULT_AGENTS = int(os.getenv('CRYPMON_AGENTS', 5))
DEFAULT_LOG_LEVEL = os.getenv('CRYPMON_LOG_LEVEL', 'WARNING').upper()

_seed = os.getenv('CRYPMON_SEED')
# Only for reproducible experiments; never set in a deployment
DEFAULT_SEED = int(_seed) if _seed else None


class Config:
    """Runtime configuration of the monitoring system."""

    def __init__(self):
        self.pairing_curve = DEFAULT_PAIRING_CURVE
        self.bitwidth = DEFAULT_BITWIDTH
        self.agents = DEFAULT_AGENTS
        self.seed = DEFAULT_SEED
        self.log_level = DEFAULT_LOG_LEVEL

    @property
    def deterministic(self):
        return self.seed is not None


def configure_logging(level=None):
    """
    Attach a stream handler to the root logger.

    Parameters
    ----------
    level : str or int, optional
        Logging level; defaults to ``config.log_level``.
    """
    level = config.log_level if level is None else level
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )


# Global configuration instance
config = Config()
