"""
Utility helpers: seed salts and logging setup.
"""

from .random import mix_seed
from .log_config import configure_logging

__all__ = ['mix_seed', 'configure_logging']
