"""
mdevcallout Utils Package
=========================
Logging helpers shared by the engine and the CLI.
"""

from .logger import (
    setup_logging,
    LogConfig,
    SessionLogger,
)

__all__ = [
    'setup_logging',
    'LogConfig',
    'SessionLogger',
]
