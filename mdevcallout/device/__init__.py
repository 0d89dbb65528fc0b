"""
mdevcallout Device Package
==========================
Device model and script directory environment consumed by the engine.
"""

from .environment import Environment, DEFAULT_CONFIG_FILE, ROOT_ENV_VAR
from .mdev import MDev

__all__ = ['Environment', 'MDev', 'DEFAULT_CONFIG_FILE', 'ROOT_ENV_VAR']
