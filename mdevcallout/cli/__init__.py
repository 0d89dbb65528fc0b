"""
mdevcallout CLI Package
=======================
Command-line interface for mdevcallout.
"""

from .main import app, main_entry

__all__ = ['app', 'main_entry']
