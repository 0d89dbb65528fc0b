"""
Environment for mdevcallout
===========================
Where callout and notification scripts live, with YAML configuration.

Default layout (relative to the environment root):
    etc/mdevctl.d/scripts.d/callouts        site-local callouts, checked first
    usr/lib/mdevctl/scripts.d/callouts      distribution callouts
    etc/mdevctl.d/scripts.d/notifiers
    usr/lib/mdevctl/scripts.d/notifiers
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

# Configure module logger
logger = logging.getLogger(__name__)

# Default configuration file
DEFAULT_CONFIG_FILE = Path("/etc/mdevcallout/config.yaml")

# Overrides the root of every default directory
ROOT_ENV_VAR = "MDEVCTL_ENV_ROOT"

ETC_SCRIPTS = Path("etc/mdevctl.d/scripts.d")
LIB_SCRIPTS = Path("usr/lib/mdevctl/scripts.d")


@dataclass
class Environment:
    """
    Supplies the ordered script directories to the callout engine.

    Directories listed in the configuration come before the defaults.
    """
    root: Path = Path("/")
    extra_callout_dirs: List[Path] = field(default_factory=list)
    extra_notification_dirs: List[Path] = field(default_factory=list)

    def __post_init__(self):
        self.root = Path(self.root)
        self.extra_callout_dirs = [Path(p) for p in self.extra_callout_dirs]
        self.extra_notification_dirs = [Path(p) for p in self.extra_notification_dirs]

    def callout_dirs(self) -> List[Path]:
        """Callout directories, most specific first"""
        return self.extra_callout_dirs + [
            self.root / ETC_SCRIPTS / "callouts",
            self.root / LIB_SCRIPTS / "callouts",
        ]

    def notification_dirs(self) -> List[Path]:
        """Notification directories in broadcast order"""
        return self.extra_notification_dirs + [
            self.root / ETC_SCRIPTS / "notifiers",
            self.root / LIB_SCRIPTS / "notifiers",
        ]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], root: Optional[Union[str, Path]] = None) -> "Environment":
        """Create from a configuration dictionary"""
        root = root or os.environ.get(ROOT_ENV_VAR) or data.get("root") or "/"
        return cls(
            root=Path(root),
            extra_callout_dirs=data.get("callout_dirs") or [],
            extra_notification_dirs=data.get("notification_dirs") or []
        )

    @classmethod
    def from_config(
        cls,
        config_file: Optional[Path] = None,
        root: Optional[Union[str, Path]] = None
    ) -> "Environment":
        """
        Load the environment from a YAML configuration file.

        A missing file gives the defaults. So does a file that cannot be
        read or parsed, after logging the problem.

        Args:
            config_file: YAML file to read (default: /etc/mdevcallout/config.yaml)
            root: Root directory, takes precedence over the environment
                variable and the file

        Returns:
            Environment instance
        """
        config_file = Path(config_file or DEFAULT_CONFIG_FILE)
        data: Dict[str, Any] = {}

        if config_file.exists():
            try:
                with open(config_file) as f:
                    loaded = yaml.safe_load(f) or {}
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.error(f"Ignoring configuration {config_file}: expected a mapping")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load configuration file {config_file}: {e}")

        return cls.from_dict(data, root=root)


__all__ = ['Environment', 'DEFAULT_CONFIG_FILE', 'ROOT_ENV_VAR']
