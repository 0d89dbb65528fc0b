"""
Mediated Device model for mdevcallout
=====================================
The subset of a device definition the callout engine needs: identity,
type, parent and its JSON representation.
"""

from __future__ import annotations

import json
import uuid as uuid_mod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .environment import Environment


@dataclass
class MDev:
    """A mediated device"""
    env: Environment
    uuid: uuid_mod.UUID
    parent: Optional[str] = None
    mdev_type: Optional[str] = None
    autostart: bool = False
    attrs: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.uuid, uuid_mod.UUID):
            self.uuid = uuid_mod.UUID(str(self.uuid))

    def to_json(self, include_uuid: bool = False) -> Dict[str, Any]:
        """
        JSON representation of the device definition.

        Args:
            include_uuid: Add the "uuid" key

        Returns:
            Dictionary ready for json.dumps
        """
        data: Dict[str, Any] = {}
        if include_uuid:
            data["uuid"] = str(self.uuid)
        data["mdev_type"] = self.mdev_type
        data["start"] = "auto" if self.autostart else "manual"
        data["attrs"] = [{name: value} for name, value in self.attrs]
        return data

    def to_json_string(self) -> str:
        """Compact JSON, as written to callout scripts"""
        return json.dumps(self.to_json(), separators=(",", ":"))

    @classmethod
    def from_json(
        cls,
        env: Environment,
        uuid: Union[str, uuid_mod.UUID],
        parent: Optional[str],
        data: Dict[str, Any]
    ) -> "MDev":
        """
        Create from a device definition.

        Raises:
            ValueError: if the definition is malformed
        """
        if not isinstance(data, dict):
            raise ValueError("Device definition must be a JSON object")

        start = data.get("start", "manual")
        if start not in ("auto", "manual"):
            raise ValueError(f"Invalid start value: {start}")

        attrs = []
        for item in data.get("attrs", []):
            if not isinstance(item, dict) or len(item) != 1:
                raise ValueError(f"Invalid attribute entry: {item!r}")
            (name, value), = item.items()
            attrs.append((name, str(value)))

        return cls(
            env=env,
            uuid=uuid,
            parent=parent,
            mdev_type=data.get("mdev_type"),
            autostart=start == "auto",
            attrs=attrs
        )


__all__ = ['MDev']
