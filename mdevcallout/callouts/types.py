"""
Callout Types for mdevcallout
=============================
Protocol tokens, per-launch invocation context, captured script output
and the callout error hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional


class Event(str, Enum):
    """Protocol phase a script is invoked for"""
    PRE = "pre"
    POST = "post"
    NOTIFY = "notify"
    GET = "get"

    def __str__(self) -> str:
        return self.value


class Action(str, Enum):
    """Lifecycle operation being performed on a device"""
    START = "start"
    STOP = "stop"
    DEFINE = "define"
    UNDEFINE = "undefine"
    MODIFY = "modify"
    ATTRIBUTES = "attributes"

    def __str__(self) -> str:
        return self.value


class CalloutState(str, Enum):
    """Outcome of the action function, as reported to Post and Notify scripts"""
    NONE = "none"
    SUCCESS = "success"
    FAILURE = "failure"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScriptContext:
    """
    Everything a single script launch needs besides the script path.

    Attributes:
        mdev_type: Device type passed with -t
        uuid: Device identifier passed with -u
        parent: Parent device identifier passed with -p
        event: Protocol phase passed with -e
        action: Lifecycle action passed with -a
        state: Action outcome so far passed with -s
        stdin: Payload written to the script's standard input
    """
    mdev_type: str
    uuid: str
    parent: str
    event: Event
    action: Action
    state: CalloutState = CalloutState.NONE
    stdin: str = ""

    def argv(self, script: Path) -> List[str]:
        """Build the argument vector for launching ``script``"""
        return [
            str(script),
            "-t", self.mdev_type,
            "-e", str(self.event),
            "-a", str(self.action),
            "-s", str(self.state),
            "-u", self.uuid,
            "-p", self.parent,
        ]


@dataclass
class ScriptOutput:
    """Captured result of one script run"""
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    signal: Optional[int] = None

    @property
    def signaled(self) -> bool:
        """True when the process was terminated by a signal"""
        return self.returncode is None

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CalloutError(Exception):
    """Base class for failures of the callout engine"""


class NoMatchingScript(CalloutError):
    """No script in a directory claimed the event"""

    def __init__(self, message: str = "No matching script for device found"):
        super().__init__(message)


class InvocationFailure(CalloutError):
    """A claiming script rejected the action or failed"""

    def __init__(self, script: Path, returncode: Optional[int]):
        self.script = Path(script)
        self.returncode = returncode
        status = "unknown" if returncode is None else str(returncode)
        super().__init__(f"Script '{self.script}' failed with status '{status}'")


class InvalidJSON(CalloutError):
    """A Get script printed output that is not valid JSON"""

    def __init__(self, script: Path, cause: Exception):
        self.script = Path(script)
        self.cause = cause
        super().__init__(f"Invalid JSON received from callout script: {cause}")


class MissingDeviceInfo(CalloutError):
    """The device lacks a type or parent needed on the script command line"""

    def __init__(self, uuid: str, field_name: str):
        self.uuid = uuid
        self.field_name = field_name
        super().__init__(f"Device {uuid} has no {field_name}; cannot invoke callout scripts")


__all__ = [
    'Event',
    'Action',
    'CalloutState',
    'ScriptContext',
    'ScriptOutput',
    'CalloutError',
    'NoMatchingScript',
    'InvocationFailure',
    'InvalidJSON',
    'MissingDeviceInfo',
]
