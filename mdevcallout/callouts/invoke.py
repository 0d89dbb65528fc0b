"""
Script Invocation for mdevcallout
=================================
Launch a single callout script, feed it the device payload on stdin and
capture everything it prints.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from .types import (
    Action,
    CalloutState,
    Event,
    MissingDeviceInfo,
    ScriptContext,
    ScriptOutput,
)

if TYPE_CHECKING:
    from ..device import MDev

# Configure module logger
logger = logging.getLogger(__name__)

# Script stderr goes straight to the operator
err_console = Console(stderr=True, markup=False, emoji=False, highlight=False, soft_wrap=True)


def build_context(
    device: "MDev",
    event: Event,
    action: Action,
    state: CalloutState = CalloutState.NONE
) -> ScriptContext:
    """
    Bundle the device fields and protocol tokens for one script launch.

    Get events carry no payload; every other event receives the device's
    compact JSON representation.

    Raises:
        MissingDeviceInfo: if the device has no type or no parent
    """
    if device.mdev_type is None:
        raise MissingDeviceInfo(str(device.uuid), "mdev_type")
    if device.parent is None:
        raise MissingDeviceInfo(str(device.uuid), "parent")

    stdin = "" if event is Event.GET else device.to_json_string()

    return ScriptContext(
        mdev_type=device.mdev_type,
        uuid=str(device.uuid),
        parent=device.parent,
        event=event,
        action=action,
        state=state,
        stdin=stdin
    )


def invoke_callout_script(script: Path, context: ScriptContext) -> ScriptOutput:
    """
    Run ``script`` to completion with the protocol arguments.

    A nonzero exit is a normal outcome and is reported in the returned
    ScriptOutput. There is no timeout.

    Args:
        script: Path of the executable to launch
        context: Arguments and stdin payload for this launch

    Returns:
        ScriptOutput with exit status and captured stdout/stderr

    Raises:
        OSError: if the process cannot be spawned or fed its input
    """
    logger.debug(
        f"{context.event}-{context.action}: executing {script} "
        f"(mdev_type={context.mdev_type}, uuid={context.uuid}, "
        f"parent={context.parent}, state={context.state})"
    )

    with subprocess.Popen(
        context.argv(script),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace"
    ) as process:
        stdout, stderr = process.communicate(input=context.stdin)

    if process.returncode < 0:
        return ScriptOutput(
            returncode=None,
            stdout=stdout or '',
            stderr=stderr or '',
            signal=-process.returncode
        )

    return ScriptOutput(
        returncode=process.returncode,
        stdout=stdout or '',
        stderr=stderr or ''
    )


def print_err(script: Path, output: ScriptOutput):
    """Echo a script's stderr to the operator, tagged with its file name"""
    if output.stderr:
        name = Path(script).name or "unknown script name"
        err_console.print(f"{name}: {output.stderr}", end="")


__all__ = ['build_context', 'invoke_callout_script', 'print_err', 'err_console']
