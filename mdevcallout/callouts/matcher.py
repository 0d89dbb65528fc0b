"""
Script Matcher for mdevcallout
==============================
Walk a callout directory in sorted order and find the first script that
claims the current device/event/action.

Exit code protocol:
    2            the script does not handle this device type, try the next one
    killed       the script was terminated by a signal, skip it
    anything else (including 0) the script claims the event
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

from .invoke import build_context, invoke_callout_script
from .types import Action, CalloutState, Event, ScriptOutput

if TYPE_CHECKING:
    from ..device import MDev

# Configure module logger
logger = logging.getLogger(__name__)

# Exit code a script uses to decline a device
UNMATCHED_EXIT_CODE = 2


class Verdict(Enum):
    """How a script answered the exit code protocol"""
    CLAIMED = "claimed"
    DECLINED = "declined"
    SKIPPED = "skipped"


def verdict(output: ScriptOutput) -> Verdict:
    """Classify a finished script run"""
    if output.signaled:
        return Verdict.SKIPPED
    if output.returncode == UNMATCHED_EXIT_CODE:
        return Verdict.DECLINED
    return Verdict.CLAIMED


def sorted_entries(directory: Path) -> List[Path]:
    """
    Immediate entries of ``directory`` sorted by path.

    Returns an empty list when the directory cannot be read.
    """
    try:
        return sorted(directory.iterdir())
    except OSError as e:
        logger.debug(f"Cannot read callout directory {directory}: {e}")
        return []


def invoke_first_matching_script(
    device: "MDev",
    directory: Path,
    event: Event,
    action: Action,
    state: CalloutState = CalloutState.NONE
) -> Optional[Tuple[Path, ScriptOutput]]:
    """
    Run the scripts in ``directory`` one at a time until one claims the event.

    Args:
        device: Device the event is about
        directory: Callout directory to scan
        event: Protocol phase
        action: Lifecycle action
        state: Action outcome passed to the scripts

    Returns:
        (script path, captured output) of the claiming script, or None
    """
    if device.mdev_type is None:
        return None

    logger.debug(
        f"{event}-{action}: looking for a matching callout script "
        f"for dev type '{device.mdev_type}' in {directory}"
    )

    context = build_context(device, event, action, state)

    for path in sorted_entries(Path(directory)):
        try:
            output = invoke_callout_script(path, context)
        except OSError as e:
            logger.debug(f"Failed to execute callout script {path}: {e}")
            continue

        result = verdict(output)
        if result is Verdict.SKIPPED:
            logger.warning(f"Callout script {path} was terminated by signal {output.signal}")
            continue
        if result is Verdict.DECLINED:
            logger.debug(f"Device type {device.mdev_type} unmatched by callout script {path}")
            continue

        logger.debug(f"Found callout script {path}")
        return path, output

    return None


__all__ = [
    'Verdict',
    'verdict',
    'sorted_entries',
    'invoke_first_matching_script',
    'UNMATCHED_EXIT_CODE',
]
