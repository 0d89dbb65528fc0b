"""
Callout Engine for mdevcallout
==============================
Drives operator-installed scripts around a device lifecycle action:

    pre      validate the action (may veto it unless forced)
    action   the caller's function
    post     report the outcome (failures are only logged)
    notify   best-effort broadcast to every notification script

and queries Get scripts for device attributes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from ..utils import SessionLogger
from .invoke import build_context, invoke_callout_script, print_err
from .matcher import invoke_first_matching_script
from .types import (
    Action,
    CalloutError,
    CalloutState,
    Event,
    InvalidJSON,
    InvocationFailure,
    NoMatchingScript,
    ScriptOutput,
)

if TYPE_CHECKING:
    from ..device import MDev

# Configure module logger
logger = logging.getLogger(__name__)

# Attribute output that means "no attributes"
EMPTY_ATTRIBUTES = "[{}]"

T = TypeVar("T")


def _session_log(device: "MDev") -> SessionLogger:
    return SessionLogger(str(device.uuid), logger)


class Callout:
    """
    State of one callout session.

    A session covers exactly one top-level ``invoke`` or ``get_attributes``
    call. The script claimed during Pre is remembered in ``script`` and
    reused for Post without rescanning any directory.
    """

    def __init__(self):
        self.state = CalloutState.NONE
        self.script: Optional[Path] = None

    def _invoke_script(self, device: "MDev", script: Path, event: Event, action: Action) -> ScriptOutput:
        context = build_context(device, event, action, self.state)
        return invoke_callout_script(script, context)

    def callout_dir(self, device: "MDev", event: Event, action: Action, directory: Path):
        """
        Resolve and run the callout script for ``event`` in one directory.

        Raises:
            NoMatchingScript: nothing in this directory handled the event
            InvocationFailure: the resolved script exited nonzero
            OSError: the sticky script could not be launched
        """
        if self.script is not None:
            output = self._invoke_script(device, self.script, event, action)
            print_err(self.script, output)
        else:
            if not Path(directory).is_dir():
                raise NoMatchingScript()

            found = invoke_first_matching_script(device, Path(directory), event, action, self.state)
            if found is None:
                raise NoMatchingScript()

            path, output = found
            print_err(path, output)
            self.script = path

        if output.signaled:
            _session_log(device).warning(f"Callout script {self.script} was terminated by signal {output.signal}")
            raise NoMatchingScript()
        if output.returncode != 0:
            raise InvocationFailure(self.script, output.returncode)

    def callout(self, device: "MDev", event: Event, action: Action):
        """
        Run the callout script for ``event`` from the first directory that has one.

        Finding no script at all is not an error: the operator simply has
        not configured callouts for this device type.
        """
        for directory in device.env.callout_dirs():
            sticky = self.script is not None
            try:
                self.callout_dir(device, event, action, directory)
            except NoMatchingScript:
                if sticky:
                    # other directories would only run the same script again
                    break
                continue
            return

    def notify(self, device: "MDev", action: Action):
        """Run every notification script. Never raises."""
        event = Event.NOTIFY
        log = _session_log(device)
        log.debug(f"{event}-{action}: executing notification scripts")

        try:
            context = build_context(device, event, action, self.state)
        except CalloutError as e:
            log.debug(f"Skipping notification scripts: {e}")
            return

        for directory in device.env.notification_dirs():
            directory = Path(directory)
            if not directory.is_dir():
                continue

            try:
                entries = list(directory.iterdir())
            except OSError as e:
                log.debug(f"Cannot read notification directory {directory}: {e}")
                continue

            for path in entries:
                try:
                    output = invoke_callout_script(path, context)
                except OSError as e:
                    log.debug(f"Failed to execute notification script {path}: {e}")
                    continue

                if output.signaled:
                    log.debug(f"Notification script {path} was terminated by signal {output.signal}")
                elif not output.success:
                    log.debug(f"Error occurred when executing notify script {path} (status {output.returncode})")

    def run(self, device: "MDev", action: Action, force: bool, func: Callable[["MDev"], T]) -> T:
        """Pre, action and Post for one action. Notify is the caller's job."""
        log = _session_log(device)

        try:
            self.callout(device, Event.PRE, action)
        except CalloutError as e:
            if not force:
                raise
            log.warning(f"Forcing operation '{action}' despite callout failure. Error was: {e}")

        try:
            result = func(device)
        except Exception:
            self.state = CalloutState.FAILURE
            self._post(device, action)
            raise

        self.state = CalloutState.SUCCESS
        self._post(device, action)
        return result

    def _post(self, device: "MDev", action: Action):
        try:
            self.callout(device, Event.POST, action)
        except Exception as e:
            _session_log(device).debug(f"Error occurred when executing post callout script: {e}")

    def parse_attribute_output(self, device: "MDev", script: Path, output: ScriptOutput) -> Any:
        """
        Turn a Get script's stdout into a JSON value.

        Empty output is null. A lone empty object in a list is normalized
        to an empty list.

        Raises:
            InvalidJSON: the output does not parse
            InvocationFailure: the script exited nonzero
        """
        print_err(script, output)

        if not output.success:
            raise InvocationFailure(script, output.returncode)

        _session_log(device).debug("Got attributes from callout script")
        text = output.stdout

        if not text:
            return None

        if text == EMPTY_ATTRIBUTES:
            _session_log(device).debug("Attribute field is empty")
            text = "[]"

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidJSON(script, e) from e

    def get_attributes_dir(self, device: "MDev", directory: Path) -> Any:
        found = invoke_first_matching_script(device, directory, Event.GET, Action.ATTRIBUTES, self.state)
        if found is None:
            _session_log(device).debug(f"Device type {device.mdev_type} unmatched by callout scripts in {directory}")
            raise NoMatchingScript()

        path, output = found
        return self.parse_attribute_output(device, path, output)


def invoke(device: "MDev", action: Action, force: bool, func: Callable[["MDev"], T]) -> T:
    """
    Perform ``func`` on ``device`` wrapped in the callout protocol.

    Args:
        device: Device being acted on
        action: Lifecycle action ``func`` implements
        force: Run the action even if a Pre script rejects it
        func: Applies the action; signals failure by raising

    Returns:
        Whatever ``func`` returned

    Raises:
        CalloutError: a Pre script rejected the action and force was not set
        Exception: whatever ``func`` raised
    """
    session = Callout()
    try:
        return session.run(device, action, force, func)
    finally:
        session.notify(device, action)


def get_attributes(device: "MDev") -> Any:
    """
    Ask the first claiming Get script for the device's attributes.

    Returns:
        Parsed JSON value, or None when no script provides attributes

    Raises:
        InvocationFailure: the claiming script failed
        InvalidJSON: the claiming script printed malformed JSON
    """
    for directory in device.env.callout_dirs():
        directory = Path(directory)
        if not directory.is_dir():
            continue

        session = Callout()
        try:
            return session.get_attributes_dir(device, directory)
        except NoMatchingScript:
            continue

    return None


__all__ = ['Callout', 'invoke', 'get_attributes', 'EMPTY_ATTRIBUTES']
