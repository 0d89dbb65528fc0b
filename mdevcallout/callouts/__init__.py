"""
mdevcallout Callouts Package
============================
Script matching, the pre/post/notify sequencer and attribute queries.
"""

from .types import (
    Event,
    Action,
    CalloutState,
    ScriptContext,
    ScriptOutput,
    CalloutError,
    NoMatchingScript,
    InvocationFailure,
    InvalidJSON,
    MissingDeviceInfo,
)
from .invoke import build_context, invoke_callout_script, print_err
from .matcher import Verdict, verdict, sorted_entries, invoke_first_matching_script
from .engine import Callout, invoke, get_attributes

__all__ = [
    # Types
    'Event',
    'Action',
    'CalloutState',
    'ScriptContext',
    'ScriptOutput',

    # Errors
    'CalloutError',
    'NoMatchingScript',
    'InvocationFailure',
    'InvalidJSON',
    'MissingDeviceInfo',

    # Invocation and matching
    'build_context',
    'invoke_callout_script',
    'print_err',
    'Verdict',
    'verdict',
    'sorted_entries',
    'invoke_first_matching_script',

    # Engine
    'Callout',
    'invoke',
    'get_attributes',
]
