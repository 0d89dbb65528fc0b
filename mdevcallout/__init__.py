"""mdevcallout - callout script orchestration for mediated device lifecycle actions"""

__version__ = "1.0.0"

from .callouts import Action, CalloutError, Event, get_attributes, invoke
from .device import Environment, MDev

__all__ = ["Action", "CalloutError", "Event", "Environment", "MDev", "get_attributes", "invoke"]
