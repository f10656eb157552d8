"""
Subscriber data structures and type definitions for the mediator.

Defines the Subscriber dataclass which pairs a callback function with the
context it should be bound to when a channel is dispatched. Also defines the
CALLBACK type alias used throughout the mediator for type hints.
"""

from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Optional

CALLBACK = Callable[..., Any]
"""
The callback end point that channel data is forwarded to. These are the
actions that 'subscribe' and will execute when a channel is triggered.

The mediator discards return values. If you want data back, trigger a channel
going the opposite direction.
"""


@dataclass(frozen=True)
class Subscriber(object):
    """A callback registered at a channel, with its optional bound context."""

    callback: CALLBACK
    """The end point that data is forwarded to. i.e. what gets ran."""

    context: Optional[Any] = None
    """
    The receiver the callback is bound to when invoked.
    When set, the callback is called as callback(context, data), the way an
    unbound method receives its instance.
    """

    def invoke(self, data: Any = None) -> None:
        """Run the callback with the payload, binding the context if any."""
        if self.context is None:
            self.callback(data)
        else:
            self.callback(self.context, data)
