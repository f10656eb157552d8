"""
Exception logging utilities for the mediator.

The mediator never isolates failing subscribers: an exception raised by a
callback aborts the rest of the dispatch and propagates to the caller of
trigger() or broadcast(). The helpers here only record the failure in the
log before it is re-raised.
"""

import logging
from typing import Callable

from mediator import subscriber


logger = logging.getLogger(__name__)


def get_callable_name(callable_: Callable) -> str:
    """
    Returns the name of the callable, using class name for items with __self__,
    module and __qualname__ for plain functions, or str(callback) if neither
    are found.
    """
    if hasattr(callable_, "__self__") and hasattr(callable_, "__name__"):
        return f"{callable_.__self__.__class__.__name__}.{callable_.__name__}"
    elif hasattr(callable_, "__qualname__"):
        # Regular function, static method, or class method
        module = getattr(callable_, "__module__", "<unknown>")
        return f"{module}.{callable_.__qualname__}"
    else:
        # Fallback for unusual callables
        return str(callable_)


def log_subscriber_exception(
    sub: subscriber.Subscriber, channel: str, exception: Exception
) -> None:
    """Log a subscriber that raised during dispatch. The caller re-raises."""
    logger.error(
        f"Exception in mediator subscriber:\n"
        f"  Channel:   {channel}\n"
        f"  Callback:  {get_callable_name(sub.callback)}\n"
        f"  Exception: {exception.__class__.__name__}: {exception}",
        exc_info=True,
    )
