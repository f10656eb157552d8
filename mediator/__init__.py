"""
# Channel Mediator

Herein is the mediator itself: an in-process publish/subscribe registry whose
channels form a tree. Channel paths are split on a delimiter (':' by default),
so 'app:user:login' lives beneath 'app:user', which lives beneath 'app'.

Subscribers are registered at an exact channel. trigger() runs only the
subscribers of that exact channel, while broadcast() runs the channel's
subscribers and then those of every nested channel beneath it, parents before
children.

Every mediator owns its own tree. Nothing is shared between instances.
"""

import json
import logging
from types import MappingProxyType
from typing import Any
from typing import Callable
from typing import Iterator
from typing import Mapping
from typing import Optional

from mediator import handlers
from mediator import namespaces
from mediator import subscriber


version_major = 1
version_minor = 0
version_patch = 0
__version__ = f"{version_major}.{version_minor}.{version_patch}"

logger = logging.getLogger(__name__)


# -----Exceptions--------------------------------------------------------------
class ChannelNotFoundError(LookupError):
    """Raised when dispatching to a channel that has never been registered."""

    def __init__(self, channel: str) -> None:
        super().__init__(f"The channel '{channel}' does not exist!")
        self.channel = channel


# -----------------------------------------------------------------------------


class Mediator(object):
    """
    Primary channel coordinator.
    Supports hierarchical channels through delimiter notation, e.g. 'a:b:c'.

    To manage subscribers use on() and off(), or decorate with subscribe().
    Use trigger() to run the subscribers of one exact channel.
    Use broadcast() to run a channel and everything nested beneath it.

    Every mutator and dispatcher returns the mediator so calls can be chained:

        >>> m = Mediator()
        >>> _ = m.on('app:start', print).trigger('app:start', 'go')
        go
    """

    # ---Exceptions---
    ChannelNotFoundError = ChannelNotFoundError

    # ---Modules---
    handlers = handlers
    namespaces = namespaces
    subscriber = subscriber

    def __init__(self, delimiter: Optional[str] = None) -> None:
        """
        Args:
            delimiter (Optional[str]): Separator between channel segments.
                Empty or None falls back to ':'. Fixed for the life of the
                mediator.
        """
        self._delimiter: str = delimiter or namespaces.DEFAULT_DELIMITER
        self._roots: dict[str, namespaces.NamespaceNode] = {}

    @property
    def delimiter(self) -> str:
        """The separator used to split channel paths into segments."""
        return self._delimiter

    # -----Path Resolution-----------------------------------------------------

    def _namespace(self, channel: str) -> namespaces.NamespaceNode:
        """
        Walk the tree down the channel's segments, creating any missing node
        along the way, and return the node at the end of the path.
        """
        current = self._roots
        node = None
        for segment in namespaces.split_channel(channel, self._delimiter):
            node = current.get(segment)
            if node is None:
                node = namespaces.NamespaceNode()
                current[segment] = node
                logger.debug(f"Created namespace '{segment}' for '{channel}'")
            current = node.children

        return node

    def _find(self, channel: str) -> Optional[namespaces.NamespaceNode]:
        """
        Walk the tree down the channel's segments without creating anything.
        Returns None the moment a segment is missing, or for an empty channel.
        """
        current = self._roots
        node = None
        for segment in namespaces.split_channel(channel, self._delimiter):
            node = current.get(segment)
            if node is None:
                return None
            current = node.children

        return node

    # -----Subscriber Management-----------------------------------------------

    def on(
        self, channel: str, callback: subscriber.CALLBACK, context: Any = None
    ) -> "Mediator":
        """
        Register a callback to a channel.

        Args:
            channel (str): Channel path (e.g., 'app:user:login'). An empty
                channel is ignored.
            callback (Callable): Function to call when the channel is
                dispatched. Duplicates are kept and run once per registration.
            context (Any): Optional receiver. When given, the callback is
                called as callback(context, data).
        Returns:
            Mediator: This mediator, for chaining.
        """
        if not channel:
            logger.debug("Ignoring registration on an empty channel")
            return self

        segments = namespaces.split_channel(channel, self._delimiter)
        if "" in segments:
            logger.warning(
                f"Channel '{channel}' contains empty segments for delimiter "
                f"'{self._delimiter}'; they are registered as-is."
            )

        node = self._namespace(channel)
        node.handlers.append(subscriber.Subscriber(callback=callback, context=context))
        logger.debug(
            f"Registered {handlers.get_callable_name(callback)} to '{channel}'"
        )

        return self

    def subscribe(
        self, channel: str, context: Any = None
    ) -> Callable[[subscriber.CALLBACK], subscriber.CALLBACK]:
        """
        Decorator to register a function as a subscriber of a channel.

        Args:
            channel (str): The channel to subscribe to.
            context (Any): Optional receiver bound when the function runs.
        """

        def decorator(func: subscriber.CALLBACK) -> subscriber.CALLBACK:
            self.on(channel, func, context)
            return func

        return decorator

    def off(self, channel: str, with_nested: bool = False) -> "Mediator":
        """
        Remove every subscriber from a channel.

        The channel itself survives and still exists for has(). Removing from
        a channel that does not exist does nothing.

        Args:
            channel (str): The channel to clear.
            with_nested (bool): Also discard every channel nested beneath it.
        Returns:
            Mediator: This mediator, for chaining.
        """
        node = self._find(channel)
        if node is None:
            return self

        node.handlers = []
        if with_nested:
            node.children = {}

        logger.debug(f"Removed subscribers from '{channel}' (nested={with_nested})")
        return self

    # -----Dispatching---------------------------------------------------------

    def _run_subscribers(
        self, subscribers: list[subscriber.Subscriber], channel: str, data: Any
    ) -> None:
        """Run subscribers in registration order, stopping at the first error."""
        for sub in list(subscribers):
            try:
                sub.invoke(data)
            except Exception as e:
                handlers.log_subscriber_exception(sub, channel, e)
                raise

    def _run_subscribers_nested(
        self, node: namespaces.NamespaceNode, channel: str, data: Any
    ) -> None:
        """
        Run a node's subscribers, then those of every node beneath it,
        pre-order. Walks with an explicit stack so channel depth is not bound
        by the interpreter's recursion limit.
        """
        stack = [(node, channel)]
        while stack:
            current, current_channel = stack.pop()
            self._run_subscribers(current.handlers, current_channel, data)

            # Children are read after the node's own subscribers ran, so
            # channels nested by those subscribers are still visited.
            for segment, child in reversed(list(current.children.items())):
                child_channel = namespaces.join_channel(
                    [current_channel, segment], self._delimiter
                )
                stack.append((child, child_channel))

    def trigger(self, channel: str, data: Any = None) -> "Mediator":
        """
        Run the subscribers of exactly one channel.

        Subscribers of parent or nested channels are not called.

        Args:
            channel (str): The channel to dispatch.
            data (Any): The payload handed to each subscriber.
        Returns:
            Mediator: This mediator, for chaining.
        Raises:
            ChannelNotFoundError: If the channel does not exist.
        """
        node = self._find(channel)
        if node is None:
            raise ChannelNotFoundError(channel)

        logger.debug(f"Triggering '{channel}' ({len(node.handlers)} subscribers)")
        self._run_subscribers(node.handlers, channel, data)
        return self

    def broadcast(self, channel: str, data: Any = None) -> "Mediator":
        """
        Run the subscribers of a channel and of every channel nested beneath
        it, pre-order. A channel's subscribers always run before those of its
        children. Sibling channels run in the order they were created.

        Args:
            channel (str): The root channel of the broadcast.
            data (Any): The payload handed to each subscriber.
        Returns:
            Mediator: This mediator, for chaining.
        Raises:
            ChannelNotFoundError: If the channel does not exist.
        """
        node = self._find(channel)
        if node is None:
            raise ChannelNotFoundError(channel)

        logger.debug(f"Broadcasting '{channel}'")
        self._run_subscribers_nested(node, channel, data)
        return self

    # -----Registry State------------------------------------------------------

    def has(self, channel: str) -> bool:
        """Check if a channel exists. The empty channel never does."""
        return self._find(channel) is not None

    def clean(self) -> "Mediator":
        """Discard every channel and subscriber."""
        self._roots = {}
        logger.debug("Cleaned all channels")
        return self

    # -----Introspection API---------------------------------------------------

    def _walk(self) -> Iterator[tuple[str, namespaces.NamespaceNode]]:
        """Yield (channel, node) for every node in the tree, pre-order."""
        stack = [(segment, node) for segment, node in self._roots.items()]
        stack.reverse()
        while stack:
            channel, node = stack.pop()
            yield channel, node

            for segment, child in reversed(list(node.children.items())):
                stack.append(
                    (namespaces.join_channel([channel, segment], self._delimiter), child)
                )

    def get_channels(self) -> list[str]:
        """Get every existing channel, parents before their nested channels."""
        return [channel for channel, _ in self._walk()]

    def get_subscribers(self, channel: str) -> list[subscriber.Subscriber]:
        """
        Get the subscribers registered at exactly a channel.

        Args:
            channel (str): Channel to get subscribers for.
        Returns:
            list[subscriber.Subscriber]: A copy of the channel's subscribers,
                empty if the channel does not exist.
        """
        node = self._find(channel)
        if node is None:
            return []

        return list(node.handlers)

    def get_subscriber_count(self, channel: str) -> int:
        """Get the number of subscribers registered at exactly a channel."""
        return len(self.get_subscribers(channel))

    def is_subscribed(self, callback: subscriber.CALLBACK, channel: str) -> bool:
        """
        Check if a specific callback is registered at a channel.

        Args:
            callback (Callable): The callback function to check.
            channel (str): The channel to check.

        Returns:
            bool: True if callback is registered at channel, False otherwise.
        """
        for sub in self.get_subscribers(channel):
            if sub.callback == callback:
                return True

        return False

    def get_subscriptions(self, callback: subscriber.CALLBACK) -> list[str]:
        """
        Get all channels that a callback is registered at.

        Args:
            callback (Callable): The callback to find subscriptions for.
        Returns:
            list[str]: Channel paths, parents before nested channels.
        Example:
            >>> m = Mediator()
            >>> def my_handler(data): pass
            >>> _ = m.on('test:one', my_handler).on('test:two', my_handler)
            >>> m.get_subscriptions(my_handler)
            ['test:one', 'test:two']
        """
        subscriptions = []
        for channel, node in self._walk():
            for sub in node.handlers:
                if sub.callback == callback:
                    subscriptions.append(channel)
                    break

        return subscriptions

    @staticmethod
    def _get_callback_info(sub: subscriber.Subscriber) -> str:
        """Returns metadata on a subscriber as a string."""
        info = handlers.get_callable_name(sub.callback)
        if sub.context is not None:
            info += f" [context={sub.context.__class__.__name__}]"

        return info

    def to_dict(self) -> dict:
        """Convert the channel tree to a nested dictionary."""
        data = {}
        stack = [(segment, node, data) for segment, node in self._roots.items()]
        stack.reverse()
        while stack:
            segment, node, parent = stack.pop()
            nested = {}
            parent[segment] = {
                "handlers": [self._get_callback_info(sub) for sub in node.handlers],
                "nested": nested,
            }

            for child_segment, child in reversed(list(node.children.items())):
                stack.append((child_segment, child, nested))

        return data

    def to_string(self) -> str:
        """Returns a string representation of the channel tree."""
        return json.dumps(self.to_dict(), indent=4)

    def get_storage(self) -> Mapping[str, namespaces.NamespaceNode]:
        """
        Returns a view of the root channels. Only for debugging.

        Only the root mapping is read-only. The NamespaceNode objects it holds
        are the live nodes of the tree, so changing them changes the mediator.
        The view goes stale once clean() is called.
        """
        return MappingProxyType(self._roots)
