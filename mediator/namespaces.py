"""
Namespace tree data structures for the mediator.

Defines the NamespaceNode dataclass that represents one segment of a channel
path in the mediator's registry. Each node owns the subscribers registered at
exactly its path and the mapping to its immediate child segments, so the
registry as a whole is a forest keyed by top-level segment.

A node exists in the registry once any channel reaching it has been
registered, and stays until it is pruned or the registry is cleaned, even if
its subscribers are removed.
"""

from dataclasses import dataclass
from dataclasses import field

from mediator import subscriber


DEFAULT_DELIMITER = ":"


@dataclass
class NamespaceNode(object):
    """A single segment in the channel tree."""

    handlers: list[subscriber.Subscriber] = field(default_factory=list)
    """Subscribers registered at exactly this path, in registration order."""

    children: dict[str, "NamespaceNode"] = field(default_factory=dict)
    """Immediate child segments, in the order they were first created."""


def split_channel(channel: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """
    Split a channel path into its segments.

    Args:
        channel (str): The channel path (e.g., 'app:user:login').
        delimiter (str): The segment separator.
    Returns:
        list[str]: Ordered segments, or an empty list for an empty channel.
    """
    if not channel:
        return []

    return channel.split(delimiter)


def join_channel(segments: list[str], delimiter: str = DEFAULT_DELIMITER) -> str:
    """Join segments back into a channel path."""
    return delimiter.join(segments)
