"""Exceptions raised on programmatic misuse of the graph API.

Pointer interaction never raises: a bad release is simply discarded.
"""


class GraphError(Exception):
    """Base class for graph editor errors."""


class UnknownNodeKindError(GraphError, KeyError):
    """Raised when a node kind name is not registered."""


class NodeNotFoundError(GraphError, ValueError):
    """Raised when a node is not part of the controller's collection."""
