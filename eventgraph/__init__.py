"""EventGraph - a node-link editor for authoring chains of event nodes."""

__version__ = "0.1.0"
