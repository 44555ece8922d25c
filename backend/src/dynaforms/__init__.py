"""dynaforms: declarative form configuration and server-side validation."""

__version__ = "0.1.0"
