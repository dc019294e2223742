"""Group-chat bridge with message routing and a quiz answer engine."""

__version__ = "0.1.0"
