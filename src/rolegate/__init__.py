"""rolegate - role and permission authorization engine."""

__version__ = "0.1.0"
