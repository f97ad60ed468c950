"""Switch MAC address-table collector."""

__version__ = "0.1.0"
