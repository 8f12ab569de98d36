"""Super Offer Package pricing engine and quote price synchronisation."""

__version__ = "0.1.0"
