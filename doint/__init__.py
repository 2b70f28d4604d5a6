"""A community currency economy: a bank with taxes and UBI, transfers, jail, robberies and admin commands."""

__version__ = "0.1.0"