"""Savings projection and tax-aware withdrawal planning."""

__version__ = "0.1.0"
