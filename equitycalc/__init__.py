"""Equity Calc - vesting, exercise cost, tax and exit scenario calculations."""

__version__ = "0.3.0"
