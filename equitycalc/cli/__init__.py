"""Equity Calc command-line interface."""
