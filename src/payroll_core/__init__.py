"""Payroll period and record computation engine."""

__version__ = "1.0.0"
