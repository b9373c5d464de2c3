"""Utility functions for kharcha."""

from kharcha.utils.date_parser import parse_date, coerce_date
from kharcha.utils.amount_parser import parse_amount

__all__ = ["parse_date", "coerce_date", "parse_amount"]
