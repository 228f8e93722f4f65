"""
Policy guards applied to treasury transactions.
"""

from .guards import (
    guard_source_account,
    guard_fee,
    has_time_window,
    guard_time_window,
    guard_sequence,
)

__all__ = [
    "guard_source_account",
    "guard_fee",
    "has_time_window",
    "guard_time_window",
    "guard_sequence",
]
