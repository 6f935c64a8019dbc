"""Utility helpers used across the project.

Exports:
- board geometry: `flattened_to_xy`, `xy_to_flattened`, `adjust_position`, `step`
- time helpers: `now_utc`, `seconds_from`, `to_iso`, `parse_iso`
- validation helpers: `is_valid_name`, `is_valid_id`, `is_valid_colour`
"""

from .board import flattened_to_xy, xy_to_flattened, adjust_position, step
from .time import now_utc, seconds_from, to_iso, parse_iso
from .validation import is_valid_name, is_valid_id, is_valid_colour, VALID_NAME_RE

__all__ = [
    "flattened_to_xy",
    "xy_to_flattened",
    "adjust_position",
    "step",
    "now_utc",
    "seconds_from",
    "to_iso",
    "parse_iso",
    "is_valid_name",
    "is_valid_id",
    "is_valid_colour",
    "VALID_NAME_RE",
]
