"""Monthly billing engine for tracked time.

Turns timesheet entries and per-project billing configuration into a
company -> project -> task billing tree with per-task rounding, monthly
minimum and maximum hours, and carryover of excess hours.
"""

__version__ = "1.0.0"
