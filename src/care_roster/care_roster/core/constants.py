"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

# Derived hour figures keep six fractional digits (sub-second precision).
HOURS_QUANTUM = Decimal("0.000001")
MONEY_DISPLAY_QUANTUM = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)

DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_WEEKLY_HOURS_THRESHOLD = Decimal("40")

DEFAULT_LIST_LIMIT = 200
