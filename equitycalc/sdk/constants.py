"""Shared enums and lookup tables for equity calculations.

Values that change by tax year (brackets, AMT parameters, state rates) live
in config/tax_rates.yaml; this module only holds the fixed vocabulary.
"""

from enum import Enum


class GrantType(str, Enum):
    """Kind of equity award."""

    ISO = "ISO"
    NSO = "NSO"
    RSU = "RSU"

    @property
    def is_option(self) -> bool:
        """True for stock options (an exercise price must be paid)."""
        return self in (GrantType.ISO, GrantType.NSO)


class VestingFrequency(str, Enum):
    """How often shares vest after the vesting start date."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def months(self) -> int:
        """Calendar months per vesting period."""
        return PERIOD_MONTHS[self]


PERIOD_MONTHS = {
    VestingFrequency.MONTHLY: 1,
    VestingFrequency.QUARTERLY: 3,
    VestingFrequency.YEARLY: 12,
}

# Flat fallback rates, used when no profile or rate table overrides them
TAX_RATES = {
    "federal_long_term": 0.20,
    "federal_short_term": 0.37,
    "state_ca": 0.13,
}

# Named exit multipliers applied to a reference share price
COMMON_SCENARIOS = [
    {"name": "IPO - Conservative", "exit_type": "IPO", "multiplier": 10},
    {"name": "IPO - Moderate", "exit_type": "IPO", "multiplier": 25},
    {"name": "IPO - Optimistic", "exit_type": "IPO", "multiplier": 50},
    {"name": "Acquisition - Conservative", "exit_type": "Acquisition", "multiplier": 5},
    {"name": "Acquisition - Moderate", "exit_type": "Acquisition", "multiplier": 15},
    {"name": "Acquisition - Optimistic", "exit_type": "Acquisition", "multiplier": 30},
]

# Look-back windows (days) for grant timeframe filters
TIMEFRAME_DAYS = {
    "month": 30,
    "quarter": 90,
    "year": 365,
}

# Holding period thresholds
LONG_TERM_HOLDING_YEARS = 1
ISO_GRANT_HOLDING_YEARS = 2
