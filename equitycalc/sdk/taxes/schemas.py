"""Pydantic schemas for the packaged rate tables.

These schemas validate config/tax_rates.yaml and provide typed access to
flat default rates, state rates, ordinary brackets and AMT parameters.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaxBracket(BaseModel):
    """Single tax bracket entry."""
    model_config = ConfigDict(extra="forbid")

    up_to: Optional[float] = Field(default=None, description="Upper bound (None if 'over' bracket)")
    over: Optional[float] = Field(default=None, description="Lower bound for top bracket")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")


class AmtExemption(BaseModel):
    """AMT exemption for one filing status."""
    model_config = ConfigDict(extra="forbid")

    exemption: float = Field(..., ge=0)
    phaseout_threshold: float = Field(..., ge=0)


class FilingStatusRules(BaseModel):
    """Ordinary brackets and AMT exemption for a filing status."""
    model_config = ConfigDict(extra="forbid")

    standard_deduction: float = Field(..., ge=0)
    tax_brackets: list[TaxBracket]
    amt: AmtExemption


class AmtRates(BaseModel):
    """AMT rate schedule shared by all filing statuses."""
    model_config = ConfigDict(extra="forbid")

    phaseout_rate: float = Field(..., ge=0, le=1, description="Exemption reduction per dollar over threshold")
    low_rate: float = Field(..., ge=0, le=1)
    high_rate: float = Field(..., ge=0, le=1)
    high_rate_threshold: float = Field(..., ge=0)


class YearRules(BaseModel):
    """Rules for one tax year."""
    model_config = ConfigDict(extra="forbid")

    single: FilingStatusRules
    mfj: FilingStatusRules
    amt_rates: AmtRates

    def for_status(self, filing_status: str) -> FilingStatusRules:
        return self.mfj if filing_status == "mfj" else self.single


class DefaultRates(BaseModel):
    """Flat rates used by simple mode."""
    model_config = ConfigDict(extra="forbid")

    federal_long_term_rate: float = Field(..., ge=0, le=1)
    federal_short_term_rate: float = Field(..., ge=0, le=1)
    state_rate: float = Field(..., ge=0, le=1)
    unknown_state_rate: float = Field(..., ge=0, le=1)


class RateTable(BaseModel):
    """Complete contents of tax_rates.yaml."""
    model_config = ConfigDict(extra="ignore")  # Allow unknown fields for forward compat

    defaults: DefaultRates
    states: Dict[str, float] = Field(default_factory=dict)
    years: Dict[int, YearRules]
