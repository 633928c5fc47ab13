"""Pydantic schemas for grants, tax settings, scenarios and results.

Records coming from storage or forms use extra='ignore' so bookkeeping
columns (created_at, user_id, ...) pass through harmlessly. Settings and
results use extra='forbid' so typos fail loudly.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from .constants import TAX_RATES, GrantType, VestingFrequency


# =============================================================================
# Vesting source - explicit precedence between computed and patched values
# =============================================================================


class Computed(BaseModel):
    """Vested shares are derived from the grant's schedule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["computed"] = "computed"


class Overridden(BaseModel):
    """Vested shares were corrected by hand and bypass the schedule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["overridden"] = "overridden"
    value: int = Field(..., ge=0, description="Vested share count to report as-is")


VestingSource = Annotated[Union[Computed, Overridden], Field(discriminator="kind")]


# =============================================================================
# Grant
# =============================================================================


# Field names used by stored records, mapped to schema names
_GRANT_RECORD_ALIASES = {
    "shares": "total_shares",
    "vesting_schedule": "vesting_frequency",
}


class Grant(BaseModel):
    """One equity award.

    `vesting_end_date` may be given directly or derived from
    `vesting_months`. A stored record's `vested_shares` column becomes an
    `Overridden` vesting source.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(default=None, description="Record identifier")
    company_name: Optional[str] = None
    grant_type: GrantType = Field(default=GrantType.ISO)
    total_shares: Optional[int] = Field(default=None, ge=0)
    strike_price: float = Field(default=0, ge=0, description="Exercise price per share (0 for RSU)")
    current_fmv: Optional[float] = Field(
        default=None, ge=0,
        description="Fair market value per share at exercise (options) or vest (RSU)",
    )
    grant_date: Optional[date] = None
    vesting_start_date: Optional[date] = None
    vesting_end_date: Optional[date] = None
    vesting_months: Optional[int] = Field(default=None, gt=0, description="Vesting duration, alternative to end date")
    cliff_months: int = Field(default=0, ge=0)
    vesting_frequency: VestingFrequency = Field(default=VestingFrequency.MONTHLY)
    vesting: VestingSource = Field(default_factory=Computed)
    exercise_date: Optional[date] = Field(default=None, description="Date options were exercised, if already exercised")
    double_trigger: bool = Field(default=False, description="RSU also requires a liquidity event to vest")
    liquidity_event_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def _map_record_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for old, new in _GRANT_RECORD_ALIASES.items():
            if old in data and new not in data:
                data[new] = data.pop(old)
        if "vested_shares" in data:
            override = data.pop("vested_shares")
            if override is not None and "vesting" not in data:
                data["vesting"] = {"kind": "overridden", "value": override}
        if isinstance(data.get("grant_type"), str):
            data["grant_type"] = data["grant_type"].upper()
        return data

    @model_validator(mode="after")
    def _check_vesting_window(self) -> "Grant":
        end = self.vesting_end
        if self.vesting_start_date and end and end < self.vesting_start_date:
            raise ValueError(
                f"vesting end {end} is before vesting start {self.vesting_start_date}"
            )
        return self

    @property
    def shares(self) -> int:
        """Total shares, treating a missing count as zero."""
        return self.total_shares or 0

    @property
    def vesting_end(self) -> Optional[date]:
        """Explicit end date, or start date plus vesting_months."""
        if self.vesting_end_date:
            return self.vesting_end_date
        if self.vesting_start_date and self.vesting_months:
            return self.vesting_start_date + relativedelta(months=self.vesting_months)
        return None

    @property
    def cliff_date(self) -> Optional[date]:
        """First date any shares can vest."""
        if not self.vesting_start_date:
            return None
        return self.vesting_start_date + relativedelta(months=self.cliff_months)

    @property
    def effective_grant_date(self) -> Optional[date]:
        """Grant date, falling back to the vesting start date."""
        return self.grant_date or self.vesting_start_date

    @property
    def is_overridden(self) -> bool:
        return isinstance(self.vesting, Overridden)


# =============================================================================
# Tax settings and results
# =============================================================================


class HoldingPeriod(str, Enum):
    """Holding-period classification of a sale, computed once per calculation."""

    SHORT_TERM = "short_term"
    LONG_TERM_QUALIFYING = "long_term_qualifying"
    LONG_TERM_DISQUALIFYING = "long_term_disqualifying"

    @property
    def is_long_term(self) -> bool:
        return self is not HoldingPeriod.SHORT_TERM


class StateResidency(BaseModel):
    """A period of residence in one state. An open end date runs indefinitely."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    state: str = Field(..., min_length=2, max_length=2)
    start_date: date
    end_date: Optional[date] = None
    rate: Optional[float] = Field(default=None, ge=0, le=1, description="Defaults to the state rate table")

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _check_period(self) -> "StateResidency":
        if self.end_date and self.end_date < self.start_date:
            raise ValueError(f"residency end {self.end_date} is before start {self.start_date}")
        return self


class StateAllocation(BaseModel):
    """Share of equity income sourced to one state by workdays."""

    model_config = ConfigDict(extra="forbid")

    state: str
    workdays: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=1, description="Fraction of the vesting window's workdays")
    rate: float = Field(..., ge=0, le=1)
    allocated_income: float = 0.0
    state_tax: float = 0.0


class TaxSettings(BaseModel):
    """Rates and dates for one tax calculation. Immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    federal_long_term_rate: float = Field(default=TAX_RATES["federal_long_term"], ge=0, le=1)
    federal_short_term_rate: float = Field(default=TAX_RATES["federal_short_term"], ge=0, le=1)
    state_rate: float = Field(default=TAX_RATES["state_ca"], ge=0, le=1)
    state: str = Field(default="CA", description="Two-letter state of residence")
    filing_status: Literal["single", "mfj"] = "single"
    mode: Literal["simple", "comprehensive"] = Field(
        default="simple", description="'comprehensive' adds AMT"
    )
    tax_year: Optional[int] = Field(default=None, description="Rate table year (defaults to sale/exercise year)")
    other_income: float = Field(default=0, ge=0, description="Non-equity ordinary income for the year")
    prior_amt_credits: float = Field(default=0, ge=0)
    residency: List[StateResidency] = Field(
        default_factory=list,
        description="State residency periods; comprehensive mode splits the state leg by workdays",
    )
    exercise_date: Optional[date] = None
    sale_date: Optional[date] = None
    vesting_date: Optional[date] = None

    @classmethod
    def for_state(cls, state: str, **kwargs: Any) -> "TaxSettings":
        """Build settings with state_rate taken from the state rate table."""
        from .taxes.rates import get_state_rate

        code = state.upper()
        return cls(state=code, state_rate=get_state_rate(code), **kwargs)


class TaxResult(BaseModel):
    """Outcome of compute_tax for one grant."""

    model_config = ConfigDict(extra="forbid")

    grant_type: GrantType
    holding_period: HoldingPeriod
    shares: int = Field(..., ge=0)
    gross_proceeds: float = 0.0
    exercise_cost: float = 0.0
    ordinary_income: float = 0.0
    capital_gains: float = Field(default=0.0, description="Negative when the sale is at a loss")
    ordinary_income_tax: float = 0.0
    capital_gains_tax: float = 0.0
    amt: float = Field(default=0.0, description="AMT due after credits (comprehensive mode)")
    amt_preference: float = Field(default=0.0, description="ISO spread counted as AMT income")
    tax_year: Optional[int] = None
    state_allocation: List[StateAllocation] = Field(
        default_factory=list, description="Workday split of the state leg (comprehensive mode)"
    )
    total_tax: float = 0.0
    net_proceeds: float = 0.0

    @classmethod
    def zero(cls, grant_type: GrantType) -> "TaxResult":
        return cls(grant_type=grant_type, holding_period=HoldingPeriod.SHORT_TERM, shares=0)

    @property
    def effective_rate(self) -> float:
        """Total tax as a fraction of taxable income (0 when there is none)."""
        income = self.ordinary_income + max(self.capital_gains, 0.0)
        return self.total_tax / income if income > 0 else 0.0


# =============================================================================
# Scenarios
# =============================================================================


class Scenario(BaseModel):
    """A hypothetical exit applied to one or more grants."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    scenario_name: str = "Unnamed Scenario"
    exit_type: str = "Custom"
    exit_price: Optional[float] = Field(default=None, ge=0, description="Per-share exit price")
    multiplier: Optional[float] = Field(default=None, ge=0, description="Applied to reference price when exit_price is absent")
    reference_price: Optional[float] = Field(default=None, ge=0, description="Defaults to each grant's current_fmv")
    grant_ids: List[str] = Field(default_factory=list)
    shares_included: Optional[int] = Field(default=None, ge=0, description="Shares sold per grant (default: vested)")
    exit_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def _map_record_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "name" in data and "scenario_name" not in data:
            data["scenario_name"] = data.pop("name")
        if "share_price" in data and "exit_price" not in data:
            data["exit_price"] = data.pop("share_price")
        if "grant_id" in data and "grant_ids" not in data:
            grant_id = data.pop("grant_id")
            data["grant_ids"] = [grant_id] if grant_id is not None else []
        return data


class ScenarioSummary(BaseModel):
    """Totals for one scenario across its grants."""

    model_config = ConfigDict(extra="forbid")

    scenario_name: str
    exit_type: str = "Custom"
    exit_price: float = 0.0
    shares_included: int = 0
    grants_included: int = 0
    gross_proceeds: float = 0.0
    exercise_cost: float = 0.0
    tax_liability: float = 0.0
    net_proceeds: float = 0.0

    @computed_field
    @property
    def roi_percentage(self) -> float:
        """Net proceeds relative to cash paid to exercise."""
        if self.exercise_cost <= 0:
            return 0.0
        return self.net_proceeds / self.exercise_cost * 100

    @computed_field
    @property
    def effective_tax_rate(self) -> float:
        """Tax as a percentage of gross proceeds."""
        if self.gross_proceeds <= 0:
            return 0.0
        return self.tax_liability / self.gross_proceeds * 100


# =============================================================================
# Vesting outputs
# =============================================================================


class VestEvent(BaseModel):
    """A single vesting date in a grant's schedule."""

    model_config = ConfigDict(extra="forbid")

    vest_date: date
    shares: int = Field(..., ge=0, description="Shares vesting on this date")
    cumulative_shares: int = Field(..., ge=0)
    event: Literal["cliff", "vest", "final"] = "vest"


class VestingStatus(BaseModel):
    """Vesting position of a grant as of a date."""

    model_config = ConfigDict(extra="forbid")

    as_of: date
    total_shares: int
    vested_shares: int
    unvested_shares: int
    vested_percentage: float
    is_cliff_passed: bool
    is_fully_vested: bool
    source: Literal["computed", "overridden"] = "computed"
    next_vesting_date: Optional[date] = None
    next_vesting_shares: int = 0
    days_until_next_vesting: Optional[int] = None


class MonthlyVesting(BaseModel):
    """Shares vesting in one calendar month across a set of grants."""

    model_config = ConfigDict(extra="forbid")

    month: str = Field(..., description="YYYY-MM")
    shares: int = 0
    value: float = 0.0
    cumulative_shares: int = 0
    cumulative_value: float = 0.0
    details: List[dict] = Field(default_factory=list)


# =============================================================================
# Portfolio analytics
# =============================================================================


class ValueShare(BaseModel):
    """Vested value attributed to one grant type or company."""

    model_config = ConfigDict(extra="forbid")

    name: str
    value: float = 0.0
    percentage: float = Field(default=0.0, description="Share of the breakdown's total value")


class PortfolioSummary(BaseModel):
    """Share counts and vested value across a filtered set of grants."""

    model_config = ConfigDict(extra="forbid")

    as_of: date
    grants_included: int = 0
    total_shares: int = 0
    vested_shares: int = 0
    unvested_shares: int = 0
    current_value: float = Field(default=0.0, description="Vested shares at current_fmv")
    exercise_cost: float = Field(default=0.0, description="Cost to exercise every vested share")
    iso_value: float = 0.0
    rsu_value: float = 0.0
    value_by_grant_type: List[ValueShare] = Field(default_factory=list)
    value_by_company: List[ValueShare] = Field(default_factory=list)

    @computed_field
    @property
    def potential_gain(self) -> float:
        return self.current_value - self.exercise_cost

    @computed_field
    @property
    def iso_percentage(self) -> float:
        """ISO value as a percentage of ISO + RSU value."""
        combined = self.iso_value + self.rsu_value
        return self.iso_value / combined * 100 if combined > 0 else 0.0

    @computed_field
    @property
    def rsu_percentage(self) -> float:
        """RSU value as a percentage of ISO + RSU value."""
        combined = self.iso_value + self.rsu_value
        return self.rsu_value / combined * 100 if combined > 0 else 0.0


def as_grant(value: Any) -> Optional[Grant]:
    """Accept a Grant, a stored record mapping, or None."""
    if value is None or isinstance(value, Grant):
        return value
    return Grant.model_validate(value)


# =============================================================================
# Portfolio file
# =============================================================================


class Portfolio(BaseModel):
    """Grants, scenarios and tax overrides loaded from a portfolio YAML file."""

    model_config = ConfigDict(extra="forbid")

    grants: List[Grant] = Field(default_factory=list)
    scenarios: List[Scenario] = Field(default_factory=list)
    tax: dict = Field(default_factory=dict, description="TaxSettings fields overriding the profile")

    def get_grant(self, grant_id: str) -> Optional[Grant]:
        return next((g for g in self.grants if g.id == grant_id), None)

    @property
    def companies(self) -> List[str]:
        """Distinct company names in file order."""
        seen = []
        for grant in self.grants:
            if grant.company_name and grant.company_name not in seen:
                seen.append(grant.company_name)
        return seen
