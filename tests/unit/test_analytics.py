"""Unit tests for portfolio analytics."""

from datetime import date

import pytest

from equitycalc.sdk import InvalidInputError, OutOfRangeError, portfolio_summary

AS_OF = date(2021, 1, 1)


@pytest.fixture
def grants(grant_record):
    """ISO and NSO at Acme, RSU at Globex; 300 of 1,200 shares vested each on AS_OF."""
    return [
        grant_record(),
        grant_record(id="r1", company_name="Globex", grant_type="RSU", strike_price=0.0,
                     current_fmv=10.0, cliff_months=0),
        grant_record(id="n1", grant_type="NSO", current_fmv=2.0),
    ]


class TestPortfolioSummary:
    """Totals and breakdowns across grants."""

    def test_totals(self, grants):
        result = portfolio_summary(grants, as_of=AS_OF)

        assert result.grants_included == 3
        assert result.total_shares == 3600
        assert result.vested_shares == 900
        assert result.unvested_shares == 2700
        assert result.current_value == pytest.approx(5100)
        assert result.exercise_cost == pytest.approx(600)
        assert result.potential_gain == pytest.approx(4500)

    def test_value_by_grant_type_sorted_highest_first(self, grants):
        result = portfolio_summary(grants, as_of=AS_OF)

        assert [(v.name, v.value) for v in result.value_by_grant_type] == [
            ("RSU", pytest.approx(3000)), ("ISO", pytest.approx(1500)), ("NSO", pytest.approx(600)),
        ]
        assert sum(v.percentage for v in result.value_by_grant_type) == pytest.approx(100)

    def test_value_by_company(self, grants):
        result = portfolio_summary(grants, as_of=AS_OF)

        assert [(v.name, v.value) for v in result.value_by_company] == [
            ("Globex", pytest.approx(3000)), ("Acme", pytest.approx(2100)),
        ]

    def test_iso_rsu_split_ignores_nso(self, grants):
        result = portfolio_summary(grants, as_of=AS_OF)

        assert result.iso_value == pytest.approx(1500)
        assert result.rsu_value == pytest.approx(3000)
        assert result.iso_percentage == pytest.approx(100 / 3)
        assert result.rsu_percentage == pytest.approx(200 / 3)

    def test_grant_without_company_left_out_of_company_breakdown(self, grant_record):
        result = portfolio_summary([grant_record(company_name=None)], as_of=AS_OF)

        assert result.current_value == pytest.approx(1500)
        assert result.value_by_company == []

    def test_vested_override_honoured(self, grant_record):
        result = portfolio_summary([grant_record(vested_shares=500)], as_of=AS_OF)

        assert result.vested_shares == 500
        assert result.unvested_shares == 700
        assert result.current_value == pytest.approx(2500)

    def test_override_above_total_raises(self, grant_record):
        with pytest.raises(OutOfRangeError):
            portfolio_summary([grant_record(vested_shares=5000)], as_of=AS_OF)


class TestPortfolioSummaryFilters:
    """Company and timeframe filters match scenario aggregation."""

    def test_company_filter(self, grants):
        result = portfolio_summary(grants, company="Acme", as_of=AS_OF)

        assert result.grants_included == 2
        assert result.current_value == pytest.approx(2100)
        assert result.rsu_percentage == 0

    def test_timeframe_excludes_older_grants(self, grants):
        result = portfolio_summary(grants, timeframe="month", as_of=AS_OF)

        assert result.grants_included == 0
        assert result.total_shares == 0

    def test_empty_portfolio(self):
        result = portfolio_summary([], as_of=AS_OF)

        assert result.grants_included == 0
        assert result.current_value == 0
        assert result.potential_gain == 0
        assert result.iso_percentage == 0
        assert result.value_by_grant_type == []

    def test_unknown_timeframe(self, grants):
        with pytest.raises(InvalidInputError, match="Unknown timeframe"):
            portfolio_summary(grants, timeframe="decade", as_of=AS_OF)
