"""Unit tests for scenario aggregation and filtering."""

from datetime import date

import pytest

from equitycalc.sdk import (
    COMMON_SCENARIOS,
    InvalidInputError,
    Scenario,
    ScenarioSummary,
    TaxSettings,
    aggregate_scenarios,
    build_common_scenarios,
    filter_grants,
    rank_scenarios,
)


def ipo(**overrides) -> dict:
    scenario = {
        "scenario_name": "IPO",
        "exit_type": "IPO",
        "exit_price": 30,
        "grant_ids": ["g1"],
        "shares_included": 1000,
    }
    scenario.update(overrides)
    return scenario


def assert_zeroed(summary: ScenarioSummary):
    assert summary.grants_included == 0
    assert summary.shares_included == 0
    assert summary.gross_proceeds == 0
    assert summary.exercise_cost == 0
    assert summary.tax_liability == 0
    assert summary.net_proceeds == 0


class TestAggregateScenarios:
    """One summary per scenario."""

    def test_single_grant_totals(self, grant_record):
        [summary] = aggregate_scenarios([ipo()], [grant_record()])

        assert summary.scenario_name == "IPO"
        assert summary.exit_price == 30
        assert summary.shares_included == 1000
        assert summary.grants_included == 1
        assert summary.gross_proceeds == pytest.approx(30000)
        assert summary.exercise_cost == pytest.approx(1000)
        assert summary.tax_liability == pytest.approx(14500)
        assert summary.net_proceeds == pytest.approx(14500)
        assert summary.roi_percentage == pytest.approx(1450)
        assert summary.effective_tax_rate == pytest.approx(48.3333, rel=1e-4)

    def test_net_identity_across_grants(self, grant_record):
        grants = [
            grant_record(),
            grant_record(id="g2", grant_type="NSO", strike_price=0.5, current_fmv=3.0),
            grant_record(id="r1", grant_type="RSU", strike_price=0, current_fmv=8.0),
        ]
        scenarios = [
            ipo(grant_ids=["g1", "g2", "r1"]),
            ipo(scenario_name="Down round", exit_price=0.75, grant_ids=["g1", "g2", "r1"]),
        ]

        for summary in aggregate_scenarios(scenarios, grants, TaxSettings(sale_date=date(2024, 6, 1))):
            assert summary.grants_included == 3
            assert summary.net_proceeds == pytest.approx(
                summary.gross_proceeds - summary.exercise_cost - summary.tax_liability
            )

    def test_record_field_names(self, grant_record):
        """Stored scenario records use name / share_price / grant_id."""
        scenario = {"name": "Legacy", "share_price": 30, "grant_id": "g1", "shares_included": 1000}
        [summary] = aggregate_scenarios([scenario], [grant_record()])
        assert summary.scenario_name == "Legacy"
        assert summary.gross_proceeds == pytest.approx(30000)

    def test_order_preserved_and_none_skipped(self, grant_record):
        scenarios = [ipo(scenario_name="B"), None, ipo(scenario_name="A"), Scenario(scenario_name="C", exit_price=1, grant_ids=["g1"])]
        summaries = aggregate_scenarios(scenarios, [grant_record()])
        assert [s.scenario_name for s in summaries] == ["B", "A", "C"]

    def test_missing_grant_gives_zeroed_summary(self, grant_record):
        [summary] = aggregate_scenarios([ipo(grant_ids=["nope"])], [grant_record()])
        assert_zeroed(summary)
        assert summary.roi_percentage == 0
        assert summary.effective_tax_rate == 0

    def test_no_grants_at_all(self):
        [summary] = aggregate_scenarios([ipo()], [])
        assert_zeroed(summary)

    def test_empty_grant_ids_applies_to_all_grants(self, grant_record):
        grants = [grant_record(), grant_record(id="g2")]
        [summary] = aggregate_scenarios([ipo(grant_ids=[])], grants)
        assert summary.grants_included == 2
        assert summary.shares_included == 2000

    def test_shares_default_to_total(self, grant_record):
        [summary] = aggregate_scenarios([ipo(shares_included=None)], [grant_record()])
        assert summary.shares_included == 1200

    def test_shares_vested_at_exit_date(self, grant_record):
        scenario = ipo(shares_included=None, exit_date=date(2021, 1, 1))
        [summary] = aggregate_scenarios([scenario], [grant_record()])
        assert summary.shares_included == 300

    def test_exit_date_sets_sale_date(self, grant_record):
        """A qualifying exit date turns the gain into long-term capital gain."""
        grant = grant_record(exercise_date=date(2020, 6, 1))
        short = aggregate_scenarios([ipo()], [grant])[0]
        long = aggregate_scenarios([ipo(exit_date=date(2023, 1, 1))], [grant])[0]
        assert long.tax_liability < short.tax_liability
        assert long.tax_liability == pytest.approx(29000 * 0.33)


class TestExitPriceResolution:
    """Explicit price or multiplier x reference."""

    def test_multiplier_uses_grant_fmv(self, grant_record):
        scenario = ipo(exit_price=None, multiplier=10, shares_included=100)
        [summary] = aggregate_scenarios([scenario], [grant_record()])
        assert summary.exit_price == pytest.approx(50)
        assert summary.gross_proceeds == pytest.approx(5000)

    def test_multiplier_uses_reference_price(self, grant_record):
        scenario = ipo(exit_price=None, multiplier=10, reference_price=2, shares_included=100)
        [summary] = aggregate_scenarios([scenario], [grant_record()])
        assert summary.gross_proceeds == pytest.approx(2000)

    def test_no_price_raises(self, grant_record):
        with pytest.raises(InvalidInputError):
            aggregate_scenarios([ipo(exit_price=None)], [grant_record()])

    def test_multiplier_without_reference_raises(self, grant_record):
        scenario = ipo(exit_price=None, multiplier=10)
        with pytest.raises(InvalidInputError):
            aggregate_scenarios([scenario], [grant_record(current_fmv=None)])


class TestFilters:
    """Company and timeframe filters applied before aggregation."""

    def test_company_filter(self, grant_record):
        grants = [grant_record(), grant_record(id="g2", company_name="Globex")]
        assert [g.id for g in filter_grants(grants, company="Globex")] == ["g2"]
        assert len(filter_grants(grants, company="all")) == 2
        assert len(filter_grants(grants)) == 2

    def test_filtered_out_company_gives_zeroed_summary(self, grant_record):
        [summary] = aggregate_scenarios([ipo()], [grant_record()], company="Globex")
        assert_zeroed(summary)

    @pytest.mark.parametrize("timeframe,as_of,included", [
        ("month", date(2020, 1, 20), True),
        ("month", date(2020, 3, 1), False),
        ("quarter", date(2020, 3, 1), True),
        ("year", date(2021, 6, 1), False),
        ("all", date(2030, 1, 1), True),
    ])
    def test_timeframe(self, grant_record, timeframe, as_of, included):
        grants = filter_grants([grant_record()], timeframe=timeframe, as_of=as_of)
        assert bool(grants) is included

    def test_timeframe_falls_back_to_vesting_start(self, grant_record):
        grant = grant_record(grant_date=None, vesting_start_date=date(2020, 1, 10))
        assert filter_grants([grant], timeframe="month", as_of=date(2020, 1, 20))

    def test_unknown_timeframe(self, grant_record):
        with pytest.raises(InvalidInputError):
            filter_grants([grant_record()], timeframe="decade")


class TestCommonScenarios:
    """Preset multiplier scenarios and ranking."""

    def test_build_common(self):
        scenarios = build_common_scenarios(reference_price=2.0, grant_ids=["g1"])
        assert len(scenarios) == len(COMMON_SCENARIOS)
        assert [s.multiplier for s in scenarios] == [10, 25, 50, 5, 15, 30]
        assert all(s.reference_price == 2.0 and s.grant_ids == ["g1"] for s in scenarios)

    def test_rank_by_net_proceeds(self, grant_record):
        summaries = aggregate_scenarios(
            build_common_scenarios(reference_price=2.0), [grant_record()]
        )
        ranked = rank_scenarios(summaries)
        assert ranked[0].scenario_name == "IPO - Optimistic"
        assert ranked[-1].scenario_name == "Acquisition - Conservative"
        assert [s.net_proceeds for s in ranked] == sorted((s.net_proceeds for s in summaries), reverse=True)


class TestScenarioAmt:
    """Comprehensive mode computes AMT once per scenario."""

    def test_prior_credit_used_once_across_grants(self, grant_record):
        grants = [
            grant_record(id=gid, grant_type="NSO", total_shares=5000, strike_price=1.0, current_fmv=10.0)
            for gid in ("n1", "n2")
        ]
        scenario = ipo(exit_price=10, grant_ids=["n1", "n2"], shares_included=None)
        settings = TaxSettings(
            mode="comprehensive", tax_year=2024, other_income=300000, prior_amt_credits=5000,
            state="TX", state_rate=0.0,
        )
        flat = aggregate_scenarios([scenario], grants, settings.model_copy(update={"mode": "simple"}))[0]

        [summary] = aggregate_scenarios([scenario], grants, settings)

        assert flat.tax_liability == pytest.approx(90000 * 0.37)
        assert flat.tax_liability - summary.tax_liability == pytest.approx(5000)
        assert summary.net_proceeds == pytest.approx(
            summary.gross_proceeds - summary.exercise_cost - summary.tax_liability
        )

    def test_split_grant_owes_same_amt_as_single_grant(self, grant_record):
        """Exemption and the low AMT tier count once, however the shares are split."""
        settings = TaxSettings(
            mode="comprehensive", tax_year=2024, sale_date=date(2023, 6, 1), state="TX", state_rate=0.0,
        )
        common = {"total_shares": 10000, "current_fmv": 101.0, "exercise_date": date(2022, 1, 1)}
        split = [grant_record(id="a", **common), grant_record(id="b", **common)]
        single = [grant_record(id="a", **{**common, "total_shares": 20000})]
        scenario = ipo(exit_price=120, grant_ids=["a", "b"], shares_included=None)

        [split_summary] = aggregate_scenarios([scenario], split, settings)
        [single_summary] = aggregate_scenarios([scenario], single, settings)

        assert split_summary.shares_included == single_summary.shares_included == 20000
        assert split_summary.tax_liability == pytest.approx(single_summary.tax_liability)
        assert split_summary.tax_liability > split_summary.gross_proceeds * 0.2

    def test_duplicate_grant_ids_rejected(self, grant_record):
        with pytest.raises(InvalidInputError, match="Duplicate grant id 'g1'"):
            aggregate_scenarios([ipo()], [grant_record(), grant_record()])
