"""Tests for LL97 compliance evaluation before and after retrofits."""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).parent.parent))

from src.analysis.compliance import (
    calculate_compliance_status,
    calculate_post_retrofit_compliance,
    combined_emissions_reduction,
)
from src.modeling.analysis_schema import BuildingInfo, PenaltyByEra, RetrofitAnalysis
from src.modeling.ranges import Range
from src.modeling.reference_data import default_reference_data

PENALTY_RATE = 268


def _office(square_footage=100_000, building_type='office'):
    return BuildingInfo(
        address='1 Test Plaza',
        square_footage=square_footage,
        building_type=building_type,
        year_built=1970,
    )


def _analysis(reduction: Range) -> RetrofitAnalysis:
    zero = Range(0.0, 0.0)
    return RetrofitAnalysis(
        retrofit_id='test',
        retrofit_name='Test',
        estimated_cost=zero,
        annual_energy_savings=zero,
        annual_emissions_reduction=reduction,
        payback_period=zero,
        penalty_avoidance=PenaltyByEra(0.0, 0.0, 0.0),
    )


def test_office_scenario_2024_compliant():
    status = calculate_compliance_status(_office(), 553.5)

    assert status.emissions_intensity == pytest.approx(0.005535)
    assert status.threshold_2024 == pytest.approx(0.00846)
    assert status.compliant_2024 is True
    assert status.annual_penalty_2024 == 0


def test_office_scenario_later_eras_penalised():
    status = calculate_compliance_status(_office(), 553.5)

    assert status.compliant_2030 is False
    assert status.annual_penalty_2030 == pytest.approx((553.5 - 453.0) * PENALTY_RATE)
    assert status.compliant_2035 is False
    assert status.annual_penalty_2035 == pytest.approx((553.5 - 298.0) * PENALTY_RATE)


@pytest.mark.parametrize('emissions', [0.0, 100.0, 553.5, 2_000.0, 5_000.0])
@pytest.mark.parametrize('building_type', ['office', 'warehouse', 'healthcare', 'mixed-use'])
def test_compliance_flag_matches_zero_penalty(emissions, building_type):
    status = calculate_compliance_status(_office(building_type=building_type), emissions)

    for era in ('2024', '2030', '2035'):
        compliant = getattr(status, f'compliant_{era}')
        penalty = getattr(status, f'annual_penalty_{era}')
        assert compliant == (penalty == 0)


def test_intensity_is_exact_quotient():
    status = calculate_compliance_status(_office(square_footage=37_000), 123.4)
    assert status.emissions_intensity == 123.4 / 37_000


def test_unknown_building_type_uses_zero_thresholds():
    status = calculate_compliance_status(_office(building_type='castle'), 553.5)

    assert (status.threshold_2024, status.threshold_2030, status.threshold_2035) == (0, 0, 0)
    assert not any([status.compliant_2024, status.compliant_2030, status.compliant_2035])
    assert status.annual_penalty_2024 == pytest.approx(553.5 * PENALTY_RATE)
    assert status.annual_penalty_2035 == pytest.approx(553.5 * PENALTY_RATE)


def test_unknown_building_type_with_zero_emissions_is_compliant():
    status = calculate_compliance_status(_office(building_type='castle'), 0.0)

    assert status.compliant_2024 and status.compliant_2030 and status.compliant_2035


def test_missing_threshold_entry_in_reference_data():
    reference = default_reference_data()
    thresholds = {k: v for k, v in reference.thresholds.items() if k != 'office'}
    trimmed = replace(reference, thresholds=thresholds)

    status = calculate_compliance_status(_office(), 10.0, trimmed)

    assert status.threshold_2030 == 0
    assert status.annual_penalty_2030 == pytest.approx(10.0 * PENALTY_RATE)


def test_single_measure_reduction_has_no_overlap_discount():
    reference = default_reference_data()
    reduction = combined_emissions_reduction([_analysis(Range(20.0, 40.0))], reference)
    assert reduction == pytest.approx(30.0)


def test_multiple_measures_reduction_discounted():
    reference = default_reference_data()
    analyses = [_analysis(Range(20.0, 40.0)), _analysis(Range(10.0, 30.0))]

    assert combined_emissions_reduction(analyses, reference) == pytest.approx((30.0 + 20.0) * 0.85)


def test_post_retrofit_compliance_recomputed_from_reduced_emissions():
    current = calculate_compliance_status(_office(), 553.5)
    analyses = [_analysis(Range(100.0, 140.0)), _analysis(Range(40.0, 60.0))]

    post = calculate_post_retrofit_compliance(current, 553.5, 100_000, analyses)

    expected = 553.5 - (120.0 + 50.0) * 0.85
    assert post.current_emissions == pytest.approx(expected)
    assert post.emissions_intensity == pytest.approx(expected / 100_000)
    assert post.threshold_2030 == current.threshold_2030
    assert post.compliant_2030 is True
    assert post.annual_penalty_2035 == pytest.approx((expected - 298.0) * PENALTY_RATE)


def test_post_retrofit_emissions_floor_at_zero():
    current = calculate_compliance_status(_office(), 50.0)

    post = calculate_post_retrofit_compliance(current, 50.0, 100_000, [_analysis(Range(80.0, 120.0))])

    assert post.current_emissions == 0
    assert post.compliant_2035 is True


def test_post_retrofit_without_measures_matches_current():
    current = calculate_compliance_status(_office(), 553.5)
    post = calculate_post_retrofit_compliance(current, 553.5, 100_000, [])
    assert post == current
