"""End-to-end tests for the analysis pipeline."""

import dataclasses
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).parent.parent))

from src.analysis.orchestrator import run_full_analysis
from src.modeling.analysis_schema import BuildingInfo, BuildingType, EnergyUsage
from src.modeling.ranges import midpoint
from src.modeling.reference_data import RetrofitNotFoundError


@pytest.fixture
def office():
    return BuildingInfo(
        address='350 Example Ave, New York, NY',
        square_footage=100_000,
        building_type=BuildingType.OFFICE,
        year_built=1965,
        number_of_floors=12,
    )


@pytest.fixture
def usage():
    return EnergyUsage(electricity_kwh=1_000_000, natural_gas_therms=50_000)


def test_office_round_trip(office, usage):
    results = run_full_analysis(office, usage, [])

    assert results.compliance_status.current_emissions == pytest.approx(553.5)
    assert results.compliance_status.emissions_intensity == pytest.approx(0.005535)
    assert results.compliance_status.compliant_2024 is True
    assert results.compliance_status.annual_penalty_2024 == 0
    assert results.retrofit_analysis == ()
    assert results.post_retrofit_compliance == results.compliance_status


def test_full_analysis_with_measures(office, usage):
    ids = ['led-retrofit', 'heat-pump-space', 'rooftop-solar']

    results = run_full_analysis(office, usage, ids)

    assert results.selected_retrofits == tuple(ids)
    assert [item.retrofit_id for item in results.retrofit_analysis] == ids
    assert results.building_info is office
    assert results.energy_usage is usage

    expected_reduction = sum(
        midpoint(item.annual_emissions_reduction) for item in results.retrofit_analysis
    ) * 0.85
    assert results.post_retrofit_compliance.current_emissions == pytest.approx(553.5 - expected_reduction)
    assert results.post_retrofit_compliance.threshold_2035 == results.compliance_status.threshold_2035

    loan_types = [rec.loan_type for rec in results.loan_recommendations]
    assert 'Solar Financing / PPA' in loan_types
    assert loan_types.index('Spring Bank Green Loan') < loan_types.index('NYSERDA Financing Programs')


def test_unknown_retrofit_aborts_run(office, usage):
    with pytest.raises(RetrofitNotFoundError):
        run_full_analysis(office, usage, ['led-retrofit', 'does-not-exist'])


def test_results_are_immutable(office, usage):
    results = run_full_analysis(office, usage, ['led-retrofit'])

    with pytest.raises(dataclasses.FrozenInstanceError):
        results.financial_summary = None
    with pytest.raises(dataclasses.FrozenInstanceError):
        results.compliance_status.current_emissions = 0
    assert isinstance(results.retrofit_analysis, tuple)
    assert isinstance(results.loan_recommendations, tuple)


def test_repeated_runs_are_identical(office, usage):
    first = run_full_analysis(office, usage, ['air-sealing', 'bms-upgrade'])
    second = run_full_analysis(office, usage, ['air-sealing', 'bms-upgrade'])
    assert first == second


def test_results_serialise_to_plain_data(office, usage):
    results = run_full_analysis(office, usage, ['led-retrofit'])

    payload = results.to_dict()

    assert payload['building_info']['building_type'] == 'office'
    assert payload['retrofit_analysis'][0]['estimated_cost'].keys() == {'low', 'high'}
    assert payload['loan_recommendations'][0]['suitability'] in {'excellent', 'good', 'fair'}
    json.dumps(payload, allow_nan=False)
