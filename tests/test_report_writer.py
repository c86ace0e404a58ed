"""Tests for report artefacts and the command-line entry point."""

import json
import sys
from pathlib import Path

import pandas as pd
import pytest
import yaml

sys.path.append(str(Path(__file__).parent.parent))

import main
from src.analysis.orchestrator import run_full_analysis
from src.modeling.analysis_schema import BuildingInfo, EnergyUsage
from src.modeling.ranges import Range
from src.reporting.formatting import (
    format_compact_currency,
    format_currency,
    format_number,
    format_range,
)
from src.reporting.report_writer import ReportWriter, emissions_reduction_pct


@pytest.fixture
def results():
    building = BuildingInfo(
        address='77 Water St, New York, NY',
        square_footage=100_000,
        building_type='office',
        year_built=1970,
    )
    usage = EnergyUsage(electricity_kwh=1_000_000, natural_gas_therms=50_000)
    return run_full_analysis(building, usage, ['led-retrofit', 'heat-pump-space'])


def test_formatting_helpers():
    assert format_currency(1_234_567.6) == '$1,234,568'
    assert format_currency(-2_500) == '-$2,500'
    assert format_currency(float('nan')) == 'N/A'
    assert format_number(553.456, 1) == '553.5'
    assert format_range(Range(1_000, 2_500), format_currency) == '$1,000 - $2,500'
    assert format_compact_currency(1_250_000) == '$1.2M'
    assert format_compact_currency(350_000) == '$350K'
    assert format_compact_currency(900) == '$900'
    assert format_compact_currency(-2_000_000) == '-$2.0M'
    assert format_compact_currency(-450) == '-$450'


def test_report_artefacts_written(tmp_path, results):
    paths = ReportWriter(outputs_dir=tmp_path).write(results)

    assert set(paths) == {'retrofit_analysis', 'compliance_comparison', 'results_json', 'markdown'}
    assert all(path.exists() for path in paths.values())

    retrofits = pd.read_csv(paths['retrofit_analysis'])
    assert list(retrofits['retrofit_id']) == ['led-retrofit', 'heat-pump-space']
    assert {'cost_low', 'cost_high', 'payback_low', 'payback_high'}.issubset(retrofits.columns)

    compliance = pd.read_csv(paths['compliance_comparison'])
    assert len(compliance) == 6
    assert set(compliance['stage']) == {'current', 'post_retrofit'}

    payload = json.loads(paths['results_json'].read_text(encoding='utf-8'))
    assert payload['selected_retrofits'] == ['led-retrofit', 'heat-pump-space']


def test_markdown_report_sections(tmp_path, results):
    paths = ReportWriter(outputs_dir=tmp_path).write(results)
    text = paths['markdown'].read_text(encoding='utf-8')

    for heading in (
        '## Building Information',
        '## Executive Summary',
        '## LL97 Compliance Status',
        '## Selected Retrofit Measures',
        '## Financial Summary',
        '## Financing Recommendations',
        '## Disclaimer',
    ):
        assert heading in text
    assert 'tCO₂e/year' in text
    # led-retrofit at 100,000 sf costs $1-3 per sf
    assert 'cost $100K - $300K' in text
    # heat-pump-space is an electrification measure, so state programs are recommended
    assert 'NYSERDA Financing Programs (Recommended)' in text


def test_emissions_reduction_pct(results):
    before = results.compliance_status.current_emissions
    after = results.post_retrofit_compliance.current_emissions
    assert emissions_reduction_pct(results) == pytest.approx((before - after) / before * 100)


def _write_request(tmp_path, **overrides):
    request = {
        'building': {
            'address': '1 CLI Way',
            'square_footage': 80_000,
            'building_type': 'multifamily',
            'year_built': 1955,
        },
        'energy_usage': {'electricity_kwh': 600_000, 'natural_gas_therms': 70_000},
        'retrofits': ['air-sealing', 'heat-pump-water'],
    }
    request.update(overrides)
    path = tmp_path / 'request.yaml'
    path.write_text(yaml.safe_dump(request), encoding='utf-8')
    return path


def test_cli_writes_reports(tmp_path):
    request = _write_request(tmp_path)
    out_dir = tmp_path / 'out'

    exit_code = main.main(['--input', str(request), '--output-dir', str(out_dir)])

    assert exit_code == 0
    assert (out_dir / 'analysis_report.md').exists()
    assert (out_dir / 'retrofit_analysis.csv').exists()


def test_cli_estimates_usage(tmp_path):
    request = _write_request(tmp_path, energy_usage={})
    out_dir = tmp_path / 'out'

    exit_code = main.main(['--input', str(request), '--output-dir', str(out_dir), '--estimate-usage'])

    assert exit_code == 0
    payload = json.loads((out_dir / 'analysis_results.json').read_text(encoding='utf-8'))
    assert payload['energy_usage']['electricity_kwh'] > 0


def test_cli_rejects_invalid_input(tmp_path):
    request = _write_request(tmp_path, retrofits=['warp-drive'])
    out_dir = tmp_path / 'out'

    exit_code = main.main(['--input', str(request), '--output-dir', str(out_dir)])

    assert exit_code == main.EXIT_INVALID_INPUT
    assert not (out_dir / 'analysis_report.md').exists()


def _strict_constant(token):
    raise ValueError(f"non-standard JSON token {token}")


def test_results_json_is_strict_when_payback_undefined(tmp_path):
    # Compliant building with nothing selected: zero cost over zero savings
    building = BuildingInfo(
        address='5 Quiet Ln',
        square_footage=100_000,
        building_type='office',
        year_built=1990,
    )
    results = run_full_analysis(building, EnergyUsage(electricity_kwh=1_000), [])

    paths = ReportWriter(outputs_dir=tmp_path).write(results)
    payload = json.loads(
        paths['results_json'].read_text(encoding='utf-8'), parse_constant=_strict_constant
    )

    assert payload['financial_summary']['simple_payback'] == {'low': None, 'high': None}


def test_cli_accepts_numeric_strings_in_json(tmp_path):
    request = {
        'building': {
            'address': '100 Text Ave',
            'square_footage': '100000',
            'building_type': 'office',
            'year_built': '1970',
            'number_of_floors': '12',
        },
        'energy_usage': {'electricity_kwh': '1000000', 'natural_gas_therms': '50000'},
        'retrofits': ['led-retrofit'],
    }
    path = tmp_path / 'request.json'
    path.write_text(json.dumps(request), encoding='utf-8')
    out_dir = tmp_path / 'out'

    exit_code = main.main(['--input', str(path), '--output-dir', str(out_dir)])

    assert exit_code == 0
    payload = json.loads((out_dir / 'analysis_results.json').read_text(encoding='utf-8'))
    assert payload['building_info']['square_footage'] == 100_000
    assert payload['compliance_status']['current_emissions'] == pytest.approx(553.5)


def test_cli_rejects_non_numeric_strings(tmp_path):
    request = _write_request(
        tmp_path,
        energy_usage={'electricity_kwh': 'lots', 'natural_gas_therms': 70_000},
    )
    out_dir = tmp_path / 'out'

    exit_code = main.main(['--input', str(request), '--output-dir', str(out_dir)])

    assert exit_code == main.EXIT_INVALID_INPUT
