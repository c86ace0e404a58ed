"""
Main entry point for the LL97 Retrofit Loan Analysis

Loads a building description, validates it, runs the analysis and writes the
report artefacts.

Input file (YAML or JSON):

    building:
      address: "123 Example St, New York, NY"
      square_footage: 100000
      building_type: office
      year_built: 1965
    energy_usage:
      electricity_kwh: 1000000
      natural_gas_therms: 50000
    retrofits: [led-retrofit, heat-pump-space]
"""

import argparse
import json
import sys
from pathlib import Path

import yaml
from loguru import logger

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from config.config import DATA_OUTPUTS_DIR, ensure_directories
from src.analysis.orchestrator import run_full_analysis
from src.cleaning.input_validator import InputValidator, parse_building_info, parse_energy_usage
from src.modeling.emissions import estimate_energy_usage
from src.modeling.reference_data import default_reference_data
from src.reporting.formatting import format_currency, format_range, format_years
from src.reporting.report_writer import ReportWriter, emissions_reduction_pct

EXIT_INVALID_INPUT = 2


def setup_logging(log_file: Path = None, verbose: bool = False):
    """
    Configure logging for the CLI.

    Args:
        log_file: Optional path to log file
        verbose: Emit DEBUG messages to the console
    """
    logger.remove()  # Remove default handler

    # Console logging
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="DEBUG" if verbose else "INFO"
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def load_input(path: Path) -> dict:
    """Read a YAML or JSON analysis request."""
    text = Path(path).read_text(encoding="utf-8")
    if Path(path).suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text) or {}


def list_retrofits(building_type: str):
    reference = default_reference_data()
    logger.info(f"Retrofit measures applicable to {reference.building_type_label(building_type)}:")
    for category_id, category_name in reference.categories:
        options = reference.applicable_retrofits(building_type, category_id)
        if not options:
            continue
        logger.info(f"  {category_name}")
        for option in options:
            logger.info(f"    {option.id:<20} {option.name}")


def log_summary(results):
    current = results.compliance_status
    post = results.post_retrofit_compliance
    summary = results.financial_summary

    logger.info("=" * 70)
    logger.info("ANALYSIS SUMMARY")
    logger.info("=" * 70)
    for era in ('2024', '2030', '2035'):
        before = "compliant" if getattr(current, f'compliant_{era}') else "non-compliant"
        after = "compliant" if getattr(post, f'compliant_{era}') else "non-compliant"
        logger.info(
            f"{era}: {before} ({format_currency(getattr(current, f'annual_penalty_{era}'))}/yr) -> "
            f"{after} ({format_currency(getattr(post, f'annual_penalty_{era}'))}/yr)"
        )
    logger.info(
        f"Emissions: {current.current_emissions:,.1f} -> {post.current_emissions:,.1f} tCO2e/yr "
        f"({emissions_reduction_pct(results):.0f}% reduction)"
    )
    logger.info(f"Total cost: {format_range(summary.total_retrofit_cost, format_currency)}")
    logger.info(f"Annual savings: {format_range(summary.total_annual_savings, format_currency)}")
    logger.info(f"Simple payback: {format_years(summary.simple_payback)}")
    for loan in results.loan_recommendations:
        logger.info(f"Financing: {loan.loan_type} ({loan.suitability.value})")


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='LL97 compliance, retrofit and financing analysis for a single building'
    )
    parser.add_argument('--input', type=Path, required=True,
                        help='YAML or JSON file with building, energy_usage and retrofits')
    parser.add_argument('--output-dir', type=Path, default=None,
                        help=f'Directory for report artefacts (default: {DATA_OUTPUTS_DIR / "reports"})')
    parser.add_argument('--estimate-usage', action='store_true',
                        help='Estimate energy usage from typical EUI instead of the input values')
    parser.add_argument('--list-retrofits', action='store_true',
                        help='List retrofit measures applicable to the building type and exit')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', type=Path, default=None, help='Optional log file')

    args = parser.parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    request = load_input(args.input)
    building = parse_building_info(request.get('building', {}))

    if args.list_retrofits:
        list_retrofits(building.building_type)
        return 0

    validator = InputValidator()

    if args.estimate_usage:
        building_issues = validator.validate_building_info(building)
        if building_issues:
            for issue in building_issues:
                logger.error(f"Validation issue: {issue}")
            return EXIT_INVALID_INPUT
        usage = estimate_energy_usage(building.building_type, float(building.square_footage))
    else:
        usage = parse_energy_usage(request.get('energy_usage'))

    retrofits = list(request.get('retrofits') or [])

    issues = validator.validate(building, usage, retrofits)
    if issues:
        logger.error(f"Cannot run analysis: {len(issues)} validation issue(s)")
        return EXIT_INVALID_INPUT

    results = run_full_analysis(building, usage, retrofits)
    log_summary(results)

    if args.output_dir is None:
        ensure_directories()
    ReportWriter(args.output_dir).write(results)

    return 0


if __name__ == "__main__":
    sys.exit(main())
