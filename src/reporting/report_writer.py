"""
Report export for a single analysis run.

Writes tabular CSVs (per-measure analysis, compliance before/after), the full
results record as JSON, and a markdown summary mirroring the sections of the
customer-facing loan analysis report.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from loguru import logger

from config.config import DATA_OUTPUTS_DIR, load_config
from src.modeling.analysis_schema import AnalysisResults, ComplianceStatus, Suitability
from src.modeling.reference_data import ReferenceData, default_reference_data
from src.reporting.formatting import (
    format_compact_currency,
    format_currency,
    format_number,
    format_range,
    format_years,
)

DISCLAIMER = (
    "This analysis provides estimates for informational purposes only. Actual costs, savings, "
    "and compliance outcomes may vary based on building-specific conditions, contractor pricing, "
    "utility rates, and other factors. Consult with qualified professionals for detailed assessments."
)


def emissions_reduction_pct(results: AnalysisResults) -> float:
    """Percent reduction from current to post-retrofit emissions (0 when no emissions)."""
    before = results.compliance_status.current_emissions
    after = results.post_retrofit_compliance.current_emissions
    if before <= 0:
        return 0.0
    return (before - after) / before * 100


def _status_label(compliant: bool) -> str:
    return "Compliant" if compliant else "Non-compliant"


class ReportWriter:
    """Generate report artefacts for one AnalysisResults record."""

    def __init__(self, outputs_dir: Optional[Path] = None, reference: Optional[ReferenceData] = None):
        self.outputs_dir = Path(outputs_dir or DATA_OUTPUTS_DIR / "reports")
        self.outputs_dir.mkdir(parents=True, exist_ok=True)
        self.reference = reference or default_reference_data()
        self.project = load_config().get('project', {})

    def retrofit_table(self, results: AnalysisResults) -> pd.DataFrame:
        records = []
        for item in results.retrofit_analysis:
            records.append({
                'retrofit_id': item.retrofit_id,
                'retrofit_name': item.retrofit_name,
                'cost_low': item.estimated_cost.low,
                'cost_high': item.estimated_cost.high,
                'energy_savings_low': item.annual_energy_savings.low,
                'energy_savings_high': item.annual_energy_savings.high,
                'emissions_reduction_low': item.annual_emissions_reduction.low,
                'emissions_reduction_high': item.annual_emissions_reduction.high,
                'payback_low': item.payback_period.low,
                'payback_high': item.payback_period.high,
                'penalty_avoidance_2024': item.penalty_avoidance.year_2024,
                'penalty_avoidance_2030': item.penalty_avoidance.year_2030,
                'penalty_avoidance_2035': item.penalty_avoidance.year_2035,
            })
        return pd.DataFrame(records, columns=[
            'retrofit_id', 'retrofit_name', 'cost_low', 'cost_high',
            'energy_savings_low', 'energy_savings_high',
            'emissions_reduction_low', 'emissions_reduction_high',
            'payback_low', 'payback_high',
            'penalty_avoidance_2024', 'penalty_avoidance_2030', 'penalty_avoidance_2035',
        ])

    def compliance_table(self, results: AnalysisResults) -> pd.DataFrame:
        def rows(stage: str, status: ComplianceStatus) -> List[Dict]:
            return [
                {
                    'stage': stage,
                    'era': era,
                    'emissions_tco2e': status.current_emissions,
                    'threshold_tco2e_per_sf': getattr(status, f'threshold_{era}'),
                    'compliant': getattr(status, f'compliant_{era}'),
                    'annual_penalty': getattr(status, f'annual_penalty_{era}'),
                }
                for era in ('2024', '2030', '2035')
            ]

        return pd.DataFrame(
            rows('current', results.compliance_status)
            + rows('post_retrofit', results.post_retrofit_compliance)
        )

    def _markdown(self, results: AnalysisResults) -> str:
        building = results.building_info
        current = results.compliance_status
        post = results.post_retrofit_compliance
        summary = results.financial_summary

        lines = [
            "# Building Retrofit Loan Analysis Report",
            "",
            "## Building Information",
            f"- Address: {building.address}",
            f"- Building type: {self.reference.building_type_label(building.building_type)}",
            f"- Square footage: {format_number(building.square_footage)} sf",
            f"- Year built: {building.year_built}",
        ]
        if building.number_of_units:
            lines.append(f"- Units: {building.number_of_units}")
        if building.number_of_floors:
            lines.append(f"- Floors: {building.number_of_floors}")

        lines += [
            "",
            "## Executive Summary",
            f"- Total investment: {format_range(summary.total_retrofit_cost, format_currency)}",
            f"- Annual savings: {format_range(summary.total_annual_savings, format_currency)}",
            f"- Simple payback: {format_years(summary.simple_payback)}",
            f"- 20-year net savings: {format_range(summary.twenty_year_net_savings, format_currency)}",
            "",
            "## LL97 Compliance Status",
            "| Period | Current | Current penalty | After retrofits | Post-retrofit penalty |",
            "|---|---|---|---|---|",
        ]
        for era in ('2024', '2030', '2035'):
            lines.append(
                f"| {era} | {_status_label(getattr(current, f'compliant_{era}'))} "
                f"| {format_currency(getattr(current, f'annual_penalty_{era}'))} "
                f"| {_status_label(getattr(post, f'compliant_{era}'))} "
                f"| {format_currency(getattr(post, f'annual_penalty_{era}'))} |"
            )
        lines += [
            "",
            f"Current emissions: {format_number(current.current_emissions, 1)} tCO₂e/year "
            f"({current.emissions_intensity * 1000:.2f} kgCO₂e/sf)",
            f"After retrofits: {format_number(post.current_emissions, 1)} tCO₂e/year "
            f"({emissions_reduction_pct(results):.0f}% reduction)",
            "",
            "## Selected Retrofit Measures",
        ]
        if not results.retrofit_analysis:
            lines.append("No retrofit measures selected.")
        for item in results.retrofit_analysis:
            lines.append(
                f"- **{item.retrofit_name}**: cost {format_range(item.estimated_cost, format_compact_currency)}, "
                f"energy savings {format_range(item.annual_energy_savings, format_currency)}/yr, "
                f"payback {format_years(item.payback_period)}"
            )

        lines += [
            "",
            "## Financial Summary",
            f"- Total retrofit cost: {format_range(summary.total_retrofit_cost, format_currency)}",
            f"- Annual energy cost savings: {format_range(summary.annual_energy_cost_savings, format_currency)}",
            f"- LL97 penalty avoidance (2024): {format_currency(summary.annual_penalty_avoidance.year_2024)}",
            f"- LL97 penalty avoidance (2030): {format_currency(summary.annual_penalty_avoidance.year_2030)}",
            f"- 10-year net savings: {format_range(summary.ten_year_net_savings, format_currency)}",
            f"- 20-year net savings: {format_range(summary.twenty_year_net_savings, format_currency)}",
            "",
            "## Financing Recommendations",
        ]
        for index, loan in enumerate(results.loan_recommendations, start=1):
            marker = " (Recommended)" if loan.suitability == Suitability.EXCELLENT else ""
            lines += [
                f"### {index}. {loan.loan_type}{marker}",
                loan.description,
                f"Terms: {loan.typical_terms}",
            ]
            lines += [f"- {reason}" for reason in loan.reasons]
            lines.append("")

        lines += ["## Disclaimer", DISCLAIMER]
        if self.project.get('contact'):
            lines += ["", f"Contact us: {self.project['contact']}"]

        return "\n".join(lines) + "\n"

    def write(self, results: AnalysisResults) -> Dict[str, Path]:
        """
        Write all artefacts for ``results``.

        Returns:
            Mapping of artefact name to written path
        """
        paths = {
            'retrofit_analysis': self.outputs_dir / "retrofit_analysis.csv",
            'compliance_comparison': self.outputs_dir / "compliance_comparison.csv",
            'results_json': self.outputs_dir / "analysis_results.json",
            'markdown': self.outputs_dir / "analysis_report.md",
        }

        self.retrofit_table(results).to_csv(paths['retrofit_analysis'], index=False)
        self.compliance_table(results).to_csv(paths['compliance_comparison'], index=False)
        paths['results_json'].write_text(
            json.dumps(results.to_dict(), indent=2, allow_nan=False), encoding="utf-8"
        )
        paths['markdown'].write_text(self._markdown(results), encoding="utf-8")

        for name, path in paths.items():
            logger.info(f"Saved {name} to {path}")

        return paths
