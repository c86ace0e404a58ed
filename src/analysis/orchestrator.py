"""
Analysis Orchestrator

Runs the full LL97 retrofit analysis for one building:

1. Emissions and energy cost totals
2. Pre-retrofit compliance
3. Per-measure retrofit analysis
4. Financial summary
5. Financing recommendations
6. Post-retrofit compliance

The run is synchronous and side-effect free apart from logging. Inputs are
assumed validated by the caller; an unknown retrofit id raises
``RetrofitNotFoundError`` and no partial result is produced.
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from src.analysis.compliance import calculate_compliance_status, calculate_post_retrofit_compliance
from src.analysis.financial_summary import calculate_financial_summary
from src.analysis.loan_recommendations import generate_loan_recommendations
from src.analysis.retrofit_analysis import analyze_retrofits
from src.modeling.analysis_schema import AnalysisResults, BuildingInfo, EnergyUsage
from src.modeling.emissions import calculate_emissions, calculate_energy_costs
from src.modeling.reference_data import ReferenceData, default_reference_data


def run_full_analysis(
    building_info: BuildingInfo,
    energy_usage: EnergyUsage,
    selected_retrofit_ids: Sequence[str],
    reference: Optional[ReferenceData] = None,
) -> AnalysisResults:
    """
    Produce the complete analysis record for a building.

    Args:
        building_info: Validated building characteristics
        energy_usage: Annual consumption per fuel
        selected_retrofit_ids: Catalogue ids in selection order, de-duplicated by the caller
        reference: Reference tables; defaults to the project configuration

    Returns:
        Immutable AnalysisResults
    """
    reference = reference or default_reference_data()
    selected = tuple(selected_retrofit_ids)

    logger.info(
        f"Running analysis for {building_info.address or 'unnamed building'} "
        f"({building_info.square_footage:,.0f} sf, {len(selected)} measures selected)"
    )

    current_emissions = calculate_emissions(energy_usage, reference)
    current_energy_cost = calculate_energy_costs(energy_usage, reference)

    compliance_status = calculate_compliance_status(building_info, current_emissions, reference)

    retrofit_analysis = analyze_retrofits(
        building_info,
        current_energy_cost,
        compliance_status,
        selected,
        reference,
    )

    financial_summary = calculate_financial_summary(retrofit_analysis, compliance_status, reference)

    loan_recommendations = generate_loan_recommendations(financial_summary, selected, reference)

    post_retrofit_compliance = calculate_post_retrofit_compliance(
        compliance_status,
        current_emissions,
        building_info.square_footage,
        retrofit_analysis,
        reference,
    )

    results = AnalysisResults(
        building_info=building_info,
        energy_usage=energy_usage,
        selected_retrofits=selected,
        compliance_status=compliance_status,
        retrofit_analysis=tuple(retrofit_analysis),
        financial_summary=financial_summary,
        loan_recommendations=tuple(loan_recommendations),
        post_retrofit_compliance=post_retrofit_compliance,
    )

    logger.info(
        f"Analysis complete: {current_emissions:.1f} -> "
        f"{post_retrofit_compliance.current_emissions:.1f} tCO2e/yr"
    )
    return results
