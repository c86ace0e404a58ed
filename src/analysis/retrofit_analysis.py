"""
Retrofit Analysis Module

Projects cost, energy cost savings, emissions reduction, payback and LL97
penalty avoidance for each selected catalogue measure.

Key concepts:
- Catalogue ratios (cost per sf, savings %, reduction %) are applied to the
  building's current totals, producing a [low, high] range per quantity.
- Payback uses conservative cross-bounded division (cheap + high savings to
  expensive + low savings).
- Penalty avoidance collapses the reduction range to its midpoint before
  re-pricing each era.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from loguru import logger

from src.analysis.compliance import ERAS, excess_emissions
from src.modeling.analysis_schema import (
    BuildingInfo,
    ComplianceStatus,
    PenaltyByEra,
    RetrofitAnalysis,
)
from src.modeling.ranges import Range, divide_conservative, midpoint
from src.modeling.reference_data import ReferenceData, RetrofitOption, default_reference_data


def _penalty_avoidance(
    emissions_reduction: Range,
    building_info: BuildingInfo,
    current_compliance: ComplianceStatus,
    reference: ReferenceData,
) -> PenaltyByEra:
    new_emissions = current_compliance.current_emissions - midpoint(emissions_reduction)
    new_penalty = {
        era: excess_emissions(
            new_emissions,
            getattr(current_compliance, f'threshold_{era}'),
            building_info.square_footage,
        )
        * reference.penalty_rate
        for era in ERAS
    }

    return PenaltyByEra(
        year_2024=current_compliance.annual_penalty_2024 - new_penalty['2024'],
        year_2030=current_compliance.annual_penalty_2030 - new_penalty['2030'],
        year_2035=current_compliance.annual_penalty_2035 - new_penalty['2035'],
    )


def analyze_retrofit(
    option: RetrofitOption,
    building_info: BuildingInfo,
    current_energy_cost: float,
    current_compliance: ComplianceStatus,
    reference: ReferenceData,
) -> RetrofitAnalysis:
    """Project one catalogue measure onto the building."""
    estimated_cost = option.cost_per_sqft.scale(building_info.square_footage)
    annual_energy_savings = option.energy_savings_pct.scale(current_energy_cost / 100)
    annual_emissions_reduction = option.emissions_reduction_pct.scale(
        current_compliance.current_emissions / 100
    )
    payback_period = divide_conservative(estimated_cost, annual_energy_savings)

    analysis = RetrofitAnalysis(
        retrofit_id=option.id,
        retrofit_name=option.name,
        estimated_cost=estimated_cost,
        annual_energy_savings=annual_energy_savings,
        annual_emissions_reduction=annual_emissions_reduction,
        payback_period=payback_period,
        penalty_avoidance=_penalty_avoidance(
            annual_emissions_reduction, building_info, current_compliance, reference
        ),
    )

    logger.debug(
        f"{option.id}: cost ${estimated_cost.low:,.0f}-${estimated_cost.high:,.0f}, "
        f"savings ${annual_energy_savings.low:,.0f}-${annual_energy_savings.high:,.0f}/yr, "
        f"payback {payback_period.low:.1f}-{payback_period.high:.1f} yrs"
    )
    return analysis


def analyze_retrofits(
    building_info: BuildingInfo,
    current_energy_cost: float,
    current_compliance: ComplianceStatus,
    selected_retrofit_ids: Sequence[str],
    reference: Optional[ReferenceData] = None,
) -> List[RetrofitAnalysis]:
    """
    Analyse each selected measure, preserving selection order.

    Args:
        building_info: Building characteristics
        current_energy_cost: Annual energy cost before retrofits, USD
        current_compliance: Pre-retrofit compliance status (carries current emissions)
        selected_retrofit_ids: Catalogue ids in selection order

    Returns:
        One RetrofitAnalysis per id

    Raises:
        RetrofitNotFoundError: if any id is absent from the catalogue
    """
    reference = reference or default_reference_data()

    return [
        analyze_retrofit(
            reference.get_retrofit(retrofit_id),
            building_info,
            current_energy_cost,
            current_compliance,
            reference,
        )
        for retrofit_id in selected_retrofit_ids
    ]
