"""
Financial Summary Module

Rolls per-measure projections up to a project-level cost, savings, payback and
net-savings picture.

Notes:
- Energy savings are summed first and then discounted by the overlap factor
  when several measures are combined.
- Penalty avoidance mirrors the pre-retrofit penalty for each era (clamped at
  zero); it is not recomputed from the combined post-retrofit emissions.
- Total annual savings pair the 2024 penalty with the low bound and the 2030
  penalty with the high bound.
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from src.modeling.analysis_schema import (
    ComplianceStatus,
    FinancialSummary,
    PenaltyByEra,
    RetrofitAnalysis,
)
from src.modeling.ranges import Range, divide_conservative, net_savings
from src.modeling.reference_data import ReferenceData, default_reference_data


def calculate_financial_summary(
    retrofit_analysis: Sequence[RetrofitAnalysis],
    current_compliance: ComplianceStatus,
    reference: Optional[ReferenceData] = None,
) -> FinancialSummary:
    """
    Aggregate retrofit analyses into a single financial summary.

    Args:
        retrofit_analysis: Per-measure analyses (may be empty)
        current_compliance: Pre-retrofit compliance status

    Returns:
        FinancialSummary for the whole project
    """
    reference = reference or default_reference_data()

    total_retrofit_cost = Range.sum(item.estimated_cost for item in retrofit_analysis)

    overlap_factor = reference.overlap_factor_for(len(retrofit_analysis))
    annual_energy_cost_savings = Range.sum(
        item.annual_energy_savings for item in retrofit_analysis
    ).scale(overlap_factor)

    penalty_avoidance = PenaltyByEra(
        year_2024=max(0.0, current_compliance.annual_penalty_2024),
        year_2030=max(0.0, current_compliance.annual_penalty_2030),
        year_2035=max(0.0, current_compliance.annual_penalty_2035),
    )

    total_annual_savings = Range(
        annual_energy_cost_savings.low + penalty_avoidance.year_2024,
        annual_energy_cost_savings.high + penalty_avoidance.year_2030,
    )

    short_horizon, long_horizon = reference.net_savings_horizons[:2]

    summary = FinancialSummary(
        total_retrofit_cost=total_retrofit_cost,
        annual_energy_cost_savings=annual_energy_cost_savings,
        annual_penalty_avoidance=penalty_avoidance,
        total_annual_savings=total_annual_savings,
        simple_payback=divide_conservative(total_retrofit_cost, total_annual_savings),
        ten_year_net_savings=net_savings(total_annual_savings, total_retrofit_cost, short_horizon),
        twenty_year_net_savings=net_savings(total_annual_savings, total_retrofit_cost, long_horizon),
    )

    logger.info(
        f"Financial summary: {len(retrofit_analysis)} measures, "
        f"cost ${total_retrofit_cost.low:,.0f}-${total_retrofit_cost.high:,.0f}, "
        f"annual savings ${total_annual_savings.low:,.0f}-${total_annual_savings.high:,.0f} "
        f"(overlap factor {overlap_factor:.2f})"
    )
    return summary
