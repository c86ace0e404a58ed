"""
LL97 Compliance Module

Compares annual emissions against the building type's limits for the 2024,
2030 and 2035 compliance eras and prices the excess at the LL97 penalty rate.
The same threshold/penalty logic is re-run after retrofits against the
combined, overlap-discounted emissions reduction.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from loguru import logger

from src.modeling.analysis_schema import BuildingInfo, ComplianceStatus, RetrofitAnalysis
from src.modeling.ranges import midpoint
from src.modeling.reference_data import ReferenceData, default_reference_data

ERAS = ('2024', '2030', '2035')


def resolve_thresholds(building_info: BuildingInfo, reference: ReferenceData) -> Dict[str, float]:
    """Era -> limit (tCO2e/sf/yr). A missing entry yields all-zero limits."""
    threshold = reference.lookup_threshold(building_info.building_type)
    if threshold is None:
        logger.warning(
            f"No LL97 threshold for building type '{building_info.building_type}'; "
            "treating all era limits as zero"
        )
        return {era: 0.0 for era in ERAS}

    return {
        '2024': threshold.year_2024,
        '2030': threshold.year_2030,
        '2035': threshold.year_2035,
    }


def excess_emissions(emissions: float, threshold: float, square_footage: float) -> float:
    """Emissions above the allowance (threshold x area), floored at zero."""
    return max(0.0, emissions - threshold * square_footage)


def build_compliance_status(
    emissions: float,
    square_footage: float,
    thresholds: Dict[str, float],
    penalty_rate: float,
) -> ComplianceStatus:
    excess = {era: excess_emissions(emissions, thresholds[era], square_footage) for era in ERAS}

    return ComplianceStatus(
        current_emissions=emissions,
        emissions_intensity=emissions / square_footage,
        threshold_2024=thresholds['2024'],
        threshold_2030=thresholds['2030'],
        threshold_2035=thresholds['2035'],
        compliant_2024=excess['2024'] == 0,
        compliant_2030=excess['2030'] == 0,
        compliant_2035=excess['2035'] == 0,
        annual_penalty_2024=excess['2024'] * penalty_rate,
        annual_penalty_2030=excess['2030'] * penalty_rate,
        annual_penalty_2035=excess['2035'] * penalty_rate,
    )


def calculate_compliance_status(
    building_info: BuildingInfo,
    current_emissions: float,
    reference: Optional[ReferenceData] = None,
) -> ComplianceStatus:
    """
    Evaluate LL97 compliance for the building's current emissions.

    Args:
        building_info: Building characteristics (square footage > 0)
        current_emissions: Annual emissions, tCO2e

    Returns:
        ComplianceStatus with per-era flags and annual penalties
    """
    reference = reference or default_reference_data()
    thresholds = resolve_thresholds(building_info, reference)
    status = build_compliance_status(
        current_emissions,
        building_info.square_footage,
        thresholds,
        reference.penalty_rate,
    )

    logger.debug(
        f"Compliance: {status.current_emissions:.1f} tCO2e "
        f"({status.emissions_intensity * 1000:.2f} kgCO2e/sf); "
        f"2024={status.compliant_2024} 2030={status.compliant_2030} 2035={status.compliant_2035}"
    )
    return status


def combined_emissions_reduction(
    retrofit_analysis: Sequence[RetrofitAnalysis],
    reference: ReferenceData,
) -> float:
    """Sum of per-measure midpoint reductions, discounted for overlap."""
    total = sum(midpoint(item.annual_emissions_reduction) for item in retrofit_analysis)
    return total * reference.overlap_factor_for(len(retrofit_analysis))


def calculate_post_retrofit_compliance(
    current_compliance: ComplianceStatus,
    current_emissions: float,
    square_footage: float,
    retrofit_analysis: Sequence[RetrofitAnalysis],
    reference: Optional[ReferenceData] = None,
) -> ComplianceStatus:
    """Re-evaluate compliance after all selected measures are applied.

    Thresholds are carried over from ``current_compliance``; only the
    emissions, compliance flags and penalties change.
    """
    reference = reference or default_reference_data()
    reduction = combined_emissions_reduction(retrofit_analysis, reference)
    new_emissions = max(0.0, current_emissions - reduction)

    thresholds = {
        '2024': current_compliance.threshold_2024,
        '2030': current_compliance.threshold_2030,
        '2035': current_compliance.threshold_2035,
    }
    status = build_compliance_status(new_emissions, square_footage, thresholds, reference.penalty_rate)

    logger.debug(
        f"Post-retrofit emissions: {new_emissions:.1f} tCO2e "
        f"(combined reduction {reduction:.1f} tCO2e)"
    )
    return status
