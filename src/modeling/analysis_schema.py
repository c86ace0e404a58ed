"""
Analysis Schema Module

Input and result records for the LL97 retrofit analysis. All records are
frozen dataclasses; sequences are stored as tuples so a finished
``AnalysisResults`` can be handed to report consumers read-only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from src.modeling.ranges import Range


class BuildingType(str, Enum):
    MULTIFAMILY = 'multifamily'
    OFFICE = 'office'
    RETAIL = 'retail'
    HOTEL = 'hotel'
    HEALTHCARE = 'healthcare'
    EDUCATION = 'education'
    WAREHOUSE = 'warehouse'
    MIXED_USE = 'mixed-use'


class RetrofitCategory(str, Enum):
    ENVELOPE = 'envelope'
    HVAC = 'hvac'
    ELECTRIFICATION = 'electrification'
    SOLAR = 'solar'
    LIGHTING = 'lighting'
    WINDOWS = 'windows'
    CONTROLS = 'controls'
    WATER = 'water'


class Suitability(str, Enum):
    EXCELLENT = 'excellent'
    GOOD = 'good'
    FAIR = 'fair'


def type_key(building_type: Union[BuildingType, str]) -> str:
    """Plain string key for a building type (enum member or raw string)."""
    if isinstance(building_type, Enum):
        return building_type.value
    return str(building_type)


def to_serializable(obj: Any) -> Any:
    """
    Recursively convert records, enums and tuples into JSON-serializable types.

    Non-finite floats (nan or inf paybacks) become ``None``.

    Args:
        obj: Object to convert

    Returns:
        JSON-serializable version of the object
    """
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    elif isinstance(obj, Enum):
        return obj.value
    elif is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_serializable(getattr(obj, f.name)) for f in fields(obj)}
    elif isinstance(obj, dict):
        return {key: to_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple, frozenset, set)):
        return [to_serializable(item) for item in obj]
    else:
        return obj


class _Record:
    def to_dict(self) -> dict:
        return to_serializable(self)


# ============================================================================
# INPUTS
# ============================================================================

@dataclass(frozen=True)
class BuildingInfo(_Record):
    """
    Building characteristics supplied by the caller.

    Attributes:
        address: Street address (display only)
        square_footage: Gross floor area in square feet, > 0
        building_type: One of ``BuildingType`` (a raw string is accepted)
        year_built: Construction year
        number_of_units: Optional dwelling/tenant unit count
        number_of_floors: Optional storey count
    """
    address: str
    square_footage: float
    building_type: Union[BuildingType, str]
    year_built: int
    number_of_units: Optional[int] = None
    number_of_floors: Optional[int] = None


@dataclass(frozen=True)
class EnergyUsage(_Record):
    """Annual consumption per fuel channel. Missing channels are zero."""
    electricity_kwh: float = 0.0
    natural_gas_therms: float = 0.0
    fuel_oil_gallons: float = 0.0
    steam_mlbs: float = 0.0
    district_chilled_water_ton_hrs: float = 0.0


# ============================================================================
# RESULTS
# ============================================================================

@dataclass(frozen=True)
class PenaltyByEra(_Record):
    """A dollar amount for each LL97 compliance era."""
    year_2024: float
    year_2030: float
    year_2035: float


@dataclass(frozen=True)
class ComplianceStatus(_Record):
    current_emissions: float  # tCO2e/yr
    emissions_intensity: float  # tCO2e/sf/yr
    threshold_2024: float
    threshold_2030: float
    threshold_2035: float
    compliant_2024: bool
    compliant_2030: bool
    compliant_2035: bool
    annual_penalty_2024: float
    annual_penalty_2030: float
    annual_penalty_2035: float

    @property
    def penalties(self) -> PenaltyByEra:
        return PenaltyByEra(
            self.annual_penalty_2024,
            self.annual_penalty_2030,
            self.annual_penalty_2035,
        )


@dataclass(frozen=True)
class RetrofitAnalysis(_Record):
    retrofit_id: str
    retrofit_name: str
    estimated_cost: Range
    annual_energy_savings: Range
    annual_emissions_reduction: Range
    payback_period: Range
    penalty_avoidance: PenaltyByEra


@dataclass(frozen=True)
class FinancialSummary(_Record):
    total_retrofit_cost: Range
    annual_energy_cost_savings: Range
    annual_penalty_avoidance: PenaltyByEra
    total_annual_savings: Range
    simple_payback: Range
    ten_year_net_savings: Range
    twenty_year_net_savings: Range


@dataclass(frozen=True)
class LoanRecommendation(_Record):
    loan_type: str
    description: str
    typical_terms: str
    suitability: Suitability
    reasons: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnalysisResults(_Record):
    """Terminal record of one analysis run."""
    building_info: BuildingInfo
    energy_usage: EnergyUsage
    selected_retrofits: Tuple[str, ...]
    compliance_status: ComplianceStatus
    retrofit_analysis: Tuple[RetrofitAnalysis, ...]
    financial_summary: FinancialSummary
    loan_recommendations: Tuple[LoanRecommendation, ...]
    post_retrofit_compliance: ComplianceStatus
