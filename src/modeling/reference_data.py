"""
Reference Data Module

Static lookup tables consumed by the analysis: emission factors, energy cost
rates, the LL97 penalty rate and per-building-type thresholds, the retrofit
measure catalogue and the typical EUI table. Building-type specific behaviour
is expressed as keyed lookups into these tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, FrozenSet, List, Mapping, Optional, Union

from loguru import logger

from config.config import (
    get_building_type_labels,
    get_emission_factors,
    get_energy_cost_rates,
    get_financial_params,
    get_financing_params,
    get_ll97_thresholds,
    get_penalty_rate,
    get_retrofit_catalogue,
    get_retrofit_categories,
    get_typical_eui,
    get_usage_estimation_params,
)
from src.modeling.analysis_schema import BuildingType, RetrofitCategory, type_key
from src.modeling.ranges import Range

ALL_BUILDING_TYPES = 'all'


class RetrofitNotFoundError(KeyError):
    """A selected retrofit id is not in the catalogue."""

    def __init__(self, retrofit_id: str):
        super().__init__(retrofit_id)
        self.retrofit_id = retrofit_id

    def __str__(self) -> str:
        return f"Retrofit option not found: {self.retrofit_id}"


@dataclass(frozen=True)
class LL97Threshold:
    """Emission limits in tCO2e per square foot per year."""
    building_type: str
    year_2024: float
    year_2030: float
    year_2035: float


@dataclass(frozen=True)
class RetrofitOption:
    """
    A single catalogue measure.

    Attributes:
        id: Unique catalogue key (e.g. 'heat-pump-space')
        name: Human-readable name
        category: Measure category
        cost_per_sqft: Installed cost range, USD per square foot
        energy_savings_pct: Annual energy cost saving range, percent
        emissions_reduction_pct: Annual emissions reduction range, percent
        payback_years: Indicative payback range from the catalogue
        applicable_building_types: 'all' or the set of building types served
    """
    id: str
    name: str
    category: RetrofitCategory
    description: str
    cost_per_sqft: Range
    energy_savings_pct: Range
    emissions_reduction_pct: Range
    payback_years: Range
    applicable_building_types: Union[str, FrozenSet[str]] = ALL_BUILDING_TYPES
    icon: str = ''

    def applies_to(self, building_type: Union[BuildingType, str]) -> bool:
        if self.applicable_building_types == ALL_BUILDING_TYPES:
            return True
        return type_key(building_type) in self.applicable_building_types


def _range(values: Any, label: str) -> Range:
    try:
        low, high = (float(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be a [low, high] pair, got {values!r}") from exc
    if low > high:
        raise ValueError(f"{label} has low > high: {values!r}")
    return Range(low, high)


def parse_retrofit_option(entry: Mapping[str, Any]) -> RetrofitOption:
    """Build a ``RetrofitOption`` from a raw catalogue entry."""
    retrofit_id = entry['id']
    applicable = entry.get('applicable_building_types', ALL_BUILDING_TYPES)
    if applicable != ALL_BUILDING_TYPES:
        applicable = frozenset(type_key(BuildingType(t)) for t in applicable)

    return RetrofitOption(
        id=retrofit_id,
        name=entry['name'],
        category=RetrofitCategory(entry['category']),
        description=entry.get('description', ''),
        cost_per_sqft=_range(entry['cost_per_sqft'], f"{retrofit_id}.cost_per_sqft"),
        energy_savings_pct=_range(entry['energy_savings_pct'], f"{retrofit_id}.energy_savings_pct"),
        emissions_reduction_pct=_range(
            entry['emissions_reduction_pct'], f"{retrofit_id}.emissions_reduction_pct"
        ),
        payback_years=_range(entry['payback_years'], f"{retrofit_id}.payback_years"),
        applicable_building_types=applicable,
        icon=entry.get('icon', ''),
    )


@dataclass(frozen=True)
class ReferenceData:
    """Immutable lookup service queried by building type or measure id."""

    emission_factors: Mapping[str, float]
    energy_cost_rates: Mapping[str, float]
    penalty_rate: float
    thresholds: Mapping[str, LL97Threshold]
    retrofits: Mapping[str, RetrofitOption]
    overlap_factor: float = 0.85
    overlap_min_measures: int = 2
    net_savings_horizons: tuple = (10, 20)
    financing: Mapping[str, Any] = field(default_factory=dict)
    categories: tuple = ()
    building_type_labels: Mapping[str, str] = field(default_factory=dict)
    typical_eui: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    usage_estimation: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_config(cls) -> "ReferenceData":
        """Load every reference table from ``config/config.yaml``."""
        thresholds = {
            building_type: LL97Threshold(building_type=building_type, **limits)
            for building_type, limits in get_ll97_thresholds().items()
        }
        retrofits = {}
        for entry in get_retrofit_catalogue():
            option = parse_retrofit_option(entry)
            retrofits[option.id] = option

        financial = get_financial_params()
        reference = cls(
            emission_factors=get_emission_factors(),
            energy_cost_rates=get_energy_cost_rates(),
            penalty_rate=get_penalty_rate(),
            thresholds=thresholds,
            retrofits=retrofits,
            overlap_factor=financial['overlap_factor'],
            overlap_min_measures=financial['overlap_min_measures'],
            net_savings_horizons=tuple(financial['net_savings_horizons_years']),
            financing=get_financing_params(),
            categories=tuple(
                (category['id'], category['name']) for category in get_retrofit_categories()
            ),
            building_type_labels=get_building_type_labels(),
            typical_eui=get_typical_eui(),
            usage_estimation=get_usage_estimation_params(),
        )
        logger.debug(
            f"Loaded reference data: {len(thresholds)} threshold entries, "
            f"{len(retrofits)} retrofit measures"
        )
        return reference

    def lookup_threshold(self, building_type: Union[BuildingType, str]) -> Optional[LL97Threshold]:
        return self.thresholds.get(type_key(building_type))

    def lookup_retrofit(self, retrofit_id: str) -> Optional[RetrofitOption]:
        return self.retrofits.get(retrofit_id)

    def get_retrofit(self, retrofit_id: str) -> RetrofitOption:
        """Strict lookup; raises ``RetrofitNotFoundError`` for unknown ids."""
        option = self.lookup_retrofit(retrofit_id)
        if option is None:
            logger.error(f"Retrofit option not found in catalogue: {retrofit_id}")
            raise RetrofitNotFoundError(retrofit_id)
        return option

    def applicable_retrofits(
        self,
        building_type: Union[BuildingType, str],
        category: Optional[Union[RetrofitCategory, str]] = None,
    ) -> List[RetrofitOption]:
        """Measures that apply to ``building_type``, in catalogue order."""
        wanted = RetrofitCategory(category) if category is not None else None
        return [
            option for option in self.retrofits.values()
            if option.applies_to(building_type)
            and (wanted is None or option.category == wanted)
        ]

    def building_type_label(self, building_type: Union[BuildingType, str]) -> str:
        key = type_key(building_type)
        return self.building_type_labels.get(key, key)

    def overlap_factor_for(self, measure_count: int) -> float:
        """Diminishing-returns discount for combining ``measure_count`` measures."""
        return self.overlap_factor if measure_count >= self.overlap_min_measures else 1.0


@lru_cache(maxsize=1)
def default_reference_data() -> ReferenceData:
    """Reference data loaded once from the project configuration."""
    return ReferenceData.from_config()
