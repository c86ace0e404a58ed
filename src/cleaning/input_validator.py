"""
Input Validation Module

Checks building, energy usage and retrofit selection inputs before an
analysis is run. The analysis core assumes validated input; callers (the CLI,
a form front end) run these checks first and refuse to analyse on any issue.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from loguru import logger

from config.config import get_validation_params
from src.modeling.analysis_schema import BuildingInfo, BuildingType, EnergyUsage, type_key
from src.modeling.reference_data import ReferenceData, default_reference_data

BUILDING_TYPES = {member.value for member in BuildingType}


class InputValidationError(ValueError):
    """Raised when analysis inputs fail validation."""

    def __init__(self, issues: Sequence[str]):
        self.issues = list(issues)
        super().__init__("Invalid analysis inputs: " + "; ".join(self.issues))


def _as_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_float(value: Any) -> Any:
    """Numeric text becomes a float; anything else is left for the validator to report."""
    number = _as_number(value)
    return value if number is None else number


def _to_int(value: Any) -> Any:
    number = _as_number(value)
    if number is None:
        return value
    return int(number) if number.is_integer() else number


def parse_building_info(raw: Mapping[str, Any]) -> BuildingInfo:
    """Build ``BuildingInfo`` from a raw mapping (YAML/JSON input)."""
    return BuildingInfo(
        address=str(raw.get('address', '')).strip(),
        square_footage=_to_float(raw.get('square_footage', 0)),
        building_type=str(raw.get('building_type', '')),
        year_built=_to_int(raw.get('year_built', 0)),
        number_of_units=_to_int(raw.get('number_of_units')),
        number_of_floors=_to_int(raw.get('number_of_floors')),
    )


def parse_energy_usage(raw: Optional[Mapping[str, Any]]) -> EnergyUsage:
    """Build ``EnergyUsage`` from a raw mapping; absent channels default to zero."""
    raw = raw or {}
    return EnergyUsage(
        electricity_kwh=_to_float(raw.get('electricity_kwh') or 0.0),
        natural_gas_therms=_to_float(raw.get('natural_gas_therms') or 0.0),
        fuel_oil_gallons=_to_float(raw.get('fuel_oil_gallons') or 0.0),
        steam_mlbs=_to_float(raw.get('steam_mlbs') or 0.0),
        district_chilled_water_ton_hrs=_to_float(raw.get('district_chilled_water_ton_hrs') or 0.0),
    )


class InputValidator:
    """
    Validates analysis inputs and keeps a per-check issue count.
    """

    def __init__(self, reference: Optional[ReferenceData] = None, current_year: Optional[int] = None):
        """Initialize the validator with configuration settings."""
        self.reference = reference or default_reference_data()
        self.params = get_validation_params()
        self.current_year = current_year or date.today().year
        self.validation_report: Dict[str, int] = {
            'building_issues': 0,
            'energy_issues': 0,
            'retrofit_issues': 0,
        }

    def validate_building_info(self, building: BuildingInfo) -> List[str]:
        issues = []

        if not str(building.address or '').strip():
            issues.append("Address is required")

        area = _as_number(building.square_footage)
        if area is None or area <= 0:
            issues.append(f"Square footage must be greater than zero (got {building.square_footage!r})")

        if type_key(building.building_type) not in BUILDING_TYPES:
            issues.append(f"Unknown building type: {type_key(building.building_type)!r}")

        min_year = int(self.params.get('min_year_built', 1800))
        year = _as_number(building.year_built)
        if year is None or not min_year < year <= self.current_year:
            issues.append(
                f"Year built must be after {min_year} and no later than {self.current_year} "
                f"(got {building.year_built!r})"
            )

        for label, value in (
            ('Number of units', building.number_of_units),
            ('Number of floors', building.number_of_floors),
        ):
            if value is None:
                continue
            number = _as_number(value)
            if number is None or number <= 0:
                issues.append(f"{label} must be positive when provided (got {value!r})")

        self.validation_report['building_issues'] = len(issues)
        return issues

    def validate_energy_usage(self, usage: EnergyUsage) -> List[str]:
        issues = []
        values = {}

        for field_name, value in usage.to_dict().items():
            number = _as_number(value)
            if number is None:
                issues.append(f"{field_name} must be numeric (got {value!r})")
            elif number < 0:
                issues.append(f"{field_name} cannot be negative (got {number})")
            else:
                values[field_name] = number

        required = self.params.get('required_fuel_fields', [])
        if required and not any(values.get(name, 0) > 0 for name in required):
            issues.append(
                "At least one of electricity, natural gas, fuel oil or steam usage must be provided"
            )

        self.validation_report['energy_issues'] = len(issues)
        return issues

    def validate_retrofit_selection(
        self,
        selected_retrofit_ids: Sequence[str],
        building_type: Any = None,
    ) -> List[str]:
        issues = []
        seen = set()

        for retrofit_id in selected_retrofit_ids:
            if retrofit_id in seen:
                issues.append(f"Retrofit selected more than once: {retrofit_id}")
                continue
            seen.add(retrofit_id)

            option = self.reference.lookup_retrofit(retrofit_id)
            if option is None:
                issues.append(f"Unknown retrofit id: {retrofit_id}")
            elif building_type is not None and not option.applies_to(building_type):
                logger.warning(
                    f"Retrofit {retrofit_id} is not typically applicable to {type_key(building_type)} buildings"
                )

        self.validation_report['retrofit_issues'] = len(issues)
        return issues

    def validate(
        self,
        building: BuildingInfo,
        usage: EnergyUsage,
        selected_retrofit_ids: Sequence[str],
    ) -> List[str]:
        """
        Run all checks.

        Returns:
            List of human-readable issues (empty when inputs are valid)
        """
        issues = (
            self.validate_building_info(building)
            + self.validate_energy_usage(usage)
            + self.validate_retrofit_selection(selected_retrofit_ids, building.building_type)
        )

        if issues:
            for issue in issues:
                logger.warning(f"Validation issue: {issue}")
        else:
            logger.info("Inputs passed validation")

        return issues


def ensure_valid_inputs(
    building: BuildingInfo,
    usage: EnergyUsage,
    selected_retrofit_ids: Sequence[str],
    reference: Optional[ReferenceData] = None,
) -> None:
    """Raise ``InputValidationError`` listing every issue found."""
    issues = InputValidator(reference).validate(building, usage, selected_retrofit_ids)
    if issues:
        raise InputValidationError(issues)
