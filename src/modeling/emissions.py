"""Emissions and energy cost totals from annual per-fuel consumption."""

from __future__ import annotations

import math
from typing import Dict, Optional

from loguru import logger

from src.modeling.analysis_schema import EnergyUsage, type_key
from src.modeling.reference_data import ReferenceData, default_reference_data

# usage field -> (emission factor key, cost rate key)
FUEL_CHANNELS: Dict[str, tuple] = {
    'electricity_kwh': ('electricity', 'electricity'),
    'natural_gas_therms': ('natural_gas', 'natural_gas'),
    'fuel_oil_gallons': ('fuel_oil_2', 'fuel_oil'),
    'steam_mlbs': ('steam', 'steam'),
    'district_chilled_water_ton_hrs': ('chilled_water', 'chilled_water'),
}


def calculate_emissions(
    energy_usage: EnergyUsage,
    reference: Optional[ReferenceData] = None,
) -> float:
    """Total annual emissions in tCO2e (sum of quantity x emission factor)."""
    reference = reference or default_reference_data()
    total = 0.0
    for usage_field, (factor_key, _) in FUEL_CHANNELS.items():
        total += getattr(energy_usage, usage_field) * reference.emission_factors[factor_key]

    logger.debug(f"Annual emissions: {total:.2f} tCO2e")
    return total


def calculate_energy_costs(
    energy_usage: EnergyUsage,
    reference: Optional[ReferenceData] = None,
) -> float:
    """Total annual energy cost in USD (sum of quantity x cost rate)."""
    reference = reference or default_reference_data()
    total = 0.0
    for usage_field, (_, rate_key) in FUEL_CHANNELS.items():
        total += getattr(energy_usage, usage_field) * reference.energy_cost_rates[rate_key]

    logger.debug(f"Annual energy cost: ${total:,.2f}")
    return total


def _round_half_up(value: float) -> float:
    # Quantities are non-negative; halves go up, never to even
    return float(math.floor(value + 0.5))


def estimate_energy_usage(
    building_type: str,
    square_footage: float,
    reference: Optional[ReferenceData] = None,
) -> EnergyUsage:
    """
    Estimate annual usage from the typical EUI for a building type.

    Assumes a fuel mix of 60% electricity and 30% natural gas by site energy;
    remaining channels are left at zero.

    Args:
        building_type: Building type key (or ``BuildingType`` member)
        square_footage: Gross floor area, sq ft

    Returns:
        EnergyUsage with rounded electricity (kWh) and gas (therms)
    """
    reference = reference or default_reference_data()
    key = type_key(building_type)
    eui = reference.typical_eui.get(key)
    if eui is None:
        raise ValueError(f"No typical EUI available for building type '{key}'")

    params = reference.usage_estimation
    total_kbtu = float(eui['median']) * square_footage
    electricity_kbtu = total_kbtu * float(params['electricity_share'])
    gas_kbtu = total_kbtu * float(params['natural_gas_share'])

    usage = EnergyUsage(
        electricity_kwh=_round_half_up(electricity_kbtu / float(params['kbtu_per_kwh'])),
        natural_gas_therms=_round_half_up(gas_kbtu / float(params['kbtu_per_therm'])),
    )
    logger.info(
        f"Estimated usage for {key} ({square_footage:,.0f} sf): "
        f"{usage.electricity_kwh:,.0f} kWh, {usage.natural_gas_therms:,.0f} therms"
    )
    return usage
