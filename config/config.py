"""
Configuration loader for the LL97 Retrofit Loan Analysis project.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Define paths
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"
DATA_OUTPUTS_DIR = DATA_DIR / "outputs"

REQUIRED_ERAS = ('year_2024', 'year_2030', 'year_2035')


def load_config(config_file: str = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_file: Name of the configuration file

    Returns:
        Dictionary containing configuration parameters
    """
    config_path = CONFIG_DIR / config_file

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    return config


def _require_section(config: Dict[str, Any], key: str) -> Any:
    section = config.get(key)
    if section is None:
        raise ValueError(f"Missing '{key}' section in configuration.")
    return section


def get_emission_factors() -> Dict[str, float]:
    """Get emission factors (tCO2e per fuel unit) from config."""
    config = load_config()
    factors = _require_section(config, 'emission_factors')
    return {fuel: float(value) for fuel, value in factors.items()}


def get_energy_cost_rates() -> Dict[str, float]:
    """Get energy cost rates (USD per fuel unit) from config."""
    config = load_config()
    rates = _require_section(config, 'energy_cost_rates')
    return {fuel: float(value) for fuel, value in rates.items()}


def get_penalty_rate() -> float:
    """Return the LL97 penalty rate (USD per tCO2e over the limit)."""
    config = load_config()
    rate = _require_section(config, 'll97').get('penalty_rate_per_tco2e')
    if rate is None:
        raise ValueError("Missing penalty rate (config['ll97']['penalty_rate_per_tco2e']).")

    try:
        rate_value = float(rate)
    except (TypeError, ValueError) as exc:
        raise ValueError("Penalty rate must be numeric and greater than zero.") from exc

    if rate_value <= 0:
        raise ValueError("Penalty rate must be greater than zero.")

    return rate_value


def get_ll97_thresholds() -> Dict[str, Dict[str, float]]:
    """Get per-building-type emission limits (tCO2e/sf/yr) keyed by era."""
    config = load_config()
    thresholds = _require_section(config, 'll97').get('thresholds', {})

    validated = {}
    for building_type, limits in thresholds.items():
        missing = [era for era in REQUIRED_ERAS if era not in limits]
        if missing:
            raise ValueError(
                f"Threshold entry for '{building_type}' is missing eras: {', '.join(missing)}"
            )
        validated[building_type] = {era: float(limits[era]) for era in REQUIRED_ERAS}

    return validated


def get_building_type_labels() -> Dict[str, str]:
    """Get display labels for building types."""
    config = load_config()
    return config.get('building_type_labels', {})


def get_typical_eui() -> Dict[str, Dict[str, float]]:
    """Get typical energy use intensity (kBtu/sf/yr) by building type."""
    config = load_config()
    return config.get('typical_eui', {})


def get_usage_estimation_params() -> Dict[str, float]:
    """Get fuel split and unit conversions used when estimating energy usage."""
    config = load_config()
    return _require_section(config, 'usage_estimation')


def get_retrofit_categories() -> List[Dict[str, str]]:
    """Get retrofit categories in display order."""
    config = load_config()
    return config.get('retrofit_categories', [])


def get_retrofit_catalogue() -> List[Dict[str, Any]]:
    """Get the raw retrofit measure catalogue, in catalogue order."""
    config = load_config()
    catalogue = _require_section(config, 'retrofit_catalogue')

    seen = set()
    for entry in catalogue:
        retrofit_id = entry.get('id')
        if not retrofit_id:
            raise ValueError("Retrofit catalogue entry without an 'id'.")
        if retrofit_id in seen:
            raise ValueError(f"Duplicate retrofit id in catalogue: {retrofit_id}")
        seen.add(retrofit_id)

    return catalogue


def get_financial_params() -> Dict[str, Any]:
    """Get financial aggregation parameters (overlap factor, horizons) from config."""
    config = load_config()
    financial = dict(_require_section(config, 'financial'))

    overlap = financial.get('overlap_factor')
    if overlap is None:
        raise ValueError("Missing overlap factor (config['financial']['overlap_factor']).")

    try:
        overlap_value = float(overlap)
    except (TypeError, ValueError) as exc:
        raise ValueError("Overlap factor must be numeric.") from exc

    if not 0 < overlap_value <= 1:
        raise ValueError("Overlap factor must be in the interval (0, 1].")

    horizons = financial.get('net_savings_horizons_years') or []
    if len(horizons) != 2 or any(int(h) <= 0 for h in horizons):
        raise ValueError("Net savings horizons must list two positive years (short, long).")

    financial['overlap_factor'] = overlap_value
    financial['overlap_min_measures'] = int(financial.get('overlap_min_measures', 2))
    financial['net_savings_horizons_years'] = [int(h) for h in horizons]
    return financial


def get_financing_params() -> Dict[str, Any]:
    """Get thresholds used by the financing recommendation rules."""
    config = load_config()
    financing = dict(_require_section(config, 'financing'))

    for key in (
        'pace_min_project_cost',
        'construction_min_project_cost',
        'green_loan_excellent_max_payback_years',
    ):
        if key not in financing:
            raise ValueError(f"Missing financing parameter (config['financing']['{key}']).")
        financing[key] = float(financing[key])

    financing['clean_energy_measures'] = frozenset(financing.get('clean_energy_measures', []))
    financing['solar_measures'] = frozenset(financing.get('solar_measures', []))
    return financing


def get_validation_params() -> Dict[str, Any]:
    """Get input validation parameters from config."""
    config = load_config()
    return config.get('validation', {})


def ensure_directories():
    """Create necessary directories if they don't exist."""
    directories = [
        DATA_DIR,
        DATA_OUTPUTS_DIR,
        DATA_OUTPUTS_DIR / "reports",
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


if __name__ == "__main__":
    # Test configuration loading
    config = load_config()
    print("Configuration loaded successfully!")
    print(f"Project: {config['project']['name']}")
    print(f"Retrofit measures in catalogue: {len(config['retrofit_catalogue'])}")

    ensure_directories()
    print("Directory structure verified!")
