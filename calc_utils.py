# calc_utils.py
import math
from typing import Dict, List, Optional

from models import AssessmentInput, AssessmentReport, CostEstimation, SizingPolicy

DEFAULT_POLICY = SizingPolicy()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def runoff_coefficient(rooftop_type: Optional[str], policy: SizingPolicy = DEFAULT_POLICY) -> float:
    """Fraction of rainfall that runs off a roof of the given material.

    Unknown or missing roof types get the policy default (the sloped value).
    """
    key = getattr(rooftop_type, "value", rooftop_type)
    if not key:
        return policy.default_runoff_coefficient
    return policy.runoff_coefficients.get(str(key).strip().lower(), policy.default_runoff_coefficient)


def harvest_water_liters(roof_area_m2: float, annual_rainfall_mm: float, runoff_coeff: float) -> float:
    """Annual collectible runoff in liters."""
    rainfall_m = annual_rainfall_mm / 1000.0
    return roof_area_m2 * rainfall_m * runoff_coeff * 1000.0


def daily_demand_liters(family_members: int, policy: SizingPolicy = DEFAULT_POLICY) -> float:
    return family_members * policy.per_capita_demand_lpd


def recommend_tank_size(harvest_liters: float, daily_demand: float, policy: SizingPolicy = DEFAULT_POLICY) -> float:
    """Smallest of the three storage ceilings: share of harvest, reserve days of demand, hard cap."""
    return min(
        harvest_liters * policy.harvest_storage_fraction,
        daily_demand * policy.reserve_days,
        policy.max_tank_liters,
    )


def recharge_potential(harvest_liters: float, tank_liters: float) -> float:
    return max(0.0, harvest_liters - tank_liters)


def estimate_costs(harvest_liters: float, tank_liters: float, policy: SizingPolicy = DEFAULT_POLICY) -> Dict[str, float]:
    return {
        "investment": (tank_liters / 1000.0) * policy.tank_cost_per_m3,
        "annual_savings": (harvest_liters / 1000.0) * policy.water_price_per_kl,
    }


# ================================
# ASSESSMENT
# ================================
def assess(inputs: AssessmentInput, annual_rainfall_mm: float, policy: SizingPolicy = DEFAULT_POLICY) -> AssessmentReport:
    """Run the full sizing pipeline for one building.

    Inputs are assumed validated (positive geometry, at least one occupant,
    non-negative rainfall). Intermediate values stay unrounded; only the
    reported volumes and money are rounded.
    """
    rooftop_area = inputs.roof_length * inputs.roof_width
    coeff = runoff_coefficient(inputs.rooftop_type, policy)
    harvest = harvest_water_liters(rooftop_area, annual_rainfall_mm, coeff)

    daily_demand = daily_demand_liters(inputs.family_members, policy)
    annual_demand = daily_demand * policy.days_per_year

    tank_size = recommend_tank_size(harvest, daily_demand, policy)
    recharge = recharge_potential(harvest, tank_size)
    costs = estimate_costs(harvest, tank_size, policy)

    return AssessmentReport(
        project_name=inputs.project_name,
        location=inputs.location,
        rooftop_area=rooftop_area,
        runoff_coefficient=coeff,
        water_collection_estimate=round_half_up(harvest),
        daily_demand=round_half_up(daily_demand),
        annual_demand=round_half_up(annual_demand),
        optimal_tank_size=round_half_up(tank_size),
        groundwater_recharge_potential=round_half_up(recharge),
        cost_estimation=CostEstimation(
            investment=round_half_up(costs["investment"]),
            annual_savings=round_half_up(costs["annual_savings"]),
        ),
        feasibility=policy.feasibility,
        confidence_score=policy.confidence_score,
        confidence_reason=policy.confidence_reason,
        structure_type=policy.structure_type,
        tank_material=policy.tank_material,
        local_rainfall=annual_rainfall_mm,
        groundwater_level=policy.groundwater_level_m,
    )


# ================================
# COST / BENEFIT
# ================================
def payback_years(cost: CostEstimation) -> Optional[float]:
    """Years of savings needed to recover the investment, or None when nothing is saved."""
    if cost.annual_savings <= 0:
        return None
    return round(cost.investment / cost.annual_savings, 1)


def cost_benefit_projection(cost: CostEstimation, years: int = DEFAULT_POLICY.projection_years) -> List[Dict[str, int]]:
    return [
        {
            "year": year,
            "cumulative_savings": cost.annual_savings * year,
            "investment": cost.investment,
        }
        for year in range(1, years + 1)
    ]


def water_balance(report: AssessmentReport) -> Dict[str, int]:
    return {
        "Harvested": report.water_collection_estimate,
        "Demand": report.annual_demand,
        "Stored": report.optimal_tank_size,
        "Recharged": report.groundwater_recharge_potential,
    }

