# models.py
from enum import Enum
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RooftopType(str, Enum):
    FLAT = "flat"
    SLOPED = "sloped"
    TILED = "tiled"
    METAL = "metal"


class _Frozen(BaseModel):
    """Immutable value with camelCase aliases on the wire."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ================================
# INPUT / OUTPUT
# ================================
class AssessmentInput(_Frozen):
    project_name: str
    location: str
    family_members: int
    roof_length: float
    roof_width: float
    # free string: unknown roof types fall back to the default coefficient
    rooftop_type: Optional[str] = None
    # collected for downstream collaborators, not used in sizing
    tank_space_length: float = 0.0
    tank_space_width: float = 0.0


class CostEstimation(_Frozen):
    investment: int
    annual_savings: int


class AssessmentReport(_Frozen):
    project_name: str
    location: str
    rooftop_area: float
    runoff_coefficient: float
    water_collection_estimate: int
    daily_demand: int
    annual_demand: int
    optimal_tank_size: int
    groundwater_recharge_potential: int
    cost_estimation: CostEstimation
    feasibility: str
    confidence_score: float
    confidence_reason: str
    structure_type: str
    tank_material: str
    local_rainfall: float
    groundwater_level: float


# ================================
# POLICY
# ================================
class SizingPolicy(_Frozen):
    """Every constant the sizing engine uses.

    Swap in a different instance for regional tariffs or alternate demand
    norms; the engine itself has no literals of its own.
    """
    runoff_coefficients: Dict[str, float] = Field(default_factory=lambda: {
        RooftopType.FLAT.value: 0.70,
        RooftopType.SLOPED.value: 0.80,
        RooftopType.TILED.value: 0.85,
        RooftopType.METAL.value: 0.90,
    })
    default_runoff_coefficient: float = Field(0.80, gt=0, le=1)

    per_capita_demand_lpd: float = Field(135.0, gt=0)
    days_per_year: int = 365
    reserve_days: float = Field(10.0, gt=0)
    harvest_storage_fraction: float = Field(0.2, gt=0, le=1)
    max_tank_liters: float = Field(50000.0, gt=0)

    tank_cost_per_m3: float = Field(4000.0, ge=0)        # RCC tank
    water_price_per_kl: float = Field(20.0, ge=0)        # municipal tariff

    feasibility: str = "YES"
    confidence_score: float = 95.2
    confidence_reason: str = "Based on high rainfall & sufficient rooftop area."
    structure_type: str = "Rooftop Rainwater Harvesting with Recharge Pit"
    tank_material: str = "RCC (Reinforced Cement Concrete)"
    groundwater_level_m: float = 10.0

    projection_years: int = Field(10, ge=1)


# ================================
# LOCATION / RAINFALL
# ================================
class Coordinates(_Frozen):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ResolvedRainfall(_Frozen):
    kind: Literal["resolved"] = "resolved"
    value_mm: float


class FallbackRainfall(_Frozen):
    kind: Literal["fallback"] = "fallback"
    value_mm: float
    reason: str


RainfallOutcome = Union[ResolvedRainfall, FallbackRainfall]


# ================================
# BLUEPRINT
# ================================
class RoofDimensions(_Frozen):
    length: float
    width: float
