# api.py
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

import config
from blueprint import BlueprintExtractionError, extract_dimensions
from calc_utils import assess, cost_benefit_projection, payback_years, water_balance
from geocoding import geocode_place
from models import AssessmentInput, AssessmentReport, Coordinates, RainfallOutcome, RoofDimensions
from rainfall import resolve_location, resolve_rainfall
from report import render_markdown

log = logging.getLogger(__name__)

# plausibility ceiling for geometry and head count
MAX_PLAUSIBLE = 1_000_000

# ================================
# POLICY
# ================================
POLICY = config.load_policy()

# ================================
# FASTAPI APP
# ================================
app = FastAPI(title="Hydronix Rooftop Rainwater Harvesting Assessment")


# ================================
# API MODELS
# ================================
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssessmentRequest(_CamelModel):
    project_name: str = Field(..., min_length=2)
    location: str = Field(..., min_length=2)
    family_members: int = Field(..., ge=1, le=MAX_PLAUSIBLE)
    roof_length: float = Field(..., gt=0, le=MAX_PLAUSIBLE)
    roof_width: float = Field(..., gt=0, le=MAX_PLAUSIBLE)
    rooftop_type: Optional[str] = None
    tank_space_length: float = Field(..., gt=0, le=MAX_PLAUSIBLE)
    tank_space_width: float = Field(..., gt=0, le=MAX_PLAUSIBLE)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    def to_input(self) -> AssessmentInput:
        return AssessmentInput(**self.model_dump(exclude={"latitude", "longitude"}))


class AssessmentResponse(_CamelModel):
    report: AssessmentReport
    rainfall: RainfallOutcome = Field(..., discriminator="kind")
    coordinates: Coordinates
    payback_years: Optional[float] = None
    projection: List[Dict[str, int]]
    water_balance: Dict[str, int]


class BlueprintRequest(_CamelModel):
    blueprint_data_uri: str


def assessment_query(
    project_name: str = Query(..., alias="projectName", min_length=2),
    location: str = Query(..., min_length=2),
    family_members: int = Query(..., alias="familyMembers", ge=1, le=MAX_PLAUSIBLE),
    roof_length: float = Query(..., alias="roofLength", gt=0, le=MAX_PLAUSIBLE),
    roof_width: float = Query(..., alias="roofWidth", gt=0, le=MAX_PLAUSIBLE),
    rooftop_type: Optional[str] = Query(None, alias="rooftopType"),
    tank_space_length: float = Query(..., alias="tankSpaceLength", gt=0, le=MAX_PLAUSIBLE),
    tank_space_width: float = Query(..., alias="tankSpaceWidth", gt=0, le=MAX_PLAUSIBLE),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
) -> AssessmentRequest:
    return AssessmentRequest(
        project_name=project_name,
        location=location,
        family_members=family_members,
        roof_length=roof_length,
        roof_width=roof_width,
        rooftop_type=rooftop_type,
        tank_space_length=tank_space_length,
        tank_space_width=tank_space_width,
        latitude=latitude,
        longitude=longitude,
    )


# ================================
# ASSESSMENT PIPELINE
# ================================
def run_assessment(req: AssessmentRequest) -> Tuple[AssessmentReport, RainfallOutcome, Coordinates]:
    geocoder = geocode_place if config.GEOCODE_PLACE_NAMES else None
    coords = resolve_location(req.location, req.latitude, req.longitude, geocoder=geocoder)
    rainfall = resolve_rainfall(coords.latitude, coords.longitude)
    if rainfall.kind == "fallback":
        log.warning("Using fallback rainfall for %r: %s", req.project_name, rainfall.reason)

    report = assess(req.to_input(), rainfall.value_mm, POLICY)
    log.info(
        "Assessed %r: %s L/year harvest, %s L tank",
        report.project_name, report.water_collection_estimate, report.optimal_tank_size,
    )
    return report, rainfall, coords


def build_response(req: AssessmentRequest) -> AssessmentResponse:
    report, rainfall, coords = run_assessment(req)
    return AssessmentResponse(
        report=report,
        rainfall=rainfall,
        coordinates=coords,
        payback_years=payback_years(report.cost_estimation),
        projection=cost_benefit_projection(report.cost_estimation, POLICY.projection_years),
        water_balance=water_balance(report),
    )


# ================================
# ENDPOINTS
# ================================
@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/assessment", response_model=AssessmentResponse)
def assessment_endpoint(req: AssessmentRequest = Depends(assessment_query)):
    return build_response(req)


@app.post("/assessment", response_model=AssessmentResponse)
def assessment_post_endpoint(req: AssessmentRequest = Body(...)):
    return build_response(req)


@app.get("/assessment/report", response_class=PlainTextResponse)
def assessment_report_endpoint(req: AssessmentRequest = Depends(assessment_query)):
    report, rainfall, _ = run_assessment(req)
    return PlainTextResponse(
        render_markdown(report, rainfall, POLICY.projection_years),
        media_type="text/markdown",
    )


@app.post("/blueprint/dimensions", response_model=RoofDimensions)
def blueprint_endpoint(req: BlueprintRequest = Body(...)):
    try:
        return extract_dimensions(req.blueprint_data_uri)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BlueprintExtractionError as e:
        raise HTTPException(status_code=502, detail=str(e))


# ================================
# RUN APP
# ================================
if __name__ == "__main__":
    import uvicorn
    config.configure_logging()
    log.info("Starting FastAPI server on port 8000...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
