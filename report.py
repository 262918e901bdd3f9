# report.py
from typing import List, Optional

from calc_utils import cost_benefit_projection, payback_years, water_balance
from models import AssessmentReport, RainfallOutcome


def _fmt(value: float) -> str:
    return f"{value:,.0f}"


def convert_rows_to_markdown(header: List[str], rows: List[List[str]]) -> str:
    """Render a header and rows as a Markdown table."""
    markdown = "| " + " | ".join(header) + " |\n"
    markdown += "| " + " | ".join(["---"] * len(header)) + " |\n"
    for row in rows:
        if len(row) == len(header):
            markdown += "| " + " | ".join(row) + " |\n"
    return markdown


def render_markdown(report: AssessmentReport, rainfall: Optional[RainfallOutcome] = None, years: int = 10) -> str:
    """Printable feasibility report."""
    cost = report.cost_estimation
    payback = payback_years(cost)

    rainfall_note = ""
    if rainfall is not None and rainfall.kind == "fallback":
        rainfall_note = f" (fallback figure: {rainfall.reason})"

    sections = [
        f"# Feasibility Report: {report.project_name}",
        f"_{report.location}_",
        f"**{report.feasibility}** for Rainwater Harvesting "
        f"(confidence score {report.confidence_score}%: {report.confidence_reason})",
        "## Summary",
        convert_rows_to_markdown(["Measure", "Value"], [
            ["Rooftop area", f"{report.rooftop_area:g} m²"],
            ["Runoff coefficient", f"{report.runoff_coefficient:.2f}"],
            ["Water potential", f"{_fmt(report.water_collection_estimate)} L/year"],
            ["Annual demand", f"{_fmt(report.annual_demand)} L/year"],
            ["Recommended tank", f"{_fmt(report.optimal_tank_size)} L"],
            ["Recharge potential", f"{_fmt(report.groundwater_recharge_potential)} L/year"],
        ]),
        "## System Recommendation",
        convert_rows_to_markdown(["Item", "Detail"], [
            ["Structure type", report.structure_type],
            ["Tank material", report.tank_material],
            ["Local rainfall", f"{report.local_rainfall:g} mm/year{rainfall_note}"],
            ["Groundwater level", f"{report.groundwater_level:g} meters deep"],
        ]),
        "## Cost & Savings",
        convert_rows_to_markdown(["Item", "Amount"], [
            ["Estimated investment", f"₹ {_fmt(cost.investment)}"],
            ["Projected annual savings", f"₹ {_fmt(cost.annual_savings)}"],
            ["Return on investment", f"Approx. {payback} years" if payback is not None else "n/a"],
        ]),
        "## Cost-Benefit Analysis",
        convert_rows_to_markdown(["Year", "Initial Investment", "Cumulative Savings"], [
            [f"Year {p['year']}", f"₹ {_fmt(p['investment'])}", f"₹ {_fmt(p['cumulative_savings'])}"]
            for p in cost_benefit_projection(cost, years)
        ]),
        "## Annual Water Balance",
        convert_rows_to_markdown(["Flow", "Volume (L)"], [
            [name, _fmt(volume)] for name, volume in water_balance(report).items()
        ]),
    ]
    return "\n\n".join(s.rstrip("\n") for s in sections) + "\n"
