import base64

import requests
import streamlit as st

import config
from models import RooftopType

ASSESSMENT_URL = f"{config.BACKEND_URL}/assessment"
REPORT_URL = f"{config.BACKEND_URL}/assessment/report"
BLUEPRINT_URL = f"{config.BACKEND_URL}/blueprint/dimensions"

# Streamlit page config
st.set_page_config(page_title="Hydronix", page_icon="💧", layout="wide")

st.title("💧 Hydronix")
st.write("Assess **Rooftop Rainwater Harvesting** and **Artificial Recharge** potential.")

# Initialize form state
for key, default in (("roof_length", 0.0), ("roof_width", 0.0), ("result", None), ("params", None)):
    if key not in st.session_state:
        st.session_state[key] = default


def _post_json(url, payload):
    """POST to the backend and return (data, error_message)."""
    try:
        resp = requests.post(url, json=payload, timeout=60)
    except requests.exceptions.RequestException as e:
        return None, f"Request failed: {e}"
    if resp.status_code != 200:
        try:
            detail = resp.json().get("detail", resp.text)
        except ValueError:
            detail = resp.text
        return None, f"Server error {resp.status_code}: {detail}"
    return resp.json(), None


# --- Blueprint upload (pre-fills roof dimensions) ---
with st.expander("Extract roof dimensions from a blueprint", expanded=False):
    blueprint = st.file_uploader("Blueprint image", type=["png", "jpg", "jpeg", "webp"])
    if blueprint is not None:
        st.image(blueprint, width=320)
        if st.button("Analyze blueprint"):
            encoded = base64.b64encode(blueprint.getvalue()).decode("ascii")
            data_uri = f"data:{blueprint.type};base64,{encoded}"
            with st.spinner("Analyzing blueprint..."):
                dims, error = _post_json(BLUEPRINT_URL, {"blueprintDataUri": data_uri})
            if error:
                st.error(f"⚠️ Blueprint analysis failed. {error}")
            else:
                st.session_state.roof_length = float(dims["length"])
                st.session_state.roof_width = float(dims["width"])
                st.success(f"Roof dimensions filled in: {dims['length']} m × {dims['width']} m")

# --- Assessment form ---
with st.form("assessment"):
    st.subheader("Project Details")
    c1, c2 = st.columns(2)
    project_name = c1.text_input("Project Name", placeholder="e.g., Green Valley Apartments")
    location = c2.text_input("Location", placeholder="City name or 'lat, lon'")
    family_members = c1.number_input("Family Members", min_value=1, value=4, step=1)
    rooftop_type = c2.selectbox("Rooftop Type", [t.value for t in RooftopType], index=1)

    st.subheader("Rooftop & Space")
    c3, c4 = st.columns(2)
    roof_length = c3.number_input("Roof Length (m)", min_value=0.0, key="roof_length")
    roof_width = c4.number_input("Roof Width (m)", min_value=0.0, key="roof_width")
    tank_space_length = c3.number_input("Available Length for Tank (m)", min_value=0.0)
    tank_space_width = c4.number_input("Available Width for Tank (m)", min_value=0.0)

    submitted = st.form_submit_button("Generate Report")

if submitted:
    params = {
        "projectName": project_name,
        "location": location,
        "familyMembers": int(family_members),
        "roofLength": roof_length,
        "roofWidth": roof_width,
        "rooftopType": rooftop_type,
        "tankSpaceLength": tank_space_length,
        "tankSpaceWidth": tank_space_width,
    }
    try:
        resp = requests.get(ASSESSMENT_URL, params=params, timeout=60)
        if resp.status_code == 200:
            st.session_state.result = resp.json()
            st.session_state.params = params
        elif resp.status_code == 422:
            problems = [f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in resp.json()["detail"]]
            st.error("Please fix the form:\n\n- " + "\n- ".join(problems))
        else:
            st.error(f"Server error {resp.status_code}: {resp.text}")
    except requests.exceptions.RequestException as e:
        st.error(f"Request failed: {e}")

# --- Dashboard ---
result = st.session_state.result
if result:
    report = result["report"]
    cost = report["costEstimation"]

    st.header(f"Feasibility Report: {report['projectName']}")
    st.caption(report["location"])
    h1, h2 = st.columns(2)
    h1.metric("Feasibility for Rainwater Harvesting", report["feasibility"])
    h2.metric("Confidence Score", f"{report['confidenceScore']}%")
    if result["rainfall"]["kind"] == "fallback":
        st.warning(f"Live rainfall unavailable, using {report['localRainfall']:g} mm/year. ({result['rainfall']['reason']})")

    m1, m2, m3 = st.columns(3)
    m1.metric("Water Potential", f"{report['waterCollectionEstimate']:,} L/year")
    m1.caption(f"Estimated annual collection from a {report['rooftopArea']:g} m² roof.")
    m2.metric("Recharge Potential", f"{report['groundwaterRechargePotential']:,} L/year")
    m2.caption("Surplus water available for recharging groundwater.")
    m3.metric("Recommended Tank", f"{report['optimalTankSize']:,} Liters")
    m3.caption("Optimal tank size based on demand and harvest.")

    left, right = st.columns([2, 1])
    with left:
        st.subheader("Annual Water Balance")
        st.bar_chart(result["waterBalance"])
    with right:
        st.subheader("System Recommendation")
        st.markdown(f"**Structure Type**  \n{report['structureType']}")
        st.markdown(f"**Tank Material**  \n{report['tankMaterial']}")
        st.markdown(f"**Local Rainfall**  \n{report['localRainfall']:g} mm/year")
        st.markdown(f"**Groundwater Level**  \n{report['groundwaterLevel']:g} meters deep")

    left, right = st.columns([1, 2])
    with left:
        st.subheader("Cost & Savings")
        st.metric("Estimated Investment", f"₹ {cost['investment']:,}")
        st.metric("Projected Annual Savings", f"₹ {cost['annualSavings']:,}")
        payback = result.get("paybackYears")
        st.write(f"Return on Investment: approx. {payback} years" if payback is not None else "Return on Investment: n/a")
    with right:
        st.subheader("Cost-Benefit Analysis")
        projection = result["projection"]
        st.bar_chart({
            "Initial Investment": [p["investment"] for p in projection],
            "Cumulative Savings": [p["cumulative_savings"] for p in projection],
        })

    try:
        report_resp = requests.get(REPORT_URL, params=st.session_state.params, timeout=60)
        if report_resp.status_code == 200:
            st.download_button(
                "Download Report",
                data=report_resp.text,
                file_name=f"{report['projectName']}_feasibility.md",
                mime="text/markdown",
            )
    except requests.exceptions.RequestException as e:
        st.caption(f"Report download unavailable: {e}")
