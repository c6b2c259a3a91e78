"""A Streamlit web frontend rendering the detailed weather card from the API."""

import streamlit as st
import requests

# --- Page and API Configuration ---
st.set_page_config(page_title="Detailed Weather", page_icon="🌤️", layout="centered")
API_BASE = "http://localhost:8000"
PRESETS = {
    "Seoul": (37.5665, 126.9780),
    "Busan": (35.1796, 129.0756),
    "Jeju": (33.4996, 126.5312),
}


def get_api_session():
    """Gets the requests.Session object from streamlit's session state."""
    if "api_session" not in st.session_state:
        st.session_state.api_session = requests.Session()
    return st.session_state.api_session


def metric_box(column, label: str, value: str):
    """Renders one bordered metric tile."""
    with column.container(border=True):
        st.caption(label)
        st.subheader(value)


# --- Main App ---
st.title("🌤️ Detailed Weather")

# --- API Health Check ---
try:
    health_response = get_api_session().get(f"{API_BASE}/health", timeout=3)
    if (
        health_response.status_code != 200
        or health_response.json().get("status") != "healthy"
    ):
        st.error(
            "API is not running or is unhealthy. Please start the backend server.",
            icon="🚨",
        )
        st.stop()
except requests.exceptions.ConnectionError:
    st.error(
        "Could not connect to the API. Please ensure the backend server is running.",
        icon="🚨",
    )
    st.stop()

# --- Location selection ---
with st.sidebar:
    st.header("Location")
    preset = st.selectbox("Preset", list(PRESETS))
    location = st.text_input("Name", value=preset)
    default_lat, default_lon = PRESETS[preset]
    lat = st.number_input("Latitude", value=default_lat, min_value=-90.0, max_value=90.0)
    lon = st.number_input(
        "Longitude", value=default_lon, min_value=-180.0, max_value=180.0
    )
    force_refresh = st.button("Refresh", use_container_width=True)

# --- Fetch ---
with st.spinner("Loading detailed weather..."):
    try:
        if force_refresh:
            response = get_api_session().post(
                f"{API_BASE}/weather/detail/refresh",
                params={"location": location},
                timeout=30,
            )
        else:
            response = get_api_session().get(
                f"{API_BASE}/weather/detail",
                params={"location": location, "lat": lat, "lon": lon},
                timeout=30,
            )
    except requests.exceptions.RequestException as e:
        st.error(f"Error contacting the API: {e}")
        st.stop()

if response.status_code != 200:
    st.error(f"Error: {response.status_code} - {response.text}")
    st.stop()

payload = response.json()
state = payload["state"]

if state["status"] == "loading":
    st.info("Loading detailed weather...")
    st.stop()

if state["status"] == "failed":
    st.error(state["message"])
    st.stop()

card = payload["card"]

# --- Header ---
st.header(card["location"])
if card.get("icon_url"):
    st.image(card["icon_url"], width=96)
st.markdown(f"# {card['temp']}°")
st.caption(card["description"])

# --- Detailed Info Grid ---
left, right = st.columns(2)
metric_box(left, "Feels like", f"{card['feels_like']}°")
metric_box(right, "Humidity", f"{card['humidity']}%")
left, right = st.columns(2)
metric_box(left, "Pressure", f"{card['pressure']} hPa")
metric_box(right, "Wind", f"{card['wind_speed']} m/s")

# --- Air Quality ---
st.subheader("Air quality")
with st.container(border=True):
    st.caption("Air Quality Index (AQI)")
    st.subheader(card["aqi_label"])
    st.write(f"PM2.5: {card['pm25']} µg/m³")
    st.write(f"PM10: {card['pm10']} µg/m³")

# --- Sunrise/Sunset ---
st.subheader("Sunrise / Sunset")
left, right = st.columns(2)
metric_box(left, "Sunrise", card["sunrise"])
metric_box(right, "Sunset", card["sunset"])
