# file: src/aqi_dashboard/dashboard.py
"""Streamlit dashboard for the live WAQI feed.

Provides:
- Current AQI with status tier and 0-500 scale marker
- Pollutant and weather cards (dominant pollutant flagged)
- Daily forecast charts for two selectable pollutants
- Data source attributions

Run with:
    streamlit run src/aqi_dashboard/dashboard.py
"""

import sys
from pathlib import Path

import plotly.graph_objects as go
import streamlit as st

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.aqi_dashboard.config import DashboardConfig
from src.aqi_dashboard.load_state import LoadController, LoadPhase, LoadState
from src.aqi_dashboard.snapshot import AirQualitySnapshot
from src.aqi_dashboard.view_model import ForecastSeries, MeasurementCard, ViewModel, assemble
from src.aqi_dashboard.waqi import WAQIClient

CONFIG = DashboardConfig()

st.set_page_config(
    page_title=CONFIG.page_title,
    page_icon="🌫️",
    layout="wide",
)


def main():
    """Main dashboard application."""
    st.title(f"🌫️ {CONFIG.page_title}")
    st.markdown("Real-time air quality monitoring and forecasts")

    # One controller per browser session; reruns reuse the settled state.
    if "load_controller" not in st.session_state:
        st.session_state["load_controller"] = LoadController()
    controller: LoadController = st.session_state["load_controller"]

    try:
        client = WAQIClient(CONFIG)
    except EnvironmentError as e:
        st.error(str(e), icon="🔑")
        st.stop()

    if controller.state.phase is LoadPhase.NOT_STARTED:
        _load_with_spinner(controller, client)

    render_state(controller.state, controller, client)


def _load_with_spinner(controller: LoadController, client: WAQIClient) -> None:
    placeholder = st.empty()
    for state in controller.load(client.fetch_snapshot):
        if state.phase is LoadPhase.LOADING:
            with placeholder.container():
                render_loading()
    placeholder.empty()


def render_state(state: LoadState, controller: LoadController, client: WAQIClient) -> None:
    if state.phase is LoadPhase.FAILED:
        render_error(state.message or "", controller, client)
    elif state.phase is LoadPhase.READY and state.snapshot is not None:
        series_keys = select_series(state.snapshot)
        render_ready(assemble(state.snapshot, series_keys=series_keys, config=CONFIG))
    else:
        render_loading()


def select_series(snapshot: AirQualitySnapshot) -> tuple[str, ...]:
    """Sidebar pickers for the two forecast charts."""
    options = sorted(set(snapshot.forecast) | set(CONFIG.forecast_series))
    defaults = list(CONFIG.forecast_series) + options

    with st.sidebar:
        st.header("Forecast")
        first = st.selectbox("First series", options, index=options.index(defaults[0]))
        second = st.selectbox("Second series", options, index=options.index(defaults[1]))

    return (first, second)


def render_loading() -> None:
    with st.spinner("Loading air quality data..."):
        st.caption("Contacting the air quality feed")


def render_error(message: str, controller: LoadController, client: WAQIClient) -> None:
    st.error(f"**Error**\n\n{message}", icon="⚠️")
    if st.button("🔄 Retry"):
        controller.retry(client.fetch_snapshot)
        st.rerun()


def render_ready(vm: ViewModel) -> None:
    render_location(vm)
    render_aqi(vm)

    tab_pollutants, tab_weather = st.tabs(["Air Pollutants", "Weather Conditions"])
    with tab_pollutants:
        render_cards(vm.pollutant_cards, columns=4)
    with tab_weather:
        if vm.weather_cards:
            render_cards(vm.weather_cards, columns=4)
        else:
            st.info("No weather readings reported by this station.")

    render_forecast(vm.forecast)
    render_sources(vm)

    st.divider()
    st.caption("Air Quality Dashboard • Real-time environmental monitoring")


def render_location(vm: ViewModel) -> None:
    c1, c2, c3 = st.columns([3, 3, 1])
    with c1:
        st.subheader(f"📍 {vm.location.name}")
    with c2:
        st.markdown(f"🕒 Last updated: {vm.observed_label}")
    with c3:
        if vm.station_idx is not None:
            st.caption(f"ID: {vm.station_idx}")


def render_aqi(vm: ViewModel) -> None:
    with st.container(border=True):
        c1, c2 = st.columns([3, 1])
        with c1:
            st.markdown("#### Air Quality Index")
            st.metric("AQI", vm.aqi, help=vm.status.label)
            st.markdown(f"**{vm.status.label}**: {vm.status.description}")
            st.caption(f"Dominant pollutant: {vm.dominant_label}")
        with c2:
            st.markdown(
                f"<div style='width:140px;height:140px;border-radius:50%;"
                f"background:{vm.status.color};display:flex;align-items:center;"
                f"justify-content:center;color:white;font-weight:600'>AQI</div>",
                unsafe_allow_html=True,
            )

        st.progress(int(round(vm.scale_position)), text="0 (Good) → 500 (Hazardous)")


def render_cards(cards: tuple[MeasurementCard, ...], *, columns: int) -> None:
    if not cards:
        st.info("No readings reported by this station.")
        return

    cols = st.columns(columns)
    for i, card in enumerate(cards):
        with cols[i % columns]:
            with st.container(border=True):
                title = f"**{card.name}**"
                if card.is_dominant:
                    title += "  :orange[**Dominant**]"
                st.markdown(title)
                st.metric(card.name, f"{card.value:g} {card.unit}".strip(), label_visibility="collapsed")
                if card.gauge_percent is not None:
                    st.progress(int(round(card.gauge_percent)))


def _forecast_figure(series: ForecastSeries) -> go.Figure:
    df = series.to_frame()
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df["weekday"], y=df["avg"], name="Avg",
        mode="lines+markers", line=dict(width=2),
        customdata=df["date_label"], hovertemplate="%{customdata}<br>avg=%{y}<extra></extra>",
    ))
    for col in ("min", "max"):
        fig.add_trace(go.Scatter(
            x=df["weekday"], y=df[col], name=col.title(),
            mode="lines+markers", line=dict(width=1, dash="dash"),
            customdata=df["date_label"], hovertemplate=f"%{{customdata}}<br>{col}=%{{y}}<extra></extra>",
        ))
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=10, b=10), hovermode="x unified")
    return fig


def render_forecast(series_list: tuple[ForecastSeries, ...]) -> None:
    st.subheader("7-Day Forecast")
    st.caption("Predicted air quality for the next week")

    if not series_list:
        st.info("No forecast series selected.")
        return

    tabs = st.tabs([s.name for s in series_list])
    for tab, series in zip(tabs, series_list):
        with tab:
            if series.is_empty:
                st.info(f"No {series.name} forecast available for this station.")
                continue

            st.plotly_chart(_forecast_figure(series), width="stretch")

            cols = st.columns(min(len(series.points), 8))
            for i, point in enumerate(series.points[:8]):
                with cols[i]:
                    st.caption(point.weekday)
                    st.markdown(f"**{point.avg:g}**")
                    st.caption(f"{point.min:g}-{point.max:g}")


def render_sources(vm: ViewModel) -> None:
    st.subheader("Data Sources")
    st.caption("Air quality data provided by")
    if not vm.sources:
        st.caption("No attribution provided.")
        return
    for source in vm.sources:
        st.markdown(f"`{source.name}` [View Source →]({source.url})")


if __name__ == "__main__":
    main()
