"""
Live air quality dashboard (WAQI feed + Streamlit).

Modules:
- config: dashboard configuration and token loading
- errors: feed error taxonomy
- classification: AQI tiers + pollutant display metadata
- snapshot: immutable feed snapshot model
- waqi: WAQI feed HTTP client
- load_state: load lifecycle state machine
- view_model: presentation-ready values derived from a snapshot
- dashboard: Streamlit page
- cli: Typer command line
"""
