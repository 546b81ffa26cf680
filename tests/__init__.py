"""
Air Quality Dashboard Test Suite

Tests organized by module under tests/aqi_dashboard/:
- test_classification.py - AQI tiers + display metadata
- test_snapshot.py - payload parsing
- test_waqi.py - HTTP client (mocked session)
- test_load_state.py - load lifecycle + stale-response guard
- test_view_model.py - gauges, dominant flag, forecast series
- test_cli.py - Typer commands
- test_dashboard.py - sidebar series pickers (Streamlit stubbed)
"""
