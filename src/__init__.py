"""
Air Quality Dashboard

Modules:
- aqi_dashboard: live WAQI feed, load state machine, view model, Streamlit page + CLI
"""
