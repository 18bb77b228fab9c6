"""
WindSight — Wind Turbine Fault Scoring & Attribution

Rule-based fault classification with a SHAP-like explanation, driven by a
simulated real-time telemetry feed.
"""

__version__ = "1.0.0"
