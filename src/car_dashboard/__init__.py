"""
Core package for the car sales analytics dashboard.

Submodules provide the listing record model, the filter engine, KPI
aggregation, chart-data transforms, data access, and user interface
rendering helpers that are orchestrated by the top-level `app.py`.
"""
