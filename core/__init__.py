"""Core (UI-agnostic) dashboard logic.

This package contains:
- data loading (JSON fallback chain -> pandas)
- date-range filtering and table state
- aggregations, KPIs and display formatting
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
