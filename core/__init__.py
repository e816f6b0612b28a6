"""Core (UI-agnostic) workshop dashboard logic.

This package contains:
- entity models and read-only data sources (CSV/JSON -> pandas)
- filter normalization
- page compute functions (JSON-serializable payloads)
- the profile menu state controller
- chart helpers (Altair -> Vega-Lite spec dict)
"""
