"""Core (UI-agnostic) call-center analytics.

This package contains:
- time, duration and status normalization
- readers for the phone, chat and ticket-queue exports
- the canonical record store and its load state
- aggregation functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
