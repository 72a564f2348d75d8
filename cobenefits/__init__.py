"""Core (UI-agnostic) co-benefits dashboard logic.

This package contains:
- record parsing (semicolon text -> raw rows) and number coercion
- the dataset index (area lookup, benefit totals, ranking by ``sum``)
- the aggregation engine (selected impact, top benefit, top-N rankings, area search)
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- the single-user session (loading guard, coalesced recompute)
"""

__version__ = "0.1.0"
