"""
Survey Response Analytics & Risk-Profiling Service

Layers (leaves first):
- normalizer:   raw answer payloads -> typed canonical values
- instruments:  trader return series -> objective risk/return profile
- aggregation:  per-question statistics for a form
- risk:         per-respondent risk-aversion scoring + population analysis
- export:       wide-format CSV report

The engine is read-only: it never mutates forms, responses or answers.
"""

__version__ = "1.4.0"
