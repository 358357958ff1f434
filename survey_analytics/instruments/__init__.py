"""
Instrument Risk Profile

Trader return series -> {mean, std_dev, risk_adjusted_return, ...}.
Pure and stateless.

Version: instrument_profile_v1
"""

from .models import Instrument, InstrumentRiskProfile, InstrumentSummary, MONTHS, CRORE
from .profile import (
    parse_instrument,
    compute_risk_profile,
    profile_for_question,
    population_mean,
    population_std_dev,
)

__all__ = [
    "Instrument",
    "InstrumentRiskProfile",
    "InstrumentSummary",
    "MONTHS",
    "CRORE",
    "parse_instrument",
    "compute_risk_profile",
    "profile_for_question",
    "population_mean",
    "population_std_dev",
]

__version__ = "instrument_profile_v1"
