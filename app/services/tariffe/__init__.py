"""
Calcolo compensi professionali - Tabella C (Dottori Commercialisti).
"""
from .models import (
    CalculationInput,
    ComputationResult,
    ComplianceStatus,
    ComplianceVerdict,
    FeeRange,
    TierComputation,
    TierRow,
)
from .riquadri import (
    SCHEDULES,
    compute_tiers,
    get_schedule,
    input_rows_or_placeholder,
    normative_reference_for,
    tier_rows_or_placeholder,
)
from .modificatori import compute_modifiers
from .conformita import compare_compliance

__all__ = [
    "CalculationInput",
    "ComputationResult",
    "ComplianceStatus",
    "ComplianceVerdict",
    "FeeRange",
    "TierComputation",
    "TierRow",
    "SCHEDULES",
    "compute_tiers",
    "get_schedule",
    "input_rows_or_placeholder",
    "normative_reference_for",
    "tier_rows_or_placeholder",
    "compute_modifiers",
    "compare_compliance",
]
