"""
Services package.
Business logic layer.

ARCHITETTURA:
- tariffe/: calcolo compensi Tabella C (riquadri, modificatori, conformità)
- pdf/: impaginazione e generazione del documento PDF del calcolo
"""
from .tariffe import compute_tiers, compute_modifiers, compare_compliance
from .pdf import generate_calculation_pdf, render_calculation_pdf, DocumentGenerationError

__all__ = [
    "compute_tiers",
    "compute_modifiers",
    "compare_compliance",
    "generate_calculation_pdf",
    "render_calculation_pdf",
    "DocumentGenerationError",
]
