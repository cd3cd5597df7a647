"""
Generazione PDF del calcolo compenso.
"""
from .report_compenso import (
    Branding,
    DocumentGenerationError,
    build_calculation_report,
    generate_calculation_pdf,
    render_calculation_pdf,
)

__all__ = [
    "Branding",
    "DocumentGenerationError",
    "build_calculation_report",
    "generate_calculation_pdf",
    "render_calculation_pdf",
]
