"""
Confronto tra corrispettivo pattuito e parametro ministeriale (Legge 49/2023).
"""
import logging
from typing import Any

from app.services.tariffe.models import ComplianceStatus, ComplianceVerdict
from app.utils.parsing import is_number, parse_number

logger = logging.getLogger(__name__)


def _as_optional(value: float):
    return float(value) if is_number(value) else None


def compare_compliance(reference: Any, minimum: Any, agreed_fee: Any = None) -> ComplianceVerdict:
    """
    Calcola scostamento e stato di conformità.

    - pattuito effettivo = agreed_fee se interpretabile, altrimenti reference
    - delta = pattuito - reference
    - percentuale = delta / reference * 100 (solo con reference != 0), 2 decimali
    - SOTTO_SOGLIA se pattuito < minimum; senza minimo, se delta < 0
    - NON_DETERMINABILE se manca il pattuito oppure sia minimo che delta
    """
    ref = parse_number(reference)
    min_value = parse_number(minimum)
    agreed = parse_number(agreed_fee)

    effective = agreed if is_number(agreed) else ref
    has_effective = is_number(effective)
    has_ref = is_number(ref)
    has_min = is_number(min_value)

    delta = effective - ref if has_effective and has_ref else None
    percent = None
    if delta is not None and ref != 0:
        percent = round(delta / ref * 100, 2)

    if not has_effective or (not has_min and delta is None):
        status = ComplianceStatus.NON_DETERMINABILE
    elif has_min:
        status = ComplianceStatus.SOTTO_SOGLIA if effective < min_value else ComplianceStatus.CONFORME
    else:
        status = ComplianceStatus.SOTTO_SOGLIA if delta < 0 else ComplianceStatus.CONFORME

    verdict = ComplianceVerdict(
        reference=_as_optional(ref),
        minimum=_as_optional(min_value),
        agreed_fee=_as_optional(effective),
        delta=delta,
        percent_delta=percent,
        status=status,
    )
    logger.debug(f"Conformità: delta={delta} perc={percent} stato={status.value}")
    return verdict
