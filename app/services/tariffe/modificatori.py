"""
Modificatori e coefficienti per riquadro.

Le regole producono solo testo descrittivo da riportare nel documento:
aumenti per ruolo, riduzioni per esito e aliquote personalizzate non
vengono applicati agli importi degli scaglioni.
"""
from typing import Callable, Dict, List, Optional

from app.services.tariffe.models import CalculationInput
from app.utils.parsing import is_number, parse_number

NESSUN_MODIFICATORE = "Nessun modificatore applicato."

Rule = Callable[[CalculationInput], Optional[str]]


def _esito_negativo(inp: CalculationInput) -> Optional[str]:
    if inp.esito_negativo:
        return "Riduzione: esito negativo (-50%)."
    return None


def _tariffe_fisse(inp: CalculationInput) -> Optional[str]:
    return "Calcolo a tariffe fisse: somma delle voci selezionate."


def _intensita_scaglioni(inp: CalculationInput) -> Optional[str]:
    if inp.intensity(1) or inp.intensity(2):
        return "Intensità per scaglione applicata (min/medio/max)."
    return None


def _aliquota_consulenza(inp: CalculationInput) -> Optional[str]:
    if is_number(parse_number(inp.aliquota_consulenza)):
        return "Aliquota personalizzata applicata (1% - 5%)."
    return None


def _ruolo_sindaco(inp: CalculationInput) -> Optional[str]:
    ruolo = inp.ruolo_sindaco or "membro"
    if ruolo == "presidente":
        return "Aumento: Presidente Collegio Sindacale (+50%)."
    if ruolo == "sindaco_unico":
        return "Aumento: Sindaco Unico (+100%)."
    return None


def _riduzione_comma2(inp: CalculationInput) -> Optional[str]:
    if inp.riduzione_comma2:
        return "Riduzione: società di sola amministrazione/godimento o liquidazione (-50%)."
    return None


def _percentuale(inp: CalculationInput) -> Optional[str]:
    pct = parse_number(inp.percentuale)
    if is_number(pct):
        return f"Percentuale (posizionamento nel range 0%=min, 100%=max): {pct:g}%."
    return None


MODIFIER_RULES: Dict[str, List[Rule]] = {
    "r8_2": [_intensita_scaglioni],
    "r9": [_esito_negativo],
    "r10_1": [_tariffe_fisse],
    "r10_3": [_aliquota_consulenza],
    "r11": [_ruolo_sindaco, _riduzione_comma2],
}

# Valgono per ogni riquadro, dopo le regole specifiche
COMMON_RULES: List[Rule] = [_percentuale]


def compute_modifiers(schedule_id: Optional[str], inp: CalculationInput) -> List[str]:
    """Elenco dei modificatori da riportare; mai vuoto."""
    rules = MODIFIER_RULES.get(schedule_id or "", []) + COMMON_RULES
    mods = [text for text in (rule(inp) for rule in rules) if text]
    return mods or [NESSUN_MODIFICATORE]
