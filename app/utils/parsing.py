"""
Utility functions for parsing and formatting numbers.

Gli importi arrivano dal frontend sia come numeri che come stringhe
già formattate all'italiana ("1.234,56"). Nessuna di queste funzioni
solleva eccezioni: un valore non interpretabile diventa NaN.
"""
import math
import re
from typing import Any, Optional

NAN = float("nan")

_NON_NUMERIC = re.compile(r"[^0-9,.\-]")


def is_number(value: Any) -> bool:
    """True se value è un numero finito (NaN e infiniti esclusi)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_number(value: Any) -> float:
    """
    Converte un valore numerico o una stringa in formato italiano in float.

    - numeri nativi: restituiti invariati
    - stringhe: rimuove tutto tranne cifre, virgola, punto e meno,
      elimina il punto delle migliaia e usa la virgola come decimale
    - input vuoto o non valido: NaN
    """
    if value is None or isinstance(value, bool):
        return NAN
    if isinstance(value, (int, float)):
        return value
    s = _NON_NUMERIC.sub("", str(value)).replace(".", "").replace(",", ".", 1)
    if s in ("", "-"):
        return NAN
    try:
        n = float(s)
    except ValueError:
        return NAN
    return n if math.isfinite(n) else NAN


def format_currency(value: Any) -> str:
    """
    Formatta un importo in euro secondo la convenzione italiana (1.234,50 €).

    Le stringhe passano invariate: il valore è già stato formattato a monte.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not is_number(value):
        return "-"
    formatted = f"{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{formatted} €"


def format_rate(rate: float) -> str:
    """Aliquota frazionaria -> percentuale con due decimali (0.015 -> '1.50%')."""
    return f"{rate * 100:.2f}%"


def tier_span(value: float, lower: float, upper: Optional[float] = math.inf) -> float:
    """
    Quota di value che ricade nello scaglione [lower, upper].

    upper=None o inf indica lo scaglione terminale illimitato.
    Il risultato non è mai negativo; un value non finito vale 0.
    """
    if not is_number(value):
        return 0.0
    if upper is None or upper == math.inf:
        capped = value
    else:
        capped = min(value, upper)
    return max(0.0, capped - lower)


def safe_float(value: Any, default: float = 0.0) -> float:
    """Come parse_number, ma con un default al posto di NaN."""
    n = parse_number(value)
    return float(n) if is_number(n) else default
