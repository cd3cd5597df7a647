"""
Servizio Calcolo Compensi - Tabella C (Dottori Commercialisti)

Ogni riquadro della Tabella C è una strategia con la stessa interfaccia
compute(input) -> ScheduleResult (righe scaglioni + range min/max).
Il registro SCHEDULES associa il codice riquadro (r1, r2, ..., r11)
alla sua strategia.

Riferimenti normativi:
- D.M. 140/2012, Tabella C
- Legge 49/2023 (equo compenso)
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from app.constants import tabella_c as tc
from app.services.tariffe.models import (
    CalculationInput,
    FeeRange,
    ScheduleResult,
    TierComputation,
    TierRow,
    ZERO_RANGE,
)
from app.utils.parsing import (
    format_currency,
    format_rate,
    is_number,
    parse_number,
    safe_float,
    tier_span,
)

logger = logging.getLogger(__name__)

NO_TIERS_ROW = TierRow("N/D", "Scaglioni non disponibili per questo riquadro", "-")
NO_INPUT_ROW = TierRow("N/D", "Nessun dato disponibile", "-")


def format_range(low: float, high: float) -> str:
    """'1.000,00 € / 2.000,00 €'"""
    return f"{format_currency(low)} / {format_currency(high)}"


def rate_from_intensity(min_rate: float, max_rate: float, intensity: str) -> float:
    if intensity == "min":
        return min_rate
    if intensity == "max":
        return max_rate
    return (min_rate + max_rate) / 2


@dataclass(frozen=True)
class ProportionalTier:
    lower: float
    upper: Optional[float]
    min_rate: float
    max_rate: float
    range_label: str
    rate_label: str

    @classmethod
    def from_table(cls, row: tuple) -> "ProportionalTier":
        return cls(*row)

    def span(self, value: float) -> float:
        return tier_span(value, self.lower, math.inf if self.upper is None else self.upper)


@dataclass(frozen=True)
class FixedFeeItem:
    id: str
    label: str
    amount: float


def _tiers(table: Sequence[tuple]) -> Tuple[ProportionalTier, ...]:
    return tuple(ProportionalTier.from_table(row) for row in table)


def _base_value(inp: CalculationInput, fields: Sequence[str]) -> float:
    """Somma dei valori base; i valori non interpretabili contano 0."""
    return sum(safe_float(getattr(inp, name, None)) for name in fields)


# ============================================
# STRATEGIE
# ============================================

class Riquadro(ABC):
    """Strategia di calcolo di un riquadro della Tabella C."""

    code: str = ""

    @abstractmethod
    def compute(self, inp: CalculationInput) -> ScheduleResult:
        ...

    def extra_input_rows(self, inp: CalculationInput) -> List[TierRow]:
        """Righe aggiuntive del riepilogo dati, specifiche del riquadro."""
        return []


class ScaglioniRiquadro(Riquadro):
    """
    Riquadro a scaglioni contigui su un unico valore base.

    override:
      - None: ogni scaglione riporta il range min/max
      - "aliquota": aliquota personalizzata per scaglione (aliquota_scaglione_N)
      - "intensity": intensità per scaglione (intensity_scaglione_N: min / mid / max)
    Lo scaglione con override riporta un'unica aliquota e un unico importo.
    """

    def __init__(
        self,
        code: str,
        table: Sequence[tuple],
        base_fields: Sequence[str] = ("valore",),
        total_label: Optional[str] = None,
        override: Optional[str] = None,
        row_label: str = "Fascia",
    ):
        self.code = code
        self.tiers = _tiers(table)
        self.base_fields = tuple(base_fields)
        self.total_label = total_label
        self.override = override
        self.row_label = row_label

    def boundaries(self) -> List[float]:
        return [t.lower for t in self.tiers] + [math.inf]

    def _override_rate(self, inp: CalculationInput, index: int, tier: ProportionalTier) -> Optional[float]:
        if self.override == "aliquota":
            rate = parse_number(inp.custom_rate(index))
            return float(rate) if is_number(rate) else None
        if self.override == "intensity":
            intensity = inp.intensity(index)
            if intensity:
                return rate_from_intensity(tier.min_rate, tier.max_rate, intensity)
        return None

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        base = _base_value(inp, self.base_fields)
        rows: List[TierRow] = []
        total = ZERO_RANGE

        for index, tier in enumerate(self.tiers, start=1):
            span = tier.span(base)
            label = f"{self.row_label} {index}"
            rate = self._override_rate(inp, index, tier)
            if rate is not None:
                amount = span * rate
                rows.append(TierRow(
                    label,
                    f"{tier.range_label} | Quota: {format_currency(span)} | Aliquota: {format_rate(rate)}",
                    format_currency(amount),
                ))
                total = total + FeeRange.single(amount)
            else:
                part = FeeRange(span * tier.min_rate, span * tier.max_rate)
                rows.append(TierRow(
                    label,
                    f"{tier.range_label} | Quota: {format_currency(span)} | Aliquota: {tier.rate_label}",
                    format_range(part.min, part.max),
                ))
                total = total + part

        if self.total_label:
            rows.append(TierRow("Totale", self.total_label, format_range(total.min, total.max)))

        return ScheduleResult(rows=rows, aggregate=total)


class LiquidazioneRiquadro(Riquadro):
    """Riquadro 2: attivo a scaglioni + passivo ad aliquota unica."""

    code = "r2"

    def __init__(self):
        self.attivo = _tiers(tc.SCAGLIONI_R2_ATTIVO)
        self.passivo_min, self.passivo_max, self.passivo_label = tc.ALIQUOTE_R2_PASSIVO

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        attivo = safe_float(inp.valore)
        passivo = safe_float(inp.valore2)
        rows: List[TierRow] = []
        total = ZERO_RANGE

        for index, tier in enumerate(self.attivo, start=1):
            span = tier.span(attivo)
            part = FeeRange(span * tier.min_rate, span * tier.max_rate)
            rows.append(TierRow(
                f"Attivo {index}",
                f"{tier.range_label} | Quota: {format_currency(span)} | Aliquota: {tier.rate_label}",
                format_range(part.min, part.max),
            ))
            total = total + part

        passivo_part = FeeRange(passivo * self.passivo_min, passivo * self.passivo_max)
        rows.append(TierRow(
            "Passivo",
            f"Sul totale passivo accertato: {format_currency(passivo)} | Aliquota: {self.passivo_label}",
            format_range(passivo_part.min, passivo_part.max),
        ))
        total = total + passivo_part

        rows.append(TierRow("Totale", "Somma attivo + passivo", format_range(total.min, total.max)))
        return ScheduleResult(rows=rows, aggregate=total)


class ComponentiRiquadro(Riquadro):
    """Riquadri 4 e 5.1: tre basi indipendenti (reddito, attività, passività)."""

    def __init__(self, code: str, components: Sequence[tuple]):
        self.code = code
        self.components = tuple(components)

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        rows: List[TierRow] = []
        total = ZERO_RANGE

        for label, field, min_rate, max_rate, rate_label in self.components:
            raw = parse_number(getattr(inp, field, None))
            base = float(raw) if is_number(raw) else 0.0
            part = FeeRange(base * min_rate, base * max_rate)
            shown = format_currency(float(raw)) if is_number(raw) else "-"
            rows.append(TierRow(label, f"Base: {shown} | Aliquota: {rate_label}", format_range(part.min, part.max)))
            total = total + part

        rows.append(TierRow("Totale", "Somma delle tre componenti", format_range(total.min, total.max)))
        return ScheduleResult(rows=rows, aggregate=total)


class DichiarazioniRiquadro(Riquadro):
    """Riquadro 10.1: somma di tariffe fisse per le voci selezionate."""

    code = "r10_1"

    def __init__(self):
        self.items: Dict[str, FixedFeeItem] = {
            item_id: FixedFeeItem(item_id, label, amount)
            for item_id, (label, amount) in tc.TARIFFE_DICHIARAZIONI.items()
        }

    def selected(self, inp: CalculationInput) -> List[str]:
        return list(inp.dichiarazioni_multi or [])

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        rows: List[TierRow] = []
        total = 0.0
        for item_id in self.selected(inp):
            item = self.items.get(item_id)
            if item is None:
                logger.debug(f"Voce dichiarazione sconosciuta ignorata: {item_id}")
                continue
            total += item.amount
            rows.append(TierRow("Voce", item.label, format_currency(item.amount)))

        rows.append(TierRow("Totale", "Somma tariffe fisse", format_currency(total)))
        return ScheduleResult(rows=rows, aggregate=FeeRange.single(total))

    def extra_input_rows(self, inp: CalculationInput) -> List[TierRow]:
        return [TierRow("Voci selezionate", "Conteggio", str(len(self.selected(inp))))]


class PercentualeRiquadro(Riquadro):
    """
    Riquadri 10.2 e 10.3: range ministeriale 1% - 5% sul valore.

    Il 10.2 riporta anche il valore medio; il 10.3 accetta un'aliquota
    personalizzata (aliquota_consulenza) che sostituisce il range nel
    totale, lasciando il range ministeriale come riferimento.
    """

    def __init__(self, code: str, base_label: str, show_midpoint: bool = False, allow_custom_rate: bool = False):
        self.code = code
        self.base_label = base_label
        self.show_midpoint = show_midpoint
        self.allow_custom_rate = allow_custom_rate
        self.min_rate = tc.ALIQUOTA_TRIBUTARIA_MIN
        self.max_rate = tc.ALIQUOTA_TRIBUTARIA_MAX

    def custom_rate(self, inp: CalculationInput) -> Optional[float]:
        if not self.allow_custom_rate:
            return None
        rate = parse_number(inp.aliquota_consulenza)
        return float(rate) if is_number(rate) else None

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        base = safe_float(inp.valore)
        ministerial = FeeRange(base * self.min_rate, base * self.max_rate)
        rows: List[TierRow] = []

        custom = self.custom_rate(inp)
        if custom is not None:
            amount = base * custom
            rows.append(TierRow(
                "Valore personalizzato",
                f"{self.base_label}: {format_currency(base)} | Aliquota selezionata: {format_rate(custom)}",
                format_currency(amount),
            ))
            rows.append(TierRow("Range ministeriale", "Min (1%) / Max (5%)", format_range(ministerial.min, ministerial.max)))
            return ScheduleResult(rows=rows, aggregate=FeeRange.single(amount))

        rows.append(TierRow(
            "Range ministeriale",
            f"{self.base_label}: {format_currency(base)} | Aliquota: 1% - 5%",
            format_range(ministerial.min, ministerial.max),
        ))
        if self.show_midpoint:
            rows.append(TierRow("Media", "Valore medio", format_currency((ministerial.min + ministerial.max) / 2)))
        return ScheduleResult(rows=rows, aggregate=ministerial)


class CollegioSindacaleRiquadro(Riquadro):
    """
    Riquadro 11: compenso fisso fino a 5M, tre scaglioni con aliquote
    minime, poi scatti fissi per ogni 100M (o frazione) oltre 800M.
    """

    code = "r11"

    def __init__(self):
        self.tiers = _tiers(tc.SCAGLIONI_R11)
        self.step_size = tc.SINDACI_SCATTO_AMPIEZZA
        self.step_min, self.step_max = tc.SINDACI_SCATTO_COMPENSO
        self.fixed_min, self.fixed_max = tc.SINDACI_BASE_FISSA

    @staticmethod
    def raw_base(inp: CalculationInput) -> float:
        v1 = parse_number(inp.valore)
        v2 = parse_number(inp.valore2)
        if not is_number(v1):
            return float("nan")
        return v1 + v2 if is_number(v2) else v1

    def steps(self, base: float) -> int:
        cap = self.tiers[-1].upper
        if not is_number(base) or base <= cap:
            return 0
        return math.ceil((base - cap) / self.step_size)

    def compute(self, inp: CalculationInput) -> ScheduleResult:
        base = self.raw_base(inp)
        total = FeeRange(self.fixed_min, self.fixed_max)
        rows = [TierRow("Base fissa", "Fino a 5.000.000 €", format_range(self.fixed_min, self.fixed_max))]

        for index, tier in enumerate(self.tiers, start=1):
            span = tier.span(base)
            part = FeeRange(span * tier.min_rate, span * tier.max_rate)
            rows.append(TierRow(
                f"Fascia {index}",
                f"{tier.range_label} | Quota: {format_currency(span)} | Aliquota: {tier.rate_label}",
                format_range(part.min, part.max),
            ))
            total = total + part

        steps = self.steps(base)
        if steps:
            part = FeeRange(steps * self.step_min, steps * self.step_max)
            rows.append(TierRow("Oltre 800M", f"Ogni 100M oltre 800M | Scatti: {steps}", format_range(part.min, part.max)))
            total = total + part

        return ScheduleResult(rows=rows, aggregate=total)

    def extra_input_rows(self, inp: CalculationInput) -> List[TierRow]:
        base = self.raw_base(inp)
        shown = format_currency(base) if is_number(base) else "-"
        return [TierRow("Base", "Sommatoria reddito + attività", shown)]


# ============================================
# REGISTRO
# ============================================

SCHEDULES: Dict[str, Riquadro] = {
    "r1": ScaglioniRiquadro("r1", tc.SCAGLIONI_R1, base_fields=("valore", "valore2")),
    "r2": LiquidazioneRiquadro(),
    "r3": ScaglioniRiquadro("r3", tc.SCAGLIONI_R3, total_label="Somma fasce"),
    "r4": ComponentiRiquadro("r4", tc.COMPONENTI_R4),
    "r5_1": ComponentiRiquadro("r5_1", tc.COMPONENTI_R5_1),
    "r5_2": ScaglioniRiquadro("r5_2", tc.SCAGLIONI_R5_2, total_label="Somma fasce"),
    "r7_1": ScaglioniRiquadro("r7_1", tc.SCAGLIONI_R7_1, total_label="Somma fasce"),
    "r7_2": ScaglioniRiquadro("r7_2", tc.SCAGLIONI_R7_2, total_label="Somma fasce"),
    "r8_1": ScaglioniRiquadro("r8_1", tc.SCAGLIONI_R8_1, override="aliquota"),
    "r8_2": ScaglioniRiquadro("r8_2", tc.SCAGLIONI_R8_2, override="intensity"),
    "r9": ScaglioniRiquadro("r9", tc.SCAGLIONI_R9),
    "r10_1": DichiarazioniRiquadro(),
    "r10_2": PercentualeRiquadro("r10_2", "Valore pratica", show_midpoint=True),
    "r10_3": PercentualeRiquadro("r10_3", "Valore contestazione", allow_custom_rate=True),
    "r11": CollegioSindacaleRiquadro(),
}


def get_schedule(schedule_id: Optional[str]) -> Optional[Riquadro]:
    return SCHEDULES.get(schedule_id or "")


def normative_reference_for(schedule_id: Optional[str], document_type: Optional[str] = None) -> str:
    """Riferimento normativo del riquadro; mai vuoto, anche per codici sconosciuti."""
    if schedule_id == "r8_2":
        if document_type in tc.DOC_TYPES_FINANZIAMENTI:
            return tc.NORMATIVA_R8_2_FINANZIAMENTI
        if document_type in tc.DOC_TYPES_ECONOMICA:
            return tc.NORMATIVA_R8_2_ECONOMICA
        return tc.NORMATIVA_R8_2_GENERICA
    return tc.NORMATIVA_RIQUADRI.get(
        schedule_id or "",
        f"Tabella C, {schedule_id or 'Riquadro N/D'} (Dottori Commercialisti)",
    )


def _plain_number(value: float) -> str:
    return f"{value:g}"


def input_rows_for(schedule_id: Optional[str], inp: CalculationInput, criterio: Optional[str] = None) -> List[TierRow]:
    """Righe 'Riepilogo Dati Inseriti': solo i campi presenti e interpretabili."""
    rows: List[TierRow] = []

    for label, detail, field in (
        ("Valore", "Valore di riferimento", "valore"),
        ("Valore 2", "Secondo valore", "valore2"),
        ("Valore 3", "Terzo valore", "valore3"),
    ):
        n = parse_number(getattr(inp, field))
        if is_number(n):
            rows.append(TierRow(label, detail, format_currency(n)))

    for tier in (1, 2):
        rate = parse_number(inp.custom_rate(tier))
        if is_number(rate):
            rows.append(TierRow(f"Aliquota fascia {tier}", "Valore selezionato", format_rate(rate)))
    for tier in (1, 2):
        intensity = inp.intensity(tier)
        if intensity:
            rows.append(TierRow(f"Intensità fascia {tier}", "Selezione utente", intensity))

    consulenza = parse_number(inp.aliquota_consulenza)
    if is_number(consulenza):
        rows.append(TierRow("Aliquota consulenza", "Valore selezionato", format_rate(consulenza)))

    pct = parse_number(inp.percentuale)
    if is_number(pct):
        rows.append(TierRow("Percentuale", "Posizionamento nel range (0%=min, 100%=max)", f"{_plain_number(pct)}%"))

    pattuito = parse_number(inp.corrispettivo_pattuito)
    if is_number(pattuito):
        rows.append(TierRow("Corrispettivo pattuito", "Valore inserito", format_currency(pattuito)))

    if criterio:
        rows.append(TierRow("Criterio", "Selezione valore", str(criterio)))

    schedule = get_schedule(schedule_id)
    if schedule is not None:
        rows.extend(schedule.extra_input_rows(inp))
    return rows


def compute_tiers(schedule_id: Optional[str], inp: CalculationInput, criterio: Optional[str] = None) -> TierComputation:
    """
    Calcola righe di input e righe scaglioni per il riquadro.

    Un codice sconosciuto non solleva eccezioni: restituisce scaglioni
    vuoti e aggregate=None (il chiamante usa NO_TIERS_ROW).
    """
    input_rows = input_rows_for(schedule_id, inp, criterio)
    schedule = get_schedule(schedule_id)
    if schedule is None:
        logger.warning(f"Riquadro sconosciuto: {schedule_id!r}")
        return TierComputation(input_rows=input_rows, tier_rows=[], aggregate=None)

    result = schedule.compute(inp)
    logger.debug(
        f"Riquadro {schedule_id}: {len(result.rows)} righe, "
        f"range {result.aggregate.min:.2f} - {result.aggregate.max:.2f}"
    )
    return TierComputation(input_rows=input_rows, tier_rows=result.rows, aggregate=result.aggregate)


def tier_rows_or_placeholder(rows: List[TierRow]) -> List[TierRow]:
    return rows if rows else [NO_TIERS_ROW]


def input_rows_or_placeholder(rows: List[TierRow]) -> List[TierRow]:
    return rows if rows else [NO_INPUT_ROW]
