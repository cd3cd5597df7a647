"""
Modelli del calcolo compensi (Tabella C).

CalculationInput e ComputationResult arrivano dal frontend in JSON:
i nomi dei campi seguono il payload originale tramite alias.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Numeric = Optional[Union[float, str]]


class CalculationInput(BaseModel):
    """Dati inseriti dall'utente per un singolo riquadro."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    valore: Numeric = None
    valore2: Numeric = None
    valore3: Numeric = None

    # Riquadro 8.1 - aliquota personalizzata per scaglione
    aliquota_scaglione_1: Numeric = None
    aliquota_scaglione_2: Numeric = None
    # Riquadro 8.2 - intensità per scaglione (min / mid / max)
    intensity_scaglione_1: Optional[str] = None
    intensity_scaglione_2: Optional[str] = None
    # Riquadro 10.3
    aliquota_consulenza: Numeric = None

    percentuale: Numeric = None
    corrispettivo_pattuito: Numeric = Field(default=None, alias="corrispettivoPattuito")

    # Riquadro 10.1
    dichiarazioni_multi: Optional[List[str]] = Field(default=None, alias="dichiarazioniMulti")
    # Riquadro 9
    esito_negativo: Optional[bool] = Field(default=None, alias="esitoNegativo")
    # Riquadro 11
    ruolo_sindaco: Optional[str] = Field(default=None, alias="ruoloSindaco")
    riduzione_comma2: Optional[bool] = Field(default=None, alias="riduzioneComma2")

    nome_pratica: Optional[str] = None
    cliente_nome: Optional[str] = None
    document_type: Optional[str] = Field(default=None, alias="documentType")

    def custom_rate(self, tier: int) -> Numeric:
        return getattr(self, f"aliquota_scaglione_{tier}", None)

    def intensity(self, tier: int) -> str:
        return getattr(self, f"intensity_scaglione_{tier}", None) or ""


class ComputationResult(BaseModel):
    """Range calcolato a monte e valore scelto secondo il criterio."""
    model_config = ConfigDict(extra="allow")

    min: Numeric = None
    mid: Numeric = None
    max: Numeric = None
    chosen: Numeric = None
    compenso_pattuito: Numeric = None


@dataclass(frozen=True)
class TierRow:
    """Riga della tabella scaglioni: (Fascia, Descrizione, Importo)."""
    label: str
    description: str
    amount: str

    def as_cells(self) -> List[str]:
        return [self.label, self.description, self.amount]


@dataclass(frozen=True)
class FeeRange:
    min: float
    max: float

    def __add__(self, other: "FeeRange") -> "FeeRange":
        return FeeRange(self.min + other.min, self.max + other.max)

    @classmethod
    def single(cls, amount: float) -> "FeeRange":
        return cls(amount, amount)


ZERO_RANGE = FeeRange(0.0, 0.0)


@dataclass
class ScheduleResult:
    rows: List[TierRow]
    aggregate: FeeRange


@dataclass
class TierComputation:
    """Output di compute_tiers: righe di input e righe scaglioni."""
    input_rows: List[TierRow]
    tier_rows: List[TierRow]
    aggregate: Optional[FeeRange] = None


class ComplianceStatus(str, Enum):
    CONFORME = "conforme"
    SOTTO_SOGLIA = "sotto_soglia"
    NON_DETERMINABILE = "non_determinabile"


@dataclass(frozen=True)
class ComplianceVerdict:
    """Esito del confronto corrispettivo pattuito / parametro ministeriale."""
    reference: Optional[float]
    minimum: Optional[float]
    agreed_fee: Optional[float]
    delta: Optional[float]
    percent_delta: Optional[float]
    status: ComplianceStatus

    @property
    def is_below_threshold(self) -> bool:
        return self.status is ComplianceStatus.SOTTO_SOGLIA

    @property
    def percent_suffix(self) -> str:
        """' (-30.00%)' oppure '' quando la percentuale è assente o zero."""
        if self.percent_delta is None or self.percent_delta == 0:
            return ""
        return f" ({self.percent_delta:.2f}%)"

    @property
    def status_label(self) -> str:
        if self.status is ComplianceStatus.NON_DETERMINABILE:
            return "N/D"
        if self.status is ComplianceStatus.SOTTO_SOGLIA:
            return f"SOTTO SOGLIA{self.percent_suffix}"
        return f"CONFORME{self.percent_suffix}"
