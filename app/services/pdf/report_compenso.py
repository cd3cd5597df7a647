"""
Report PDF del calcolo compenso - Legge 49/2023 (equo compenso).

Struttura del documento:
- Intestazione (logo, marchio, contatti) ripetuta su ogni pagina
- Box informativi pratica / professionista
- Metodologia: riferimento normativo, dati inseriti, scaglioni
- Modificatori applicati
- Riepilogo finale e confronto con il corrispettivo pattuito
- Piè di pagina con dicitura legale e "Pagina X di Y"
"""
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader

from app.config import settings
from app.services.pdf.layout import (
    FONT_BOLD,
    FONT_REGULAR,
    LEADING,
    LayoutCursor,
    Page,
    emit_pdf,
    text_height,
)
from app.services.tariffe import (
    CalculationInput,
    ComputationResult,
    compare_compliance,
    compute_modifiers,
    compute_tiers,
    input_rows_or_placeholder,
    normative_reference_for,
    tier_rows_or_placeholder,
)
from app.utils.parsing import format_currency, is_number, parse_number

logger = logging.getLogger(__name__)

# Tema
THEME_PRIMARY = "#1a237e"
THEME_POSITIVE = "#2e7d32"
THEME_NEGATIVE = "#c62828"
THEME_GRAY = "#f5f5f5"
THEME_BORDER = "#e0e0e0"
TEXT_COLOR = "#111111"
FOOTER_COLOR = "#333333"
FILL_BASE_FISSA = "#e8eaf6"
FILL_TOTALE = "#ede7f6"
FILL_CONFORME = "#e8f5e9"
FILL_SOTTO_SOGLIA = "#ffebee"

DISCLAIMER = "Il presente documento attesta la conformità ai sensi della Legge 49/2023."

TABLE_COLUMNS = (0.36, 0.42, 0.22)


class DocumentGenerationError(Exception):
    """Errore di scrittura del PDF generato."""
    pass


@dataclass(frozen=True)
class Branding:
    name: str
    phone: str
    email: str
    logo_path: Optional[Path] = None

    @classmethod
    def from_settings(cls) -> "Branding":
        return cls(
            name=settings.BRAND_NAME,
            phone=settings.BRAND_PHONE,
            email=settings.BRAND_EMAIL,
            logo_path=settings.LOGO_PATH,
        )


def load_logo(path: Optional[Path]) -> Optional[ImageReader]:
    """Il logo è opzionale: se manca o non è leggibile si prosegue senza."""
    if not path:
        return None
    try:
        if not Path(path).is_file():
            return None
        return ImageReader(str(path))
    except Exception as e:
        logger.debug(f"Logo non caricato ({path}): {e}")
        return None


# ============================================
# BLOCCHI
# ============================================

def make_header(branding: Branding, logo: Optional[ImageReader]) -> Callable[[LayoutCursor], None]:
    def draw_header(cursor: LayoutCursor) -> None:
        y = cursor.top
        start_x = cursor.left
        header_w = cursor.content_width

        if logo is not None:
            cursor.image(logo, start_x, y, 120, 36)

        cursor.text_at(branding.name.upper(), start_x, y + 6, header_w, FONT_BOLD, 12, THEME_PRIMARY, "right")
        cursor.text_at(branding.phone, start_x, y + 22, header_w, FONT_REGULAR, 9, THEME_PRIMARY, "right")
        cursor.text_at(branding.email, start_x, y + 34, header_w, FONT_REGULAR, 9, THEME_PRIMARY, "right")

        line_y = y + 54
        cursor.line(start_x, line_y, start_x + header_w, line_y, THEME_PRIMARY, 2)
        cursor.y = line_y + 10
        cursor.move_down(0.5, 9)

    return draw_header


def section_title(cursor: LayoutCursor, title: str, following_height: float = 0) -> None:
    """
    Titolo di sezione.

    following_height è l'altezza minima del blocco che segue: titolo e
    inizio del blocco vanno sulla stessa pagina, mai un titolo isolato a
    fondo pagina.
    """
    title_h = text_height(title, FONT_BOLD, 12, cursor.content_width)
    gap = 0.5 * 12 * LEADING
    cursor.ensure_space(title_h + gap + following_height)
    cursor.y += cursor.text_at(title, cursor.left, cursor.y, cursor.content_width, FONT_BOLD, 12, THEME_PRIMARY)
    cursor.move_down(0.5, 12)


def draw_two_column_info(cursor: LayoutCursor, left: List[Dict[str, str]], right: List[Dict[str, str]]) -> None:
    """Due elenchi etichetta/valore affiancati in un unico box."""
    max_w = cursor.content_width
    gap = 18
    col_w = (max_w - gap) / 2
    pad_x, pad_y = 10, 8
    label_lw, label_rw = 120, 140
    value_lw, value_rw = col_w - 132, col_w - 152

    def row_height(l, r) -> int:
        h = 16
        if l:
            h = max(h, text_height(l.get("label") or "", FONT_BOLD, 10, label_lw),
                    text_height(l.get("value") or "-", FONT_REGULAR, 10, value_lw))
        if r:
            h = max(h, text_height(r.get("label") or "", FONT_BOLD, 10, label_rw),
                    text_height(r.get("value") or "-", FONT_REGULAR, 10, value_rw))
        return int(math.ceil(h + 2))

    rows = max(len(left), len(right))
    pairs = [(left[i] if i < len(left) else None, right[i] if i < len(right) else None) for i in range(rows)]
    heights = [row_height(l, r) for l, r in pairs]
    box_h = sum(heights) + pad_y * 2

    cursor.ensure_space(box_h)
    start_x, y = cursor.left, cursor.y
    cursor.rect(start_x, y, max_w, box_h, fill=THEME_GRAY)
    cursor.rect(start_x, y, max_w, box_h, stroke=THEME_BORDER, line_width=1)

    cy = y + pad_y
    rx = start_x + col_w + gap
    for (l, r), rh in zip(pairs, heights):
        if l:
            cursor.text_at(l.get("label") or "", start_x + pad_x, cy, label_lw, FONT_BOLD, 10, TEXT_COLOR)
            cursor.text_at(l.get("value") or "-", start_x + pad_x + 122, cy, value_lw, FONT_REGULAR, 10, TEXT_COLOR)
        if r:
            cursor.text_at(r.get("label") or "", rx + pad_x, cy, label_rw, FONT_BOLD, 10, TEXT_COLOR)
            cursor.text_at(r.get("value") or "-", rx + pad_x + 142, cy, value_rw, FONT_REGULAR, 10, TEXT_COLOR)
        cy += rh

    cursor.y = y + box_h + 14


HIGHLIGHT_PAD_X, HIGHLIGHT_PAD_Y = 12, 10


def highlight_box_height(cursor: LayoutCursor, title: str, lines: Sequence[str]) -> float:
    inner_w = cursor.content_width - HIGHLIGHT_PAD_X * 2
    title_h = text_height(title, FONT_BOLD, 11, inner_w)
    lines_h = sum(text_height(str(line or ""), FONT_REGULAR, 10, inner_w) for line in lines)
    return HIGHLIGHT_PAD_Y + title_h + 8 + lines_h + HIGHLIGHT_PAD_Y


def draw_highlight_box(cursor: LayoutCursor, title: str, lines: Sequence[str]) -> None:
    max_w = cursor.content_width
    pad_x, pad_y = HIGHLIGHT_PAD_X, HIGHLIGHT_PAD_Y
    inner_w = max_w - pad_x * 2
    box_h = highlight_box_height(cursor, title, lines)

    cursor.ensure_space(box_h)
    start_x, y = cursor.left, cursor.y
    cursor.rect(start_x, y, max_w, box_h, fill=THEME_GRAY)
    cursor.rect(start_x, y, max_w, box_h, stroke=THEME_BORDER, line_width=1)

    cy = y + pad_y
    cy += cursor.text_at(title, start_x + pad_x, cy, inner_w, FONT_BOLD, 11, TEXT_COLOR)
    cy += 8
    for line in lines:
        cy += cursor.text_at(str(line or ""), start_x + pad_x, cy, inner_w, FONT_REGULAR, 10, TEXT_COLOR)

    cursor.y = y + box_h + 14


RowFill = Callable[[Sequence[str], int], Optional[str]]

ZEBRA_HEADER_H = 22
ZEBRA_PAD_X, ZEBRA_PAD_Y = 8, 6


def zebra_cell_widths(cursor: LayoutCursor) -> List[float]:
    return [p * cursor.content_width - ZEBRA_PAD_X * 2 for p in TABLE_COLUMNS]


def zebra_row_heights(cursor: LayoutCursor, rows: Sequence[Sequence[str]]) -> List[int]:
    """Altezza di ogni riga: la cella più alta delle tre, minimo 22."""
    cell_w = zebra_cell_widths(cursor)
    heights = []
    for r in rows:
        h0 = text_height(str(r[0] or ""), FONT_REGULAR, 10, cell_w[0])
        h1 = text_height(str(r[1] or ""), FONT_REGULAR, 10, cell_w[1])
        h2 = text_height(str(r[2] or ""), FONT_BOLD, 10, cell_w[2])
        heights.append(max(22, int(math.ceil(max(h0, h1, h2) + ZEBRA_PAD_Y * 2))))
    return heights


def zebra_table_lead_height(cursor: LayoutCursor, rows: Sequence[Sequence[str]]) -> float:
    # testata + prima riga: il resto della tabella può andare a capo pagina
    heights = zebra_row_heights(cursor, rows)
    return ZEBRA_HEADER_H + (heights[0] if heights else 0)


def draw_zebra_table(
    cursor: LayoutCursor,
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
    row_fill: Optional[RowFill] = None,
) -> None:
    """
    Tabella a tre colonne con righe alternate.

    L'altezza di ogni riga è la massima tra le tre celle a capo automatico.
    Sul cambio pagina si ripetono intestazione di pagina e riga di testata.
    """
    table_w = cursor.content_width
    col_w = [p * table_w for p in TABLE_COLUMNS]
    header_h = ZEBRA_HEADER_H
    pad_x, pad_y = ZEBRA_PAD_X, ZEBRA_PAD_Y
    cell_w = zebra_cell_widths(cursor)
    col_x = [0, col_w[0], col_w[0] + col_w[1]]

    def draw_header_row(y: float) -> None:
        start_x = cursor.left
        cursor.rect(start_x, y, table_w, header_h, fill=THEME_PRIMARY)
        for i, title in enumerate(columns):
            cursor.text_at(title, start_x + col_x[i] + pad_x, y + pad_y, cell_w[i], FONT_BOLD, 10,
                           "#FFFFFF", "right" if i == 2 else "left")

    heights = zebra_row_heights(cursor, rows)
    cursor.ensure_space(header_h + (heights[0] if heights else 0))
    draw_header_row(cursor.y)
    y = cursor.y + header_h

    for idx, (r, rh) in enumerate(zip(rows, heights)):
        if y + rh > cursor.bottom_limit:
            cursor.new_page()
            draw_header_row(cursor.y)
            y = cursor.y + header_h

        custom = row_fill(r, idx) if row_fill else None
        fill = custom or ("#FFFFFF" if idx % 2 == 0 else THEME_GRAY)
        start_x = cursor.left
        cursor.rect(start_x, y, table_w, rh, fill=fill)
        cursor.text_at(str(r[0] or ""), start_x + col_x[0] + pad_x, y + pad_y, cell_w[0], FONT_REGULAR, 10, TEXT_COLOR)
        cursor.text_at(str(r[1] or ""), start_x + col_x[1] + pad_x, y + pad_y, cell_w[1], FONT_REGULAR, 10, TEXT_COLOR)
        cursor.text_at(str(r[2] or ""), start_x + col_x[2] + pad_x, y + pad_y, cell_w[2], FONT_BOLD, 10, TEXT_COLOR, "right")
        y += rh

    cursor.y = y + 12


def draw_footer(c, page_number: int, page_count: int, width: float, height: float) -> None:
    margin = 40
    footer_y = height - margin + 8
    max_w = width - 2 * margin
    c.saveState()
    c.setFont(FONT_REGULAR, 8)
    c.setFillColor(colors.HexColor(FOOTER_COLOR))
    # footer_y è misurata dall'alto, come nel layout
    c.drawString(margin, height - (footer_y - 30) - 8 * 0.8, DISCLAIMER)
    c.drawCentredString(margin + max_w / 2, height - (footer_y - 8) - 8 * 0.8, f"Pagina {page_number} di {page_count}")
    c.restoreState()


# ============================================
# DATI DEL DOCUMENTO
# ============================================

def _parse_created_at(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now()


def format_datetime_it(value: datetime) -> str:
    return value.strftime("%d/%m/%Y, %H:%M:%S")


def generated_by(user: Dict[str, Any]) -> str:
    """'Commercialista Mario Rossi' oppure 'Professionista' se mancano i dati."""
    display_name = f"{user.get('nome') or ''} {user.get('cognome') or ''}".strip()
    professione = user.get("professione") or "Professionista"
    return f"{professione} {display_name}".strip()


def _display_amount(parsed: float, raw: Any) -> str:
    if is_number(parsed):
        return format_currency(parsed)
    return str(raw) if raw else "-"


def final_summary_rows(criterio: str, result: ComputationResult, inp: CalculationInput):
    """Righe del riepilogo finale e verdetto di conformità."""
    verdict = compare_compliance(result.chosen, result.min, inp.corrispettivo_pattuito)

    ref_display = _display_amount(parse_number(result.chosen), result.chosen)
    min_display = _display_amount(parse_number(result.min), result.min)
    if verdict.agreed_fee is not None:
        pattuito_display = format_currency(verdict.agreed_fee)
    else:
        pattuito_display = str(result.compenso_pattuito) if result.compenso_pattuito else "-"
    delta_display = format_currency(verdict.delta) if verdict.delta is not None else "-"

    below = verdict.is_below_threshold
    rows = [
        ["Parametro Ministeriale", f"Criterio: {criterio or '-'}", ref_display],
        ["Corrispettivo Pattuito", "Valore inserito dall'utente", pattuito_display],
        ["Scostamento (Delta)", "Pattuito - Ministeriale", delta_display],
        [
            "Stato Conformità Legge 49/2023",
            f"Sotto soglia (min {min_display})" if below else f"Conforme (min {min_display})",
            verdict.status_label,
        ],
    ]
    return rows, verdict, min_display


def _tier_row_fill(r: Sequence[str], idx: int) -> Optional[str]:
    label = str(r[0] or "").lower()
    if "base fissa" in label:
        return FILL_BASE_FISSA
    if "totale" in label:
        return FILL_TOTALE
    return None


# ============================================
# COSTRUZIONE E GENERAZIONE
# ============================================

def build_calculation_report(
    user: Dict[str, Any],
    calculation: Dict[str, Any],
    result: Union[ComputationResult, Dict[str, Any], None],
    branding: Optional[Branding] = None,
) -> List[Page]:
    """
    Impagina il documento del calcolo e restituisce le pagine.

    Nessun piè di pagina viene disegnato qui: il totale pagine è noto
    solo alla fine dell'impaginazione.
    """
    branding = branding or Branding.from_settings()
    if not isinstance(result, ComputationResult):
        result = ComputationResult.model_validate(result or {})

    raw_input = calculation.get("input_json") or {}
    inp = raw_input if isinstance(raw_input, CalculationInput) else CalculationInput.model_validate(raw_input)
    riquadro = str(calculation.get("riquadro") or "")
    criterio = str(calculation.get("criterio") or "")
    created_at = format_datetime_it(_parse_created_at(calculation.get("created_at")))

    normativa = normative_reference_for(riquadro, inp.document_type)
    tiers = compute_tiers(riquadro, inp, criterio)
    mods = compute_modifiers(riquadro, inp)

    cursor = LayoutCursor(header=make_header(branding, load_logo(branding.logo_path)))

    draw_two_column_info(
        cursor,
        left=[
            {"label": "Nome Pratica", "value": inp.nome_pratica or ""},
            {"label": "Cliente/Società", "value": inp.cliente_nome or ""},
        ],
        right=[
            {"label": "Data Generazione", "value": created_at},
            {"label": "Riferimento Normativo", "value": normativa},
        ],
    )
    draw_two_column_info(
        cursor,
        left=[
            {"label": "Documento generato da", "value": generated_by(user) or "-"},
            {"label": "Email Professionista", "value": user.get("email") or "-"},
        ],
        right=[
            {"label": "Data Generazione", "value": created_at},
        ],
    )

    normativa_h = text_height(normativa, FONT_REGULAR, 10, cursor.content_width) if normativa else 0
    section_title(cursor, "Dettaglio della Metodologia di Calcolo", normativa_h)
    if normativa:
        cursor.paragraph(normativa)
        cursor.move_down(0.4)

    input_rows = [r.as_cells() for r in input_rows_or_placeholder(tiers.input_rows)]
    tier_rows = [r.as_cells() for r in tier_rows_or_placeholder(tiers.tier_rows)]
    section_title(cursor, "Riepilogo Dati Inseriti", zebra_table_lead_height(cursor, input_rows))
    draw_zebra_table(cursor, columns=["Voce", "Dettaglio", "Valore"], rows=input_rows)
    draw_zebra_table(
        cursor,
        columns=["Fascia", "Descrizione Quota/Aliquota", "Importo Parziale"],
        rows=tier_rows,
        row_fill=_tier_row_fill,
    )

    section_title(cursor, "Modificatori e Coefficienti", highlight_box_height(cursor, "Modificatori Applicati", mods))
    draw_highlight_box(cursor, "Modificatori Applicati", mods)

    rows, verdict, min_display = final_summary_rows(criterio, result, inp)
    section_title(cursor, "Riepilogo Finale e Confronto", zebra_table_lead_height(cursor, rows))
    delta_known = verdict.delta is not None
    below = verdict.is_below_threshold

    def status_fill(r: Sequence[str], idx: int) -> Optional[str]:
        if "stato conformità" in str(r[0]).lower() and delta_known:
            return FILL_SOTTO_SOGLIA if below else FILL_CONFORME
        return None

    draw_zebra_table(cursor, columns=["Voce", "Dettaglio", "Valore"], rows=rows, row_fill=status_fill)

    if delta_known:
        esito = "corrispettivo sotto soglia" if below else "corrispettivo conforme"
        cursor.paragraph(
            f"Esito: {esito} (min {min_display}){verdict.percent_suffix}.",
            FONT_BOLD, 10, THEME_NEGATIVE if below else THEME_POSITIVE,
        )
        cursor.move_down(0.4)

    logger.info(f"Documento impaginato: riquadro={riquadro or '-'} pagine={len(cursor.pages)}")
    return cursor.pages


def render_calculation_pdf(
    user: Dict[str, Any],
    calculation: Dict[str, Any],
    result: Union[ComputationResult, Dict[str, Any], None],
    branding: Optional[Branding] = None,
) -> bytes:
    """Impagina e disegna il documento; restituisce i byte del PDF."""
    pages = build_calculation_report(user, calculation, result, branding)
    return emit_pdf(pages, footer=draw_footer, title="Calcolo Equo Compenso")


def write_document(file_path: Union[str, Path], data: bytes) -> Path:
    """
    Scrive il PDF in modo atomico: file temporaneo nella stessa cartella,
    poi rename. Un errore non lascia mai un documento parziale.
    """
    target = Path(file_path)
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("wb", dir=target.parent, suffix=".tmp", delete=False) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
        os.replace(tmp_name, target)
    except OSError as e:
        logger.exception(f"Errore scrittura documento {target}")
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise DocumentGenerationError(f"Impossibile scrivere il documento: {e}") from e
    return target


def generate_calculation_pdf(
    file_path: Union[str, Path],
    user: Dict[str, Any],
    calculation: Dict[str, Any],
    result: Union[ComputationResult, Dict[str, Any], None],
    branding: Optional[Branding] = None,
) -> Path:
    """Genera il PDF completo e lo scrive su file_path."""
    data = render_calculation_pdf(user, calculation, result, branding)
    path = write_document(file_path, data)
    logger.info(f"✅ PDF generato: {path} ({len(data)} bytes)")
    return path
