"""
Impaginazione PDF a due fasi.

1. Layout: i blocchi vengono disposti su una lista di pagine (Page) tramite
   un LayoutCursor esplicito (pagina corrente + coordinata y dall'alto).
   Quando un blocco supera il margine inferiore riservato si apre una nuova
   pagina e si ridisegna l'intestazione.
2. Emissione: solo a layout completato, conoscendo il numero totale di
   pagine, emit_pdf disegna ogni pagina con reportlab e aggiunge il piè di
   pagina "Pagina X di Y".

Le coordinate del layout sono dall'alto (y cresce verso il basso); la
conversione al sistema reportlab avviene in fase di disegno.

Niente platypus: serve il controllo esplicito di ogni salto pagina e il
totale pagine noto prima di disegnare il primo piè di pagina.
"""
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Callable, List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

# Interlinea come multiplo della dimensione del font
LEADING = 1.2
ASCENT = 0.8

PAGE_MARGIN = 40
BOTTOM_RESERVE = 60


def wrap_text(text: str, font: str, size: float, width: float) -> List[str]:
    return simpleSplit(str(text or ""), font, size, width)


def text_height(text: str, font: str, size: float, width: float) -> float:
    return len(wrap_text(text, font, size, width)) * size * LEADING


# ============================================
# OPERAZIONI DI DISEGNO
# ============================================

@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 1

    def draw(self, c: canvas.Canvas, page_height: float) -> None:
        c.saveState()
        if self.fill:
            c.setFillColor(colors.HexColor(self.fill))
        if self.stroke:
            c.setStrokeColor(colors.HexColor(self.stroke))
            c.setLineWidth(self.line_width)
        c.rect(
            self.x, page_height - self.y - self.height, self.width, self.height,
            stroke=1 if self.stroke else 0, fill=1 if self.fill else 0,
        )
        c.restoreState()


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    line_width: float = 1

    def draw(self, c: canvas.Canvas, page_height: float) -> None:
        c.saveState()
        c.setStrokeColor(colors.HexColor(self.color))
        c.setLineWidth(self.line_width)
        c.line(self.x1, page_height - self.y1, self.x2, page_height - self.y2)
        c.restoreState()


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    width: float
    lines: Sequence[str]
    font: str = FONT_REGULAR
    size: float = 10
    color: str = "#111111"
    align: str = "left"

    @property
    def height(self) -> float:
        return len(self.lines) * self.size * LEADING

    def draw(self, c: canvas.Canvas, page_height: float) -> None:
        c.saveState()
        c.setFont(self.font, self.size)
        c.setFillColor(colors.HexColor(self.color))
        for i, line in enumerate(self.lines):
            baseline = page_height - (self.y + self.size * ASCENT + i * self.size * LEADING)
            if self.align == "right":
                c.drawRightString(self.x + self.width, baseline, line)
            elif self.align == "center":
                c.drawCentredString(self.x + self.width / 2, baseline, line)
            else:
                c.drawString(self.x, baseline, line)
        c.restoreState()


@dataclass(frozen=True)
class ImageOp:
    image: Any  # reportlab ImageReader
    x: float
    y: float
    width: float
    height: float

    def draw(self, c: canvas.Canvas, page_height: float) -> None:
        c.drawImage(
            self.image, self.x, page_height - self.y - self.height,
            width=self.width, height=self.height,
            preserveAspectRatio=True, anchor="nw", mask="auto",
        )


@dataclass
class Page:
    """Pagina in costruzione: elenco ordinato di operazioni di disegno."""
    ops: List[Any] = field(default_factory=list)
    header_end: int = 0

    @property
    def header_ops(self) -> List[Any]:
        return self.ops[:self.header_end]

    def texts(self) -> List[str]:
        return [line for op in self.ops if isinstance(op, TextOp) for line in op.lines]


# ============================================
# CURSORE DI LAYOUT
# ============================================

class LayoutCursor:
    """
    Stato di impaginazione di un singolo documento.

    Non è condiviso tra render diversi: ogni generazione ne crea uno.
    """

    def __init__(
        self,
        header: Optional[Callable[["LayoutCursor"], None]] = None,
        page_size=A4,
        margin: float = PAGE_MARGIN,
        bottom_reserve: float = BOTTOM_RESERVE,
    ):
        self.width, self.height = page_size
        self.margin = margin
        self.bottom_reserve = bottom_reserve
        self.header = header
        self.pages: List[Page] = []
        self.y = margin
        self.new_page()

    @property
    def page(self) -> Page:
        return self.pages[-1]

    @property
    def left(self) -> float:
        return self.margin

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def top(self) -> float:
        return self.margin

    @property
    def bottom_limit(self) -> float:
        return self.height - self.margin - self.bottom_reserve

    @property
    def body_top(self) -> float:
        """Prima y utile dopo l'intestazione della pagina corrente."""
        return self._body_top

    def new_page(self) -> None:
        self.pages.append(Page())
        self.y = self.top
        if self.header:
            self.header(self)
        self.page.header_end = len(self.page.ops)
        self._body_top = self.y

    def fits(self, height: float) -> bool:
        return self.y + height <= self.bottom_limit

    def ensure_space(self, height: float) -> bool:
        """Apre una nuova pagina se il blocco non entra; True se è stata aperta."""
        if self.fits(height) or self.y <= self._body_top:
            return False
        self.new_page()
        return True

    def move_down(self, lines: float = 1.0, size: float = 10) -> None:
        self.y += lines * size * LEADING

    # --- primitive ---

    def rect(self, x, y, width, height, fill=None, stroke=None, line_width=1) -> None:
        self.page.ops.append(RectOp(x, y, width, height, fill, stroke, line_width))

    def line(self, x1, y1, x2, y2, color, line_width=1) -> None:
        self.page.ops.append(LineOp(x1, y1, x2, y2, color, line_width))

    def image(self, image, x, y, width, height) -> None:
        self.page.ops.append(ImageOp(image, x, y, width, height))

    def text_at(self, text, x, y, width, font=FONT_REGULAR, size=10, color="#111111", align="left") -> float:
        """Testo a capo automatico in posizione assoluta; restituisce l'altezza."""
        op = TextOp(x, y, width, tuple(wrap_text(text, font, size, width)), font, size, color, align)
        self.page.ops.append(op)
        return op.height

    def paragraph(self, text, font=FONT_REGULAR, size=10, color="#111111", align="left") -> None:
        """Testo nel flusso: occupa la larghezza utile e avanza il cursore."""
        h = text_height(text, font, size, self.content_width)
        self.ensure_space(h)
        self.y += self.text_at(text, self.left, self.y, self.content_width, font, size, color, align)


# ============================================
# EMISSIONE
# ============================================

FooterFn = Callable[[canvas.Canvas, int, int, float, float], None]


def emit_pdf(pages: Sequence[Page], footer: Optional[FooterFn] = None, page_size=A4, title: str = "") -> bytes:
    """
    Disegna le pagine impaginate e restituisce i byte del PDF.

    Il totale pagine è noto prima di disegnare la prima pagina, quindi
    ogni piè di pagina riporta già il valore corretto.
    """
    width, height = page_size
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=page_size)
    if title:
        c.setTitle(title)
    total = len(pages)
    for number, page in enumerate(pages, start=1):
        for op in page.ops:
            op.draw(c, height)
        if footer:
            footer(c, number, total, width, height)
        c.showPage()
    c.save()
    data = buffer.getvalue()
    buffer.close()
    return data
