"""PDF export of the final report.

The sanitised report markup is converted into reportlab flowables: prose flows
through two columns on landscape letter pages, and the Gantt container
(``<div class="gantt-container-for-pdf">``) gets fresh single-column pages so the
schedule table keeps its full width.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from html import escape
from io import BytesIO
from typing import Dict, List, Optional, Tuple

from bs4.element import Tag
from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import (
    BaseDocTemplate,
    Frame,
    ListFlowable,
    ListItem,
    NextPageTemplate,
    PageBreak,
    PageTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
)

from .errors import StepValidationError
from .markup import parse_fragment

logger = logging.getLogger(__name__)

PAGE_SIZE = landscape(letter)
MARGIN = 60
COLUMN_GAP = 24
GANTT_CLASS = "gantt-container-for-pdf"

INLINE_TAGS: Dict[str, str] = {"strong": "b", "b": "b", "em": "i", "i": "i", "u": "u"}
HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4}
BLOCK_TAGS = {"p", "blockquote"}


# ---------------------------------------------------------------------------
# Markup -> blocks
# ---------------------------------------------------------------------------


@dataclass
class Cell:
    markup: str
    background: Optional[str] = None
    header: bool = False


@dataclass
class Block:
    """One top-level piece of the report: heading, paragraph, list, table or Gantt marker."""

    kind: str
    markup: str = ""
    level: int = 0
    ordered: bool = False
    items: List[str] = field(default_factory=list)
    rows: List[List[Cell]] = field(default_factory=list)


def _background(style: str | None) -> Optional[str]:
    if not style or ":" not in style:
        return None
    name, _, value = style.partition(":")
    if name.strip().lower() != "background-color":
        return None
    return value.strip().rstrip(";").strip() or None


class ReportParser:
    """Split report markup into ``Block`` objects with reportlab inline markup.

    Inline formatting still open when a block ends is closed in that block and
    reopened in the next one, so every block's markup is balanced.
    """

    def __init__(self) -> None:
        self.blocks: List[Block] = []
        self._inline: List[str] = []
        self._has_text = False
        self._open: List[Tuple[str, str]] = []
        self._heading: int | None = None
        self._lists: List[Tuple[bool, List[str]]] = []
        self._rows: List[List[Cell]] | None = None
        self._row: List[Cell] | None = None
        self._cell: Cell | None = None
        self._divs: List[bool] = []
        self._anchors: List[bool] = []

    def feed(self, html: str) -> None:
        self._walk(parse_fragment(html))

    def _walk(self, node: Tag) -> None:
        for child in node.children:
            if isinstance(child, Tag):
                self.start(child.name, child.attrs)
                self._walk(child)
                self.end(child.name)
            else:
                self.text(str(child))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _open_inline(self, opening: str, closing: str) -> None:
        self._inline.append(opening)
        self._open.append((opening, closing))

    def _close_inline(self) -> None:
        if self._open:
            self._inline.append(self._open.pop()[1])

    def _restart_inline(self) -> None:
        self._inline = [opening for opening, _ in self._open]
        self._has_text = False

    def _closing_markup(self) -> str:
        return "".join(closing for _, closing in reversed(self._open))

    def start(self, tag: str, attributes: Dict[str, str]) -> None:
        if tag in INLINE_TAGS:
            name = INLINE_TAGS[tag]
            self._open_inline(f"<{name}>", f"</{name}>")
        elif tag == "a":
            href = attributes.get("href") or ""
            self._anchors.append(bool(href))
            if href:
                self._open_inline(f'<a href="{escape(href, quote=True)}" color="blue">', "</a>")
        elif tag == "br":
            self._inline.append("<br/>")
        elif self._cell is not None:
            if tag in BLOCK_TAGS | {"li", "div"} and self._has_text:
                self._inline.append("<br/>")
        elif tag == "div":
            self._flush()
            gantt = GANTT_CLASS in (attributes.get("class") or "").split()
            if gantt:
                self.blocks.append(Block("gantt_start"))
            self._divs.append(gantt)
        elif tag in HEADING_TAGS:
            self._flush()
            self._heading = HEADING_TAGS[tag]
        elif tag in BLOCK_TAGS or tag == "li":
            self._flush()
        elif tag in ("ul", "ol"):
            self._flush()
            self._lists.append((tag == "ol", []))
        elif tag == "table":
            self._flush()
            self._rows = []
        elif tag == "tr" and self._rows is not None:
            self._row = []
        elif tag in ("td", "th") and self._row is not None:
            self._restart_inline()
            self._cell = Cell("", _background(attributes.get("style")), tag == "th")

    def end(self, tag: str) -> None:
        if tag in INLINE_TAGS:
            self._close_inline()
        elif tag == "a" and self._anchors:
            if self._anchors.pop():
                self._close_inline()
        elif tag in ("td", "th") and self._cell is not None and self._row is not None:
            self._cell.markup = "".join(self._inline).strip() + self._closing_markup() if self._has_text else ""
            self._row.append(self._cell)
            self._cell = None
            self._restart_inline()
        elif self._cell is not None:
            return
        elif tag == "tr" and self._rows is not None and self._row is not None:
            if self._row:
                self._rows.append(self._row)
            self._row = None
        elif tag == "table" and self._rows is not None:
            if self._rows:
                self.blocks.append(Block("table", rows=self._rows))
            self._rows = None
            self._restart_inline()
        elif tag in HEADING_TAGS:
            self._flush()
            self._heading = None
        elif tag in BLOCK_TAGS or tag == "li":
            self._flush()
        elif tag in ("ul", "ol") and self._lists:
            self._flush()
            ordered, items = self._lists.pop()
            if self._lists:
                self._lists[-1][1].extend(f"- {item}" for item in items)
            elif items:
                self.blocks.append(Block("list", ordered=ordered, items=items))
        elif tag == "div" and self._divs:
            self._flush()
            if self._divs.pop():
                self.blocks.append(Block("gantt_end"))

    def text(self, data: str) -> None:
        if self._rows is not None and self._cell is None:
            return
        self._inline.append(escape(data, quote=False))
        if data.strip():
            self._has_text = True

    def _flush(self) -> None:
        markup = "".join(self._inline).strip() + self._closing_markup()
        has_text = self._has_text
        self._restart_inline()
        if not has_text or self._rows is not None:
            return
        if self._lists:
            self._lists[-1][1].append(markup)
        elif self._heading is not None:
            self.blocks.append(Block("heading", markup=markup, level=self._heading))
        else:
            self.blocks.append(Block("paragraph", markup=markup))

    def close(self) -> None:
        self._flush()
        while self._lists:
            ordered, items = self._lists.pop()
            if items:
                self.blocks.append(Block("list", ordered=ordered, items=items))


def parse_report(html: str) -> List[Block]:
    parser = ReportParser()
    parser.feed(html or "")
    parser.close()
    return parser.blocks


# ---------------------------------------------------------------------------
# Blocks -> PDF
# ---------------------------------------------------------------------------


class ReportPdfBuilder:
    """Lay out the final report on landscape letter pages."""

    def __init__(self, title: str = "Esto no es una Memoria") -> None:
        self.title = title
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()
        width, height = PAGE_SIZE
        self.frame_width = width - 2 * MARGIN
        self.column_width = (self.frame_width - COLUMN_GAP) / 2
        self.frame_height = height - 2 * MARGIN

    def _setup_custom_styles(self) -> None:
        """Report styles; the stock heading and body styles are replaced."""

        headings = {
            "Heading1": (16, "#1f2937"),
            "Heading2": (13, "#374151"),
            "Heading3": (11.5, "#4b5563"),
            "Heading4": (10.5, "#4b5563"),
        }
        for name, (size, color) in headings.items():
            if name in self.styles:
                del self.styles.byName[name]
            self.styles.add(
                ParagraphStyle(
                    name=name,
                    parent=self.styles["Normal"],
                    fontSize=size,
                    leading=size * 1.25,
                    textColor=HexColor(color),
                    spaceBefore=10,
                    spaceAfter=6,
                    fontName="Helvetica-Bold",
                    keepWithNext=True,
                )
            )

        if "BodyText" in self.styles:
            del self.styles.byName["BodyText"]
        self.styles.add(
            ParagraphStyle(
                name="BodyText",
                parent=self.styles["Normal"],
                fontSize=10,
                leading=13,
                textColor=HexColor("#333333"),
                spaceAfter=6,
                alignment=TA_JUSTIFY,
                fontName="Helvetica",
            )
        )
        self.styles.add(
            ParagraphStyle(
                name="TableCell",
                parent=self.styles["Normal"],
                fontSize=7.5,
                leading=9,
                alignment=TA_LEFT,
                fontName="Helvetica",
            )
        )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def _page_templates(self) -> List[PageTemplate]:
        left = Frame(MARGIN, MARGIN, self.column_width, self.frame_height, id="left")
        right = Frame(
            MARGIN + self.column_width + COLUMN_GAP, MARGIN, self.column_width, self.frame_height, id="right"
        )
        wide = Frame(MARGIN, MARGIN, self.frame_width, self.frame_height, id="wide")
        return [
            PageTemplate(id="prose", frames=[left, right], onPage=self._draw_footer),
            PageTemplate(id="gantt", frames=[wide], onPage=self._draw_footer),
        ]

    def _draw_footer(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(HexColor("#6b7280"))
        canvas.drawString(MARGIN, MARGIN / 2, self.title)
        canvas.drawRightString(PAGE_SIZE[0] - MARGIN, MARGIN / 2, str(doc.page))
        canvas.restoreState()

    # ------------------------------------------------------------------
    # Flowables
    # ------------------------------------------------------------------

    def _table(self, rows: List[List[Cell]], width: float) -> Table:
        columns = max(len(row) for row in rows)
        cell_style = self.styles["TableCell"]
        data = []
        commands = [
            ("GRID", (0, 0), (-1, -1), 0.4, HexColor("#9ca3af")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 3),
            ("RIGHTPADDING", (0, 0), (-1, -1), 3),
        ]
        for r, row in enumerate(rows):
            line = []
            for c in range(columns):
                cell = row[c] if c < len(row) else Cell("")
                markup = f"<b>{cell.markup}</b>" if cell.header and cell.markup else cell.markup
                line.append(Paragraph(markup, cell_style))
                color = _to_color(cell.background)
                if color is not None:
                    commands.append(("BACKGROUND", (c, r), (c, r), color))
                elif cell.header:
                    commands.append(("BACKGROUND", (c, r), (c, r), HexColor("#e5e7eb")))
            data.append(line)

        if columns > 4:
            first = min(width * 0.25, 170)
            widths = [first] + [(width - first) / (columns - 1)] * (columns - 1)
        else:
            widths = [width / columns] * columns
        table = Table(data, colWidths=widths, repeatRows=1 if any(c.header for c in rows[0]) else 0)
        table.setStyle(TableStyle(commands))
        return table

    def _list(self, block: Block) -> ListFlowable:
        body = self.styles["BodyText"]
        items = [ListItem(Paragraph(item, body)) for item in block.items]
        if block.ordered:
            return ListFlowable(items, bulletType="1", leftIndent=14)
        return ListFlowable(items, bulletType="bullet", start="•", leftIndent=14)

    def build_story(self, blocks: List[Block]) -> List:
        story: List = []
        in_gantt = False
        for block in blocks:
            if block.kind == "gantt_start" and not in_gantt:
                in_gantt = True
                story.append(NextPageTemplate("gantt"))
                if story[:-1]:
                    story.append(PageBreak())
            elif block.kind == "gantt_end" and in_gantt:
                in_gantt = False
                story.append(NextPageTemplate("prose"))
                story.append(PageBreak())
            elif block.kind == "heading":
                story.append(Paragraph(block.markup, self.styles[f"Heading{block.level}"]))
            elif block.kind == "paragraph":
                story.append(Paragraph(block.markup, self.styles["BodyText"]))
            elif block.kind == "list":
                story.append(self._list(block))
                story.append(Spacer(1, 4))
            elif block.kind == "table":
                story.append(self._table(block.rows, self.frame_width if in_gantt else self.column_width))
                story.append(Spacer(1, 8))
        while story and isinstance(story[-1], (PageBreak, NextPageTemplate)):
            story.pop()
        return story

    def render(self, html: str) -> bytes:
        story = self.build_story(parse_report(html))
        if not story:
            raise StepValidationError("No hay informe para exportar.", step=15)
        buffer = BytesIO()
        doc = BaseDocTemplate(
            buffer,
            pagesize=PAGE_SIZE,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title=self.title,
        )
        doc.addPageTemplates(self._page_templates())
        doc.build(story)
        pdf = buffer.getvalue()
        logger.info("Rendered report PDF (%s bytes, %s flowables)", len(pdf), len(story))
        return pdf


def _to_color(value: str | None):
    if not value:
        return None
    try:
        return colors.toColor(value)
    except ValueError:
        return None


def render_report_pdf(html: str, title: str = "Esto no es una Memoria") -> bytes:
    """Render the report markup to PDF bytes."""

    return ReportPdfBuilder(title=title).render(html)
