from __future__ import annotations

import pytest

from seminar_flow.errors import StepValidationError
from seminar_flow.export import GANTT_CLASS, parse_report, render_report_pdf

REPORT = f"""
<h1>Esto no es una Memoria</h1>
<h2>1. Introducción</h2>
<p>Un proyecto sobre <em>agua</em> &amp; comunidad.</p>
<ul><li>Primer punto</li><li>Segundo <strong>punto</strong></li></ul>
<div class="{GANTT_CLASS}">
<table>
<tr><th>Tarea</th><th>Ag-S1</th><th>Ag-S2</th></tr>
<tr><td>Investigar</td><td style="background-color: #4CAF50;"></td><td></td></tr>
</table>
</div>
<h2>14. Conclusión</h2>
<p>Cierre.</p>
"""


def test_parse_report_blocks() -> None:
    blocks = parse_report(REPORT)

    kinds = [block.kind for block in blocks]
    assert kinds == [
        "heading",
        "heading",
        "paragraph",
        "list",
        "gantt_start",
        "table",
        "gantt_end",
        "heading",
        "paragraph",
    ]
    assert blocks[0].level == 1
    assert blocks[2].markup == "Un proyecto sobre <i>agua</i> &amp; comunidad."
    assert blocks[3].items == ["Primer punto", "Segundo <b>punto</b>"]
    table = blocks[5]
    assert [cell.markup for cell in table.rows[0]] == ["Tarea", "Ag-S1", "Ag-S2"]
    assert table.rows[0][0].header is True
    assert table.rows[1][1].background == "#4CAF50"


def test_render_report_pdf_produces_pdf_bytes() -> None:
    pdf = render_report_pdf(REPORT, title="Esto no es una Memoria_Ana_Mi Proyecto")

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_empty_report_cannot_be_exported() -> None:
    with pytest.raises(StepValidationError):
        render_report_pdf("   ")


def test_inline_formatting_across_blocks_stays_balanced() -> None:
    html = "<strong>a<p>b</p></strong><p><em>c<br>d</em></p>"

    blocks = parse_report(html)

    assert [block.markup for block in blocks] == ["<b>a</b>", "<b>b</b>", "<i>c<br/>d</i>"]
    assert render_report_pdf(html).startswith(b"%PDF")


def test_hidden_content_is_not_exported() -> None:
    blocks = parse_report("<p>Visible<script>alert(1)</script><!-- nota --></p>")

    assert [block.markup for block in blocks] == ["Visible"]
