from __future__ import annotations

import pytest

from seminar_flow.errors import GenerationError
from seminar_flow.markup import (
    extract_bibliography,
    markdown_bold_to_html,
    numbered_lines,
    plain_to_html,
    sanitize_html,
    split_variants,
    strip_html,
    strip_numbering,
)
from seminar_flow.prompts import OPTION_DELIMITER


def test_sanitize_drops_scripts_and_event_handlers() -> None:
    html = '<p onclick="steal()">Hola<script>alert(1)</script></p><iframe src="x">oculto</iframe>'

    assert sanitize_html(html) == "<p>Hola</p>"


def test_sanitize_keeps_gantt_cell_colours_only() -> None:
    html = (
        '<table><tr><td style="background-color: #4CAF50;">T1</td>'
        '<td style="position: absolute">T2</td></tr></table>'
    )

    cleaned = sanitize_html(html)

    assert '<td style="background-color: #4CAF50;">T1</td>' in cleaned
    assert "<td>T2</td>" in cleaned
    assert "position" not in cleaned


def test_sanitize_rejects_script_links() -> None:
    assert sanitize_html('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"
    assert sanitize_html('<a href="https://example.org">x</a>') == '<a href="https://example.org">x</a>'


def test_sanitize_closes_unbalanced_tags() -> None:
    assert sanitize_html("<p><strong>abierto") == "<p><strong>abierto</strong></p>"


@pytest.mark.parametrize(
    "text",
    [
        "Una línea",
        "Primera línea\nSegunda línea",
        "Párrafo uno\n\nPárrafo dos",
        "Tres\n\n\nsaltos",
        "\nEmpieza con salto",
        "Símbolos <raros> & ampersands",
        "Párrafo\n\n   \n\nfinal",
        "a\n   \nb",
    ],
)
def test_edit_round_trip_preserves_plain_text(text: str) -> None:
    assert strip_html(plain_to_html(text)) == text


def test_split_variants_requires_two_segments() -> None:
    with pytest.raises(GenerationError):
        split_variants("<p>Solo una opción</p>", OPTION_DELIMITER)

    assert split_variants(f"A {OPTION_DELIMITER} B {OPTION_DELIMITER} ", OPTION_DELIMITER) == ["A", "B"]


def test_extract_bibliography_splits_block() -> None:
    html = '<p>Exploración</p><div id="bibliografia"><p>Ref 1</p></div>'

    main_text, bibliography = extract_bibliography(html)

    assert main_text == "<p>Exploración</p>"
    assert bibliography.startswith('<div id="bibliografia">')


def test_numbering_helpers() -> None:
    assert strip_numbering("  2. Diseñar el prototipo ") == "Diseñar el prototipo"
    assert numbered_lines("1. Uno\n\n2. Dos\n3.Tres") == ["Uno", "Dos", "Tres"]


def test_markdown_bold() -> None:
    assert markdown_bold_to_html("**Persona:** Ana") == "<strong>Persona:</strong> Ana"


def test_sanitize_removes_comments_and_nested_hidden_content() -> None:
    html = "<p>Uno<!-- VARIANT --></p><noscript><iframe>x</iframe>oculto</noscript><section>Dos</section>"

    assert sanitize_html(html) == "<p>Uno</p>Dos"


def test_sanitize_renders_line_breaks_as_html() -> None:
    assert sanitize_html("<p>Una<br/>Dos<br />Tres</p>") == "<p>Una<br>Dos<br>Tres</p>"


def test_strip_html_drops_scripts() -> None:
    assert strip_html("<p>Hola<script>alert(1)</script> mundo</p>") == "Hola mundo"
