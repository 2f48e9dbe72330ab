"""Unit tests for range edit application."""

from __future__ import annotations

import pytest

from tabbridge.core.positions import Position, Range
from tabbridge.editor.patches import (
    EditRequest,
    apply_edit,
    line_count,
    offset_to_position,
    position_to_offset,
)
from tabbridge.errors import RangeError

DOCUMENT = "function f() {\n  return 1;\n}\n"


def _edit(sl: int, sc: int, el: int, ec: int, text: str) -> EditRequest:
    return EditRequest(range=Range.from_positions(sl, sc, el, ec), replacement_text=text)


def test_apply_edit_replaces_single_character():
    result = apply_edit(DOCUMENT, _edit(1, 9, 1, 10, "2"))

    assert result == "function f() {\n  return 2;\n}\n"


def test_apply_edit_leaves_original_text_untouched():
    original = DOCUMENT

    apply_edit(original, _edit(0, 0, 2, 1, "x"))

    assert original == "function f() {\n  return 1;\n}\n"


@pytest.mark.parametrize(
    "span",
    [
        (0, 0, 0, 0),
        (0, 0, 3, 0),
        (0, 9, 1, 4),
        (1, 2, 1, 11),
        (1, 11, 2, 0),
        (2, 0, 2, 2),
    ],
)
def test_replacing_a_span_with_itself_is_a_no_op(span: tuple[int, int, int, int]):
    start = position_to_offset(DOCUMENT, span[:2])
    end = position_to_offset(DOCUMENT, span[2:])

    result = apply_edit(DOCUMENT, _edit(*span, DOCUMENT[start:end]))

    assert result == DOCUMENT


def test_apply_edit_rejects_line_past_document_end():
    lines = line_count(DOCUMENT)

    with pytest.raises(RangeError) as excinfo:
        apply_edit(DOCUMENT, _edit(0, 0, lines, 0, ""))

    assert excinfo.value.reason == "line"
    assert excinfo.value.position == (lines, 0)
    assert excinfo.value.limit == lines - 1


def test_apply_edit_rejects_character_past_line_break():
    with pytest.raises(RangeError) as excinfo:
        apply_edit("ab\ncd", _edit(0, 0, 0, 4, ""))

    assert excinfo.value.reason == "character"
    assert excinfo.value.limit == 3


def test_caret_after_line_break_addresses_next_line_start():
    assert position_to_offset("ab\ncd", (0, 3)) == position_to_offset("ab\ncd", (1, 0)) == 3
    assert apply_edit("ab\ncd", _edit(0, 2, 0, 2, "!")) == "ab!\ncd"


def test_apply_edit_keeps_crlf_line_breaks():
    text = "one\r\ntwo\r\nthree"

    assert line_count(text) == 3
    assert position_to_offset(text, (1, 0)) == 5
    assert apply_edit(text, _edit(1, 0, 1, 3, "TWO")) == "one\r\nTWO\r\nthree"
    assert apply_edit(text, _edit(0, 3, 1, 0, " ")) == "one two\r\nthree"


def test_apply_edit_handles_lone_carriage_returns():
    text = "a\rb\rc"

    assert line_count(text) == 3
    assert apply_edit(text, _edit(2, 0, 2, 1, "C")) == "a\rb\rC"


def test_apply_edit_inserts_into_empty_document():
    assert line_count("") == 1
    assert apply_edit("", _edit(0, 0, 0, 0, "hello")) == "hello"


def test_trailing_line_break_exposes_final_empty_line():
    assert line_count(DOCUMENT) == 4
    assert apply_edit(DOCUMENT, _edit(3, 0, 3, 0, "// end\n")) == DOCUMENT + "// end\n"


def test_replacement_text_is_not_normalized():
    result = apply_edit("x\ny", _edit(0, 1, 1, 0, "\r\n\t"))

    assert result == "x\r\n\ty"


def test_offset_to_position_inverts_position_to_offset():
    for offset in range(len(DOCUMENT) + 1):
        position = offset_to_position(DOCUMENT, offset)
        assert position_to_offset(DOCUMENT, position) == offset

    assert offset_to_position(DOCUMENT, 15) == Position(1, 0)
    assert offset_to_position(DOCUMENT, len(DOCUMENT)) == Position(3, 0)


def test_offset_to_position_rejects_out_of_range_offsets():
    with pytest.raises(RangeError) as excinfo:
        offset_to_position("abc", 4)

    assert excinfo.value.reason == "overflow"


def test_edit_request_requires_string_replacement():
    with pytest.raises(TypeError):
        EditRequest(range=Range.from_positions(0, 0, 0, 0), replacement_text=None)  # type: ignore[arg-type]


def test_range_error_serializes_violated_bound():
    with pytest.raises(RangeError) as excinfo:
        apply_edit("abc", _edit(0, 0, 0, 9, ""))

    payload = excinfo.value.to_dict()

    assert payload["error"] == "range_error"
    assert payload["details"] == {"reason": "character", "position": {"line": 0, "character": 9}, "limit": 3}
