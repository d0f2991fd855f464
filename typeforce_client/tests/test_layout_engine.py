from __future__ import annotations

import pytest

from typeforce_client.geometry import FrameRect
from typeforce_client.glyph_model import TypographyParams
from typeforce_client.layout_engine import layout, measure_word, starts_new_line, translate_glyphs


def fake_measure(char: str, font_size: float) -> float:
    # Letters are half an em wide, spaces a quarter em.
    return font_size * (0.25 if char == " " else 0.5)


def _typography(**changes) -> TypographyParams:
    return TypographyParams().with_changes(**changes) if changes else TypographyParams()


def test_two_words_share_a_line_when_frame_is_wide() -> None:
    glyphs = layout("AB CD", FrameRect(0, 0, 400, 300), _typography(), fake_measure)

    assert [g.char for g in glyphs] == ["A", "B", "C", "D"]
    assert [g.x for g in glyphs] == [10, 40, 85, 115]
    assert all(g.y == pytest.approx(10 + 60 * 0.85) for g in glyphs)
    assert {g.line_index for g in glyphs} == {0}
    assert [g.word_index for g in glyphs] == [0, 0, 1, 1]


def test_second_word_wraps_when_frame_is_narrow() -> None:
    glyphs = layout("AB CD", FrameRect(0, 0, 150, 300), _typography(), fake_measure)

    first_line_y = 10 + 60 * 0.85
    assert glyphs[0].y == pytest.approx(first_line_y)
    assert glyphs[2].char == "C"
    assert glyphs[2].x == 10
    assert glyphs[2].y == pytest.approx(first_line_y + 60 * 1.25)
    assert glyphs[2].line_index == 1


def test_layout_is_deterministic() -> None:
    frame = FrameRect(12, 34, 250, 200)
    first = layout("the quick brown fox", frame, _typography(), fake_measure)
    second = layout("the quick brown fox", frame, _typography(), fake_measure)
    assert first == second


def test_consecutive_spaces_advance_cursor() -> None:
    glyphs = layout("A  B", FrameRect(0, 0, 400, 300), _typography(), fake_measure)

    assert [g.char for g in glyphs] == ["A", "B"]
    # A (30) + space (15) + empty word (0) + space (15)
    assert glyphs[1].x == pytest.approx(10 + 30 + 15 + 15)
    assert glyphs[1].word_index == 2


def test_tracking_between_glyphs_but_not_after_last() -> None:
    typography = _typography(tracking_em=0.1)
    assert measure_word("AB", typography, fake_measure) == pytest.approx(30 + 6 + 30)

    glyphs = layout("AB", FrameRect(0, 0, 400, 300), typography, fake_measure)
    assert glyphs[1].x == pytest.approx(10 + 30 + 6)


def test_overwide_word_is_placed_and_overflows() -> None:
    glyphs = layout("A WWWWWWWWWW", FrameRect(0, 0, 100, 300), _typography(), fake_measure)

    long_word = [g for g in glyphs if g.word_index == 1]
    assert len(long_word) == 10
    assert long_word[0].x == 10
    assert long_word[-1].x + long_word[-1].advance > 100


def test_wrap_rule_boundary() -> None:
    assert starts_new_line(10, 380, 10, 380) is False
    assert starts_new_line(10.5, 380, 10, 380) is True


def test_glyphs_start_at_base_position() -> None:
    glyphs = layout("Hi", FrameRect(0, 0, 400, 300), _typography(), fake_measure)
    for glyph in glyphs:
        assert glyph.position == glyph.base_position
        assert glyph.rotation == 0.0


def test_empty_text_produces_no_glyphs() -> None:
    assert layout("", FrameRect(0, 0, 400, 300), _typography(), fake_measure) == []


def test_translate_keeps_force_offsets() -> None:
    glyphs = layout("AB", FrameRect(0, 0, 400, 300), _typography(), fake_measure)
    glyphs[0].x += 5
    before = [(g.x, g.y, g.offset()) for g in glyphs]

    translate_glyphs(glyphs, 20, -10)

    for glyph, (x, y, offset) in zip(glyphs, before):
        assert glyph.x == pytest.approx(x + 20)
        assert glyph.y == pytest.approx(y - 10)
        assert glyph.offset() == offset
