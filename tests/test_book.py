"""
Tests for PDF book rendering and the hint figure.
"""

import matplotlib.pyplot as plt
import pytest

from sudoku_book import (
    PROFILE_NAME_FR,
    ROLE_COLORS,
    build_book_pdf,
    build_book_pdf_with_ranges,
    build_daily_book_pdf,
    chunk,
    draw_hint_figure,
    save_hint_image,
)
from sudoku_difficulty import PROFILES, book_hash_v1, create_daily_puzzle, hash_grid_sha256
from sudoku_hash_db import load_global_hashes
from sudoku_hints import get_hint


def is_pdf(path):
    with open(path, "rb") as f:
        return f.read(5) == b"%PDF-"


class TestHelpers:
    """Test pagination helpers and label tables."""

    def test_chunk(self):
        assert list(chunk(list(range(7)), 3)) == [[0, 1, 2], [3, 4, 5], [6]]

    def test_every_profile_has_a_label(self):
        assert set(PROFILE_NAME_FR) == set(PROFILES)


class TestBooks:
    """Test the three book modes."""

    def test_single_profile(self, tmp_path, hash_db):
        out = tmp_path / "book.pdf"
        puzzles, hashes, book_hash = build_book_pdf("easy", str(out), 2, title="Test")
        assert is_pdf(out)
        assert len(puzzles) == 2
        assert hashes == [hash_grid_sha256(p.puzzle) for p in puzzles]
        assert book_hash == book_hash_v1(puzzles)
        assert load_global_hashes() == set(hashes)

    def test_ranges(self, tmp_path, hash_db):
        out = tmp_path / "mix.pdf"
        puzzles, hashes, _ = build_book_pdf_with_ranges(
            [(3, 3, "hard"), (1, 2, "easy")], str(out), puzzle_rows=2, puzzle_cols=1
        )
        assert is_pdf(out)
        assert [p.difficulty for p in puzzles] == ["easy", "easy", "hard"]
        assert len(hashes) == 3

    def test_invalid_range(self, tmp_path):
        with pytest.raises(ValueError):
            build_book_pdf_with_ranges([(5, 3, "easy")], str(tmp_path / "x.pdf"))

    def test_daily(self, tmp_path):
        out = tmp_path / "daily.pdf"
        puzzles, _, _ = build_daily_book_pdf("2024-02-28", 3, str(out))
        assert is_pdf(out)
        assert [p.date for p in puzzles] == ["2024-02-28", "2024-02-29", "2024-03-01"]
        assert puzzles[1].puzzle == create_daily_puzzle("2024-02-29").puzzle

    @pytest.mark.parametrize("start, days", [("2024-13-01", 1), ("2024-01-01", 0)])
    def test_daily_rejects_bad_input(self, tmp_path, start, days):
        with pytest.raises(ValueError):
            build_daily_book_pdf(start, days, str(tmp_path / "x.pdf"))


class TestHintFigure:
    """Test the rendered hint."""

    def test_figure_has_grid_and_text(self, empty_grid):
        notes = {0: {1, 2}, 1: {1, 2}, 5: {1, 2, 7}}
        hint = get_hint(empty_grid, None, notes)
        fig = draw_hint_figure(empty_grid, hint, notes)
        texts = [t.get_text() for t in fig.axes[0].texts]
        assert "Naked Pairs" in texts
        assert any(t.startswith("Cells form a naked pair") for t in texts)
        plt.close(fig)

    def test_role_colours_cover_all_roles(self):
        assert set(ROLE_COLORS) == {"target", "eliminator", "pair", "triple", "affected"}

    def test_save_png(self, tmp_path, puzzle):
        hint = get_hint(puzzle, None, None)
        out = tmp_path / "hint.png"
        assert save_hint_image(str(out), puzzle, hint) == str(out)
        with open(out, "rb") as f:
            assert f.read(8) == b"\x89PNG\r\n\x1a\n"
