"""
End-to-end tests for the command line.
"""

import json

import pytest

from sudoku_cli import main, parse_notes
from tests.helpers import PUZZLE_STR, SOLUTION_STR


def run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


class TestPuzzleCommands:
    """Test new and daily."""

    def test_new(self, capsys):
        code, out, _ = run(capsys, "new", "--difficulty", "extreme")
        data = json.loads(out)
        assert code == 0
        assert data["difficulty"] == "extreme"
        assert sum(1 for v in data["puzzle"] if v) == 22

    def test_daily_is_deterministic(self, capsys):
        _, first, _ = run(capsys, "daily", "--date", "2024-03-15")
        _, second, _ = run(capsys, "daily", "--date", "2024-03-15")
        assert first == second
        assert json.loads(first)["date"] == "2024-03-15"

    def test_unknown_difficulty_is_rejected(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["new", "--difficulty", "nightmare"])
        assert exc.value.code == 2


class TestHintCommand:
    """Test hint output."""

    def test_hint(self, capsys):
        code, out, _ = run(capsys, "hint", "--grid", PUZZLE_STR, "--solution", SOLUTION_STR)
        hint = json.loads(out)["hint"]
        assert code == 0
        assert hint["value"] == int(SOLUTION_STR[hint["cellIndex"]])

    def test_hint_with_notes(self, capsys):
        code, out, _ = run(capsys, "hint", "--grid", "0" * 81, "--notes", '{"40": [4]}')
        hint = json.loads(out)["hint"]
        assert (hint["cellIndex"], hint["value"], hint["technique"]) == (40, 4, "Naked Single")

    def test_no_hint_is_not_an_error(self, capsys):
        code, out, _ = run(capsys, "hint", "--grid", "0" * 81)
        data = json.loads(out)
        assert code == 0
        assert data["hint"] is None
        assert data["message"]

    def test_grid_from_file(self, capsys, tmp_path):
        path = tmp_path / "grid.txt"
        path.write_text(PUZZLE_STR + "\n", encoding="utf-8")
        code, out, _ = run(capsys, "hint", "--grid", str(path))
        assert code == 0
        assert json.loads(out)["hint"] is not None

    def test_render(self, capsys, tmp_path):
        out_png = tmp_path / "hint.png"
        code, out, _ = run(capsys, "hint", "--grid", PUZZLE_STR, "--render", str(out_png))
        assert code == 0
        assert json.loads(out)["image"] == str(out_png)
        assert out_png.exists()

    @pytest.mark.parametrize(
        "argv",
        [
            ["hint", "--grid", "123"],
            ["hint", "--grid", "0" * 81, "--notes", "{not json"],
            ["hint", "--grid", "0" * 81, "--notes", '{"x": [1]}'],
            ["hint", "--grid", "0" * 81, "--notes", '{"0": [10]}'],
            ["hint", "--grid", "0" * 81, "--notes", '{"3": 5}'],
            ["hint", "--grid", "0" * 81, "--notes", json.dumps(list(range(81)))],
        ],
    )
    def test_malformed_input(self, capsys, argv):
        code, out, err = run(capsys, *argv)
        assert code == 2
        assert out == ""
        assert "erreur" in err


class TestRateAndBook:
    """Test rate and book."""

    def test_rate(self, capsys):
        code, out, _ = run(capsys, "rate", "--grid", PUZZLE_STR)
        data = json.loads(out)
        assert code == 0
        assert data["solved"] is True
        assert "".join(map(str, data["grid"])) == SOLUTION_STR

    def test_book_daily(self, capsys, tmp_path):
        out_pdf = tmp_path / "daily.pdf"
        code, out, _ = run(capsys, "book", "--output", str(out_pdf), "--daily-from", "2024-03-01", "--days", "2")
        assert code == 0
        assert json.loads(out)["count"] == 2
        assert out_pdf.exists()

    def test_book_requires_mode(self, capsys, tmp_path):
        code, _, err = run(capsys, "book", "--output", str(tmp_path / "x.pdf"))
        assert code == 2
        assert "--count" in err


class TestParseNotes:
    """Test pencil-mark parsing."""

    def test_empty(self):
        assert parse_notes(None) is None
        assert parse_notes("") is None

    def test_object_keys_become_indices(self):
        assert parse_notes('{"3": [1, 2]}') == {3: [1, 2]}

    def test_list(self):
        assert len(parse_notes(json.dumps([[]] * 81))) == 81

    def test_rejects_scalar(self):
        with pytest.raises(ValueError):
            parse_notes("5")
