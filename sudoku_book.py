# sudoku_book.py
"""
Rendu matplotlib :
- livres PDF (pages puzzles + pages solutions), une ou plusieurs difficultés,
  ou une série de défis du jour sur des dates consécutives ;
- figure d'un indice (cases surlignées par rôle, notes, explication).
"""

from __future__ import annotations
import datetime
import logging
import textwrap
from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from sudoku_core import Notes, NotesInput, normalize_notes
from sudoku_difficulty import (
    Difficulty,
    GeneratedPuzzle,
    book_hash_v1,
    create_daily_puzzle,
    generate_puzzles_for_profile,
    get_profile,
    hash_grid_sha256,
)
from sudoku_hints import AFFECTED, ELIMINATOR, PAIR, TARGET, TRIPLE, Hint

logger = logging.getLogger(__name__)

TRIM_W_DEFAULT = 6.0
TRIM_H_DEFAULT = 9.0

DEFAULT_GIVEN_COLOR = "black"
DEFAULT_ADDED_COLOR = "red"

BLOCK_SHADE_COLOR = "#e9e9e9"
BLOCK_SHADE_ALPHA = 1.0

# Couleur de fond par rôle ; ordre de dessin = priorité croissante
ROLE_COLORS: Dict[str, str] = {
    AFFECTED: "#fde2e2",
    PAIR: "#d6e9ff",
    TRIPLE: "#e4dcff",
    ELIMINATOR: "#fff1c2",
    TARGET: "#c8f2c8",
}
ROLE_ORDER = (AFFECTED, PAIR, TRIPLE, ELIMINATOR, TARGET)

PROFILE_NAME_FR = {"easy": "facile", "medium": "moyen", "hard": "difficile", "extreme": "extrême"}

BookResult = Tuple[List[GeneratedPuzzle], List[str], str]


def chunk(lst, n):
    for i in range(0, len(lst), n):
        yield lst[i : i + n]


def _cell_origin(left: float, bottom: float, cell: float, index: int) -> Tuple[float, float]:
    """Coin bas-gauche d'une case (ligne 0 en haut)."""
    r, c = divmod(index, 9)
    return left + c * cell, bottom + (8 - r) * cell


# ---------- Cadre commun ----------

def _draw_frame(ax, left: float, bottom: float, size: float, outer_lw: float, block_lw: float, cell_lw: float,
                shade: bool = True):
    cell = size / 9.0
    block = size / 3.0

    # Fond alterné par bloc 3x3
    if shade:
        for br in range(3):
            for bc in range(3):
                if (br + bc) % 2 == 0:
                    ax.add_patch(
                        plt.Rectangle(
                            (left + bc * block, bottom + br * block),
                            block,
                            block,
                            facecolor=BLOCK_SHADE_COLOR,
                            edgecolor="none",
                            alpha=BLOCK_SHADE_ALPHA,
                            zorder=0,
                        )
                    )

    ax.add_patch(
        plt.Rectangle((left, bottom), size, size, fill=False, linewidth=outer_lw, color="k", zorder=3)
    )
    for i in range(1, 9):
        lw = block_lw if i % 3 == 0 else cell_lw
        x = left + i * cell
        y = bottom + i * cell
        ax.plot([x, x], [bottom, bottom + size], linewidth=lw, color="k", zorder=2)
        ax.plot([left, left + size], [y, y], linewidth=lw, color="k", zorder=2)


def _draw_digit(ax, left, bottom, cell, index, value, **kwargs):
    x0, y0 = _cell_origin(left, bottom, cell, index)
    ax.text(
        x0 + cell / 2,
        y0 + cell * 0.47,
        str(value),
        ha="center",
        va="center",
        fontsize=cell * 0.5 * 72,
        zorder=4,
        **kwargs,
    )


# ---------- Dessin d'une grille puzzle ----------

def draw_puzzle_grid_at(ax, grid: Sequence[int], left: float, bottom: float, size: float):
    _draw_frame(ax, left, bottom, size, outer_lw=3, block_lw=2, cell_lw=0.8)
    cell = size / 9.0
    for i, val in enumerate(grid):
        if val:
            _draw_digit(ax, left, bottom, cell, i, val, fontweight="normal")


def _new_page(trim_w: float, trim_h: float):
    plt.rcParams["font.family"] = "DejaVu Sans"
    fig = plt.figure(figsize=(trim_w, trim_h))
    ax = plt.gca()
    ax.set_xlim(0, trim_w)
    ax.set_ylim(0, trim_h)
    ax.axis("off")
    return fig, ax


def _page_slots(trim_w, trim_h, rows, cols, margin_x, margin_y, count):
    """Positions (left, bottom, size) des grilles d'une page."""
    cell_w = (trim_w - 2 * margin_x) / cols
    cell_h = (trim_h - 2 * margin_y) / rows
    size = min(cell_w, cell_h) * 0.90
    offset_x = (cell_w - size) / 2
    offset_y = (cell_h - size) / 2
    for idx in range(min(count, rows * cols)):
        r, c = divmod(idx, cols)
        yield (
            margin_x + c * cell_w + offset_x,
            margin_y + (rows - 1 - r) * cell_h + offset_y,
            size,
        )


def _page_header_footer(ax, trim_w, trim_h, title, page_num):
    ax.text(trim_w / 2, trim_h - 0.3, title, ha="center", va="top", fontsize=12, fontweight="bold")
    ax.text(trim_w - 0.2, 0.2, str(page_num), ha="right", va="bottom", fontsize=10)


def draw_puzzles_page_figure(
    puzzles: List[Sequence[int]],
    trim_w: float,
    trim_h: float,
    rows: int,
    cols: int,
    page_num: int,
    title: str,
    puzzle_labels: Optional[List[str]] = None,
    start_idx: int = 1,
):
    fig, ax = _new_page(trim_w, trim_h)
    slots = _page_slots(trim_w, trim_h, rows, cols, 0.5, 0.8, len(puzzles))
    for idx, (grid, (left, bottom, size)) in enumerate(zip(puzzles, slots)):
        draw_puzzle_grid_at(ax, grid, left, bottom, size)

        # numérotation indépendante du numéro de page PDF
        label = ""
        if puzzle_labels is not None and idx < len(puzzle_labels):
            lab = (puzzle_labels[idx] or "").strip()
            if lab:
                label = f" — {lab}"
        ax.text(left + size / 2, bottom - 0.1, f"{start_idx + idx}{label}", ha="center", va="top", fontsize=8)

    _page_header_footer(ax, trim_w, trim_h, title, page_num)
    return fig


# ---------- Dessin des solutions miniatures ----------

def draw_sudoku_at(
    ax,
    solution_grid: Sequence[int],
    left: float,
    bottom: float,
    size: float,
    puzzle_grid: Optional[Sequence[int]] = None,
    given_color: str = DEFAULT_GIVEN_COLOR,
    added_color: str = DEFAULT_ADDED_COLOR,
):
    _draw_frame(ax, left, bottom, size, outer_lw=1.25, block_lw=0.6, cell_lw=0.25)
    cell = size / 9.0
    for i, v in enumerate(solution_grid):
        if not v:
            continue
        added = puzzle_grid is not None and not puzzle_grid[i]
        _draw_digit(
            ax, left, bottom, cell, i, v,
            fontweight="bold" if added else "normal",
            color=added_color if added else given_color,
        )


def draw_solutions_page_figure(
    puzzles: List[GeneratedPuzzle],
    trim_w: float,
    trim_h: float,
    rows: int,
    cols: int,
    page_num: int,
    start_idx: int,
    given_color: str,
    added_color: str,
):
    fig, ax = _new_page(trim_w, trim_h)
    slots = _page_slots(trim_w, trim_h, rows, cols, 0.6, 0.95, len(puzzles))
    for idx, (p, (left, bottom, size)) in enumerate(zip(puzzles, slots)):
        draw_sudoku_at(
            ax, p.solution, left, bottom, size,
            puzzle_grid=p.puzzle, given_color=given_color, added_color=added_color,
        )
        ax.text(left + size / 2, bottom - 0.1, f"{start_idx + idx}", ha="center", va="top", fontsize=8)

    first = start_idx
    last = first + min(len(puzzles), rows * cols) - 1
    title_str = f"Solutions {first}" if first == last else f"Solutions {first}–{last}"
    _page_header_footer(ax, trim_w, trim_h, title_str, page_num)
    return fig


# ---------- Helper interne : dessiner un livre à partir d'une liste de puzzles ----------

def _render_book_from_puzzles(
    puzzles: List[GeneratedPuzzle],
    output_path: str,
    title: str,
    trim_w: float = TRIM_W_DEFAULT,
    trim_h: float = TRIM_H_DEFAULT,
    puzzle_rows: int = 1,
    puzzle_cols: int = 1,
    solution_rows: int = 3,
    solution_cols: int = 3,
    given_color: str = DEFAULT_GIVEN_COLOR,
    added_color: str = DEFAULT_ADDED_COLOR,
    puzzle_labels: Optional[List[str]] = None,
) -> Tuple[List[str], str]:
    """
    Dessine les pages puzzles + solutions dans un PDF.
    Retourne (per_puzzle_hashes, book_hash).
    """
    puzzles_per_page = puzzle_rows * puzzle_cols
    solutions_per_page = solution_rows * solution_cols
    page_no = 1

    with PdfPages(output_path) as pdf:
        labels_pages = list(chunk(puzzle_labels, puzzles_per_page)) if puzzle_labels is not None else None
        for page_i, page_puzzles in enumerate(chunk(puzzles, puzzles_per_page)):
            fig = draw_puzzles_page_figure(
                [p.puzzle for p in page_puzzles],
                trim_w=trim_w,
                trim_h=trim_h,
                rows=puzzle_rows,
                cols=puzzle_cols,
                page_num=page_no,
                title=title,
                puzzle_labels=labels_pages[page_i] if labels_pages else None,
                start_idx=page_i * puzzles_per_page + 1,
            )
            pdf.savefig(fig, bbox_inches="tight", dpi=300)
            plt.close(fig)
            page_no += 1

        for sol_i, page_puzzles in enumerate(chunk(puzzles, solutions_per_page)):
            fig = draw_solutions_page_figure(
                page_puzzles,
                trim_w=trim_w,
                trim_h=trim_h,
                rows=solution_rows,
                cols=solution_cols,
                page_num=page_no,
                start_idx=sol_i * solutions_per_page + 1,
                given_color=given_color,
                added_color=added_color,
            )
            pdf.savefig(fig, bbox_inches="tight", dpi=300)
            plt.close(fig)
            page_no += 1

    logger.info("Livre écrit : %s (%d pages, %d puzzles)", output_path, page_no - 1, len(puzzles))
    per_puzzle_hashes = [hash_grid_sha256(p.puzzle) for p in puzzles]
    return per_puzzle_hashes, book_hash_v1(puzzles)


# ---------- Mode 1 : un seul profil sur tout le livre ----------

def build_book_pdf(
    profile: Difficulty,
    output_path: str,
    n_puzzles: int,
    title: str = "Sudoku",
    hash_db_path: Optional[str] = None,
    **layout,
) -> BookResult:
    """
    PDF complet pour une difficulté unique ; renvoie
    (puzzles, hashs par puzzle, hash global du livre).
    """
    profile = get_profile(profile)
    puzzles = generate_puzzles_for_profile(profile, n_puzzles, hash_db_path=hash_db_path)

    label_fr = PROFILE_NAME_FR.get(profile.name, profile.name)
    per_puzzle_hashes, book_hash = _render_book_from_puzzles(
        puzzles,
        output_path,
        title=f"{title} — Niveau {label_fr}",
        puzzle_labels=[label_fr] * n_puzzles,
        **layout,
    )
    return puzzles, per_puzzle_hashes, book_hash


# ---------- Mode 2 : plages de numéros avec difficultés différentes ----------

def build_book_pdf_with_ranges(
    range_specs: List[Tuple[int, int, Difficulty]],
    output_path: str,
    title: str = "Sudoku",
    hash_db_path: Optional[str] = None,
    **layout,
) -> BookResult:
    """
    range_specs = [(premier_numéro, dernier_numéro, difficulté), ...]
    """
    range_specs = sorted(range_specs, key=lambda x: x[0])

    puzzles: List[GeneratedPuzzle] = []
    puzzle_labels: List[str] = []
    for start_idx, end_idx, difficulty in range_specs:
        if end_idx < start_idx:
            raise ValueError(f"Plage invalide: {start_idx}–{end_idx}")
        profile = get_profile(difficulty)
        count = end_idx - start_idx + 1
        print(f"Génération {count} puzzle(s) pour {profile.name} (puzzles {start_idx}–{end_idx})")

        puzzles.extend(generate_puzzles_for_profile(profile, count, hash_db_path=hash_db_path))
        puzzle_labels.extend([PROFILE_NAME_FR.get(profile.name, profile.name)] * count)

    per_puzzle_hashes, book_hash = _render_book_from_puzzles(
        puzzles, output_path, title=f"{title} — Mode mix", puzzle_labels=puzzle_labels, **layout
    )
    return puzzles, per_puzzle_hashes, book_hash


# ---------- Mode 3 : défis du jour sur des dates consécutives ----------

def build_daily_book_pdf(
    start_date: str,
    days: int,
    output_path: str,
    difficulty: Difficulty = "hard",
    title: str = "Défis du jour",
    **layout,
) -> BookResult:
    """Un défi du jour par date à partir de start_date (YYYY-MM-DD) ; identique pour tous."""
    if days < 1:
        raise ValueError(f"Nombre de jours invalide: {days}")
    try:
        first = datetime.date.fromisoformat(start_date)
    except ValueError as exc:
        raise ValueError(f"Date invalide (YYYY-MM-DD attendu): {start_date!r}") from exc

    dates = [(first + datetime.timedelta(days=k)).isoformat() for k in range(days)]
    puzzles = [create_daily_puzzle(d, difficulty) for d in dates]
    per_puzzle_hashes, book_hash = _render_book_from_puzzles(
        puzzles, output_path, title=title, puzzle_labels=dates, **layout
    )
    return puzzles, per_puzzle_hashes, book_hash


# ====================================================
#   FIGURE D'UN INDICE
# ====================================================

def _draw_notes(ax, left, bottom, cell, index, digits):
    x0, y0 = _cell_origin(left, bottom, cell, index)
    sub = cell / 3.0
    for d in sorted(digits):
        r, c = divmod(d - 1, 3)
        ax.text(
            x0 + c * sub + sub / 2,
            y0 + (2 - r) * sub + sub / 2,
            str(d),
            ha="center",
            va="center",
            fontsize=sub * 0.6 * 72,
            color="#555555",
            zorder=4,
        )


def draw_hint_figure(
    grid: Sequence[int],
    hint: Hint,
    notes: NotesInput = None,
    given: Optional[Sequence[bool]] = None,
    size: float = 5.0,
):
    """
    Grille du joueur avec les cases de l'indice colorées par rôle, ses notes
    (barrées en rouge si l'indice les efface) et l'explication en légende.
    """
    cell_notes: Notes = normalize_notes(notes)
    removed = {(n.cell, n.number) for n in hint.notes_to_remove}
    margin = 0.4
    text_h = 1.4
    fig, ax = _new_page(size + 2 * margin, size + 2 * margin + text_h)
    left, bottom = margin, margin + text_h
    cell = size / 9.0

    for role in ROLE_ORDER:
        for i in hint.cells_with_role(role):
            x0, y0 = _cell_origin(left, bottom, cell, i)
            ax.add_patch(plt.Rectangle((x0, y0), cell, cell, facecolor=ROLE_COLORS[role], edgecolor="none", zorder=1))

    _draw_frame(ax, left, bottom, size, outer_lw=2.5, block_lw=1.6, cell_lw=0.5, shade=False)

    for i, v in enumerate(grid):
        if v:
            is_given = given is None or given[i]
            _draw_digit(ax, left, bottom, cell, i, v, color="black" if is_given else "#1f4fa3")
        elif cell_notes[i]:
            _draw_notes(ax, left, bottom, cell, i, [d for d in cell_notes[i] if (i, d) not in removed])
            struck = [d for d in cell_notes[i] if (i, d) in removed]
            if struck:
                x0, y0 = _cell_origin(left, bottom, cell, i)
                sub = cell / 3.0
                for d in struck:
                    r, c = divmod(d - 1, 3)
                    ax.text(
                        x0 + c * sub + sub / 2, y0 + (2 - r) * sub + sub / 2, str(d),
                        ha="center", va="center", fontsize=sub * 0.6 * 72,
                        color="red", fontweight="bold", zorder=5,
                    )

    if hint.is_placement:
        _draw_digit(ax, left, bottom, cell, hint.cell_index, hint.value, color="#2e8b57", alpha=0.6)

    wrapped = "\n".join(textwrap.wrap(hint.explanation, width=60))
    ax.text(left, margin + text_h - 0.15, hint.technique, ha="left", va="top", fontsize=12, fontweight="bold")
    ax.text(left, margin + text_h - 0.5, wrapped, ha="left", va="top", fontsize=9)
    return fig


def save_hint_image(path: str, grid: Sequence[int], hint: Hint, notes: NotesInput = None,
                    given: Optional[Sequence[bool]] = None) -> str:
    fig = draw_hint_figure(grid, hint, notes=notes, given=given)
    fig.savefig(path, bbox_inches="tight", dpi=150)
    plt.close(fig)
    logger.info("Figure d'indice écrite : %s", path)
    return path
