# sudoku_core.py
"""
Moteur Sudoku commun :
- grille plate de 81 cases (0 = vide)
- géométrie lignes / colonnes / blocs, UNITS / PEERS
- calcul de candidats (avec notes du joueur)
- validation et codec texte
"""

from __future__ import annotations
import json
from collections import namedtuple
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

Grid = List[int]
Notes = Tuple[FrozenSet[int], ...]
NotesInput = Union[None, Sequence[Iterable[int]], Mapping[int, Iterable[int]]]

DIGITS = tuple(range(1, 10))
N_CELLS = 81

CellInfo = namedtuple("CellInfo", "row col box_row box_col")
Unit = namedtuple("Unit", "kind number indices")


# ---------- Géométrie ----------

def row_indices(row: int) -> List[int]:
    return [row * 9 + c for c in range(9)]


def col_indices(col: int) -> List[int]:
    return [r * 9 + col for r in range(9)]


def box_indices(box_row: int, box_col: int) -> List[int]:
    return [(box_row * 3 + dr) * 9 + (box_col * 3 + dc) for dr in range(3) for dc in range(3)]


def cell_info(index: int) -> CellInfo:
    row, col = divmod(index, 9)
    return CellInfo(row, col, row // 3, col // 3)


def box_number(box_row: int, box_col: int) -> int:
    """Numéro de bloc 1-based (1..9), ordre ligne par ligne."""
    return box_row * 3 + box_col + 1


def cell_name(index: int) -> str:
    row, col = divmod(index, 9)
    return f"R{row + 1}C{col + 1}"


def cells_see_each_other(a: int, b: int) -> bool:
    ia, ib = cell_info(a), cell_info(b)
    return (
        ia.row == ib.row
        or ia.col == ib.col
        or (ia.box_row == ib.box_row and ia.box_col == ib.box_col)
    )


def unit_label(unit: Unit) -> str:
    """Libellé 1-based utilisé dans les explications ("row 3", "column 4", "box 5")."""
    return f"{unit.kind} {unit.number + 1}"


# ---------- UNITS & PEERS communs ----------

# Ordre de balayage fixe : lignes 0→8, colonnes 0→8, blocs ligne par ligne
UNITS: List[Unit] = []
for r in range(9):
    UNITS.append(Unit("row", r, tuple(row_indices(r))))
for c in range(9):
    UNITS.append(Unit("column", c, tuple(col_indices(c))))
for br in range(3):
    for bc in range(3):
        UNITS.append(Unit("box", br * 3 + bc, tuple(box_indices(br, bc))))

ROWS: List[Unit] = UNITS[0:9]
COLS: List[Unit] = UNITS[9:18]
BOXES: List[Unit] = UNITS[18:27]

# Voisins de chaque case
PEERS: Dict[int, FrozenSet[int]] = {}
for i in range(N_CELLS):
    info = cell_info(i)
    peers = set(row_indices(info.row)) | set(col_indices(info.col))
    peers |= set(box_indices(info.box_row, info.box_col))
    peers.discard(i)
    PEERS[i] = frozenset(peers)


def units_of(index: int) -> Tuple[Unit, Unit, Unit]:
    """(ligne, colonne, bloc) contenant la case."""
    info = cell_info(index)
    return ROWS[info.row], COLS[info.col], BOXES[info.box_row * 3 + info.box_col]


# ---------- Contrôles d'entrée ----------

def check_grid(grid: Sequence[int], name: str = "grid") -> None:
    """Lève ValueError si la grille n'a pas 81 cases dans 0..9."""
    if len(grid) != N_CELLS:
        raise ValueError(f"{name} doit contenir {N_CELLS} cases (reçu {len(grid)})")
    for i, v in enumerate(grid):
        if not isinstance(v, int) or isinstance(v, bool) or not 0 <= v <= 9:
            raise ValueError(f"{name}[{i}] hors de 0..9 : {v!r}")


def _note_set(idx: int, digits) -> FrozenSet[int]:
    try:
        return frozenset(digits or ())
    except TypeError as exc:
        raise ValueError(f"notes[{idx}] doit être un ensemble de chiffres : {digits!r}") from exc


def normalize_notes(notes: NotesInput) -> Notes:
    """
    Notes du joueur -> tuple immuable de 81 frozensets.
    Accepte None, une séquence de 81 itérables ou un dict {index: chiffres}.
    """
    if notes is None:
        return tuple(frozenset() for _ in range(N_CELLS))

    if isinstance(notes, Mapping):
        cells: List[FrozenSet[int]] = [frozenset() for _ in range(N_CELLS)]
        for idx, digits in notes.items():
            if not isinstance(idx, int) or not 0 <= idx < N_CELLS:
                raise ValueError(f"index de note hors de 0..80 : {idx!r}")
            cells[idx] = _note_set(idx, digits)
    else:
        if len(notes) != N_CELLS:
            raise ValueError(f"notes doit contenir {N_CELLS} ensembles (reçu {len(notes)})")
        cells = [_note_set(idx, digits) for idx, digits in enumerate(notes)]

    for idx, digits in enumerate(cells):
        bad = [d for d in digits if d not in DIGITS]
        if bad:
            raise ValueError(f"notes[{idx}] contient des chiffres hors de 1..9 : {sorted(bad, key=str)}")
    return tuple(cells)


# ---------- Candidats ----------

def possible_values(grid: Sequence[int], index: int) -> FrozenSet[int]:
    """Chiffres absents de la ligne, de la colonne et du bloc ; vide si la case est remplie."""
    if grid[index] != 0:
        return frozenset()
    used = {grid[p] for p in PEERS[index]}
    return frozenset(v for v in DIGITS if v not in used)


def candidates(grid: Sequence[int], notes: Notes, index: int) -> FrozenSet[int]:
    """possible_values, restreints aux notes du joueur s'il en a posé sur la case."""
    possible = possible_values(grid, index)
    cell_notes = notes[index]
    if cell_notes:
        return possible & cell_notes
    return possible


def all_candidates(grid: Sequence[int], notes: Notes) -> Tuple[FrozenSet[int], ...]:
    return tuple(candidates(grid, notes, i) for i in range(N_CELLS))


def elimination_info(grid: Sequence[int], index: int) -> List[Tuple[int, str, int]]:
    """
    Pour chaque chiffre déjà placé autour de la case : (chiffre, raison, case bloquante).
    Ordre : ligne, puis colonne, puis bloc ; un chiffre n'est cité qu'une fois.
    """
    info = cell_info(index)
    seen = set()
    out = []
    sources = (
        (row_indices(info.row), f"row {info.row + 1}"),
        (col_indices(info.col), f"column {info.col + 1}"),
        (box_indices(info.box_row, info.box_col), f"box {box_number(info.box_row, info.box_col)}"),
    )
    for indices, reason in sources:
        for i in indices:
            v = grid[i]
            if v != 0 and v not in seen:
                seen.add(v)
                out.append((v, reason, i))
    return out


# ---------- Validation ----------

def _has_duplicates(values: Iterable[int]) -> bool:
    seen = set()
    for v in values:
        if v == 0:
            continue
        if v in seen:
            return True
        seen.add(v)
    return False


def is_valid_grid(grid: Sequence[int]) -> bool:
    """Aucun doublon non nul dans une ligne, colonne ou bloc."""
    return not any(_has_duplicates(grid[i] for i in unit.indices) for unit in UNITS)


def is_group_complete(grid: Sequence[int], indices: Sequence[int]) -> bool:
    values = [grid[i] for i in indices if grid[i] != 0]
    return len(values) == 9 and len(set(values)) == 9


def is_complete_solution(grid: Sequence[int]) -> bool:
    """Chaque unité est une permutation de 1..9."""
    return len(grid) == N_CELLS and all(is_group_complete(grid, unit.indices) for unit in UNITS)


def is_valid_placement(grid: Sequence[int], index: int, num: int) -> bool:
    """num peut-il aller en index sans conflit (la case elle-même est ignorée) ?"""
    return all(grid[p] != num for p in PEERS[index])


def is_puzzle_solved(grid: Sequence[int], solution: Sequence[int]) -> bool:
    return len(grid) == len(solution) and all(a == b for a, b in zip(grid, solution))


def completed_groups(grid: Sequence[int], index: int) -> List[int]:
    """Cases (triées, sans doublon) des unités complètes autour de index."""
    cells = set()
    for unit in units_of(index):
        if is_group_complete(grid, unit.indices):
            cells.update(unit.indices)
    return sorted(cells)


def given_mask(puzzle: Sequence[int]) -> List[bool]:
    """Masque des indices (True = case donnée) ; à capturer à la création du puzzle."""
    return [v != 0 for v in puzzle]


def count_clues(grid: Sequence[int]) -> int:
    return sum(1 for v in grid if v)


# ---------- Représentation texte ----------

def grid_to_str(grid: Sequence[int]) -> str:
    """Chaîne canonique (81 caractères, 0 = vide)."""
    return "".join(str(v) for v in grid)


def parse_grid(text: str) -> Grid:
    """
    81 caractères (0 ou . pour une case vide, blancs ignorés)
    ou liste JSON de 81 entiers.
    """
    text = text.strip()
    if text.startswith("["):
        try:
            grid = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"grille JSON illisible : {exc}") from exc
        if not isinstance(grid, list):
            raise ValueError("la grille JSON doit être une liste")
    else:
        chars = [ch for ch in text if not ch.isspace()]
        grid = []
        for ch in chars:
            if ch == ".":
                grid.append(0)
            elif ch.isdigit():
                grid.append(int(ch))
            else:
                raise ValueError(f"caractère invalide dans la grille : {ch!r}")
    check_grid(grid)
    return list(grid)


def format_grid(grid: Sequence[int]) -> str:
    """Affichage 9 lignes avec séparateurs de blocs (débogage / CLI)."""
    lines = []
    for r in range(9):
        if r and r % 3 == 0:
            lines.append("------+-------+------")
        row = [str(grid[r * 9 + c]) if grid[r * 9 + c] else "." for c in range(9)]
        lines.append(" | ".join(" ".join(row[i:i + 3]) for i in (0, 3, 6)))
    return "\n".join(lines)
