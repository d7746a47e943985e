# sudoku_hints.py
"""
Système d'indices : cherche la prochaine étape logique "humaine" sur la grille
du joueur et la présente de façon explicable (cases à surligner par rôle,
chiffres éliminés, notes à effacer).

Les détecteurs sont essayés dans un ordre fixe (TECHNIQUES), du plus simple au
plus avancé ; le premier résultat gagne. Aucun essai/erreur : si rien ne
s'applique, get_hint renvoie None.

Les techniques d'élimination (pointing, paires, triplets, X-Wing, Y-Wing,
Swordfish) ne sont proposées que si elles effacent au moins une note posée par
le joueur.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

from sudoku_core import (
    BOXES,
    COLS,
    DIGITS,
    N_CELLS,
    ROWS,
    UNITS,
    Grid,
    Notes,
    NotesInput,
    Unit,
    all_candidates,
    cell_info,
    cell_name,
    cells_see_each_other,
    check_grid,
    elimination_info,
    normalize_notes,
    possible_values,
    unit_label,
)

logger = logging.getLogger(__name__)

# Rôles de surlignage
TARGET = "target"
ELIMINATOR = "eliminator"
PAIR = "pair"
TRIPLE = "triple"
AFFECTED = "affected"


# ====================================================
#   MODÈLE
# ====================================================

@dataclass(frozen=True)
class HintHighlight:
    cells: Tuple[int, ...]
    type: str


@dataclass(frozen=True)
class EliminatedNumber:
    number: int
    reason: str


@dataclass(frozen=True)
class NoteRemoval:
    cell: int
    number: int


@dataclass(frozen=True)
class Hint:
    """
    Résultat éphémère : jamais stocké avec la partie, recalculé à chaque demande.
    value == 0 quand la technique élimine des candidats sans placer de chiffre.
    """
    cell_index: int
    value: int
    technique: str
    explanation: str
    highlights: Tuple[HintHighlight, ...] = ()
    eliminated_numbers: Tuple[EliminatedNumber, ...] = ()
    notes_to_remove: Tuple[NoteRemoval, ...] = ()

    @property
    def is_placement(self) -> bool:
        return self.value != 0

    def cells_with_role(self, role: str) -> Tuple[int, ...]:
        out: List[int] = []
        for h in self.highlights:
            if h.type == role:
                out.extend(h.cells)
        return tuple(out)

    def to_dict(self) -> dict:
        """Forme d'échange (clés camelCase) attendue par la couche UI."""
        return {
            "cellIndex": self.cell_index,
            "value": self.value,
            "technique": self.technique,
            "explanation": self.explanation,
            "highlights": [{"cells": list(h.cells), "type": h.type} for h in self.highlights],
            "eliminatedNumbers": [
                {"number": e.number, "reason": e.reason} for e in self.eliminated_numbers
            ],
            "notesToRemove": [{"cell": n.cell, "number": n.number} for n in self.notes_to_remove],
        }


@dataclass(frozen=True)
class HintContext:
    """Instantané immuable partagé par tous les détecteurs."""
    grid: Tuple[int, ...]
    notes: Notes
    candidates: Tuple[FrozenSet[int], ...] = field(repr=False)

    @classmethod
    def build(cls, grid: Sequence[int], notes: NotesInput = None) -> "HintContext":
        g = tuple(grid)
        n = normalize_notes(notes)
        return cls(g, n, all_candidates(g, n))

    def empty_cells(self, indices: Sequence[int]) -> List[int]:
        return [i for i in indices if self.grid[i] == 0]

    def cells_with(self, indices: Sequence[int], num: int) -> List[int]:
        return [i for i in indices if num in self.candidates[i]]

    def placed_in(self, indices: Sequence[int], num: int) -> bool:
        return any(self.grid[i] == num for i in indices)

    def removable(self, cells: Sequence[int], nums: Sequence[int]) -> List[NoteRemoval]:
        """Notes du joueur, parmi nums, effectivement présentes sur ces cases."""
        out = []
        for cell in cells:
            cell_notes = self.notes[cell]
            if not cell_notes:
                continue
            out.extend(NoteRemoval(cell, n) for n in nums if n in cell_notes)
        return out


def _fmt_set(nums: Sequence[int]) -> str:
    return "{" + ", ".join(str(n) for n in nums) + "}"


def _noted(ctx: HintContext, removals: Sequence[NoteRemoval]) -> Tuple[int, ...]:
    """Cases concernées par des notes à effacer, dans l'ordre, sans doublon."""
    seen: List[int] = []
    for r in removals:
        if r.cell not in seen:
            seen.append(r.cell)
    return tuple(seen)


# ====================================================
#   NOTES INVALIDES
# ====================================================

def find_invalid_notes(ctx: HintContext) -> Optional[Hint]:
    """Note posée par le joueur mais bloquée depuis par un chiffre placé."""
    for i in range(N_CELLS):
        if ctx.grid[i] != 0 or not ctx.notes[i]:
            continue
        possible = possible_values(ctx.grid, i)
        invalid = sorted(n for n in ctx.notes[i] if n not in possible)
        if not invalid:
            continue

        blockers = {num: cell for num, _reason, cell in elimination_info(ctx.grid, i)}
        eliminators: List[int] = []
        for n in invalid:
            cell = blockers.get(n)
            if cell is not None and cell not in eliminators:
                eliminators.append(cell)

        return Hint(
            cell_index=i,
            value=0,
            technique="Invalid Notes",
            explanation=f"Notes {_fmt_set(invalid)} at {cell_name(i)} are blocked. Remove them.",
            highlights=(HintHighlight((i,), TARGET), HintHighlight(tuple(eliminators), ELIMINATOR)),
            eliminated_numbers=tuple(EliminatedNumber(n, "blocked") for n in invalid),
            notes_to_remove=tuple(NoteRemoval(i, n) for n in invalid),
        )
    return None


# ====================================================
#   DÉBUTANT : placements
# ====================================================

def find_last_free_cell(ctx: HintContext) -> Optional[Hint]:
    """Unité avec une seule case vide : le chiffre manquant est forcé."""
    for unit in UNITS:
        empty = ctx.empty_cells(unit.indices)
        if len(empty) != 1:
            continue
        cell = empty[0]
        if not ctx.candidates[cell]:
            continue
        value = min(ctx.candidates[cell])
        label = unit_label(unit)
        return Hint(
            cell_index=cell,
            value=value,
            technique="Last Free Cell",
            explanation=f"{label.capitalize()} has only one empty cell. The missing number is {value}.",
            highlights=(
                HintHighlight((cell,), TARGET),
                HintHighlight(tuple(i for i in unit.indices if ctx.grid[i] != 0), ELIMINATOR),
            ),
        )
    return None


def find_naked_single(ctx: HintContext) -> Optional[Hint]:
    """Case vide n'ayant plus qu'un seul candidat."""
    for i in range(N_CELLS):
        if ctx.grid[i] != 0 or len(ctx.candidates[i]) != 1:
            continue
        (value,) = tuple(ctx.candidates[i])
        elim = elimination_info(ctx.grid, i)
        blockers: List[int] = []
        for _num, _reason, cell in elim:
            if cell not in blockers:
                blockers.append(cell)
        return Hint(
            cell_index=i,
            value=value,
            technique="Naked Single",
            explanation=f"Cell {cell_name(i)} can only be {value}. All other numbers are blocked.",
            highlights=(HintHighlight((i,), TARGET), HintHighlight(tuple(blockers), ELIMINATOR)),
            eliminated_numbers=tuple(EliminatedNumber(num, f"in {reason}") for num, reason, _c in elim),
        )
    return None


def find_hidden_single(ctx: HintContext) -> Optional[Hint]:
    """Dans une unité, un chiffre n'a plus qu'une seule place possible."""
    for unit in UNITS:
        for num in DIGITS:
            if ctx.placed_in(unit.indices, num):
                continue
            cells = ctx.cells_with(unit.indices, num)
            if len(cells) != 1:
                continue
            cell = cells[0]
            info = cell_info(cell)
            if unit.kind == "row":
                where = f"column {info.col + 1}"
            elif unit.kind == "column":
                where = f"row {info.row + 1}"
            else:
                where = cell_name(cell)
            return Hint(
                cell_index=cell,
                value=num,
                technique="Hidden Single",
                explanation=f"In {unit_label(unit)}, {num} can only go at {where}. Other cells are blocked.",
                highlights=(
                    HintHighlight((cell,), TARGET),
                    HintHighlight(
                        tuple(i for i in unit.indices if i != cell and ctx.grid[i] == 0), AFFECTED
                    ),
                ),
            )
    return None


# ====================================================
#   INTERMÉDIAIRE : éliminations
# ====================================================

def find_pointing(ctx: HintContext) -> Optional[Hint]:
    """
    Pointing pairs/triples : dans un bloc, les candidats d'un chiffre tiennent sur
    une seule ligne (ou colonne) -> on l'élimine du reste de cette ligne (colonne).
    """
    for box in BOXES:
        box_cells = set(box.indices)
        box_no = box.number + 1
        for num in DIGITS:
            if ctx.placed_in(box.indices, num):
                continue
            cells = ctx.cells_with(box.indices, num)
            if not 2 <= len(cells) <= 3:
                continue
            name = "Pointing Pairs" if len(cells) == 2 else "Pointing Triples"
            role = PAIR if len(cells) == 2 else TRIPLE

            lines = []
            rows = {cell_info(i).row for i in cells}
            if len(rows) == 1:
                lines.append(ROWS[rows.pop()])
            cols = {cell_info(i).col for i in cells}
            if len(cols) == 1:
                lines.append(COLS[cols.pop()])

            for line in lines:
                affected = [i for i in line.indices if i not in box_cells and num in ctx.candidates[i]]
                removals = ctx.removable(affected, (num,))
                if not removals:
                    continue
                label = unit_label(line)
                return Hint(
                    cell_index=cells[0],
                    value=0,
                    technique=name,
                    explanation=(
                        f"{num} in box {box_no} is limited to {label}. "
                        f"Remove {num} from other cells in this {line.kind}."
                    ),
                    highlights=(HintHighlight(tuple(cells), role), HintHighlight(_noted(ctx, removals), AFFECTED)),
                    eliminated_numbers=(EliminatedNumber(num, f"pointing from box {box_no}"),),
                    notes_to_remove=tuple(removals),
                )
    return None


def _naked_subset(ctx: HintContext, size: int) -> Optional[Hint]:
    """Paires (size=2) ou triplets (size=3) nus, unité par unité."""
    technique = "Naked Pairs" if size == 2 else "Naked Triples"
    role = PAIR if size == 2 else TRIPLE
    for unit in UNITS:
        label = unit_label(unit)
        pool = [i for i in unit.indices if ctx.grid[i] == 0 and 2 <= len(ctx.candidates[i]) <= size]
        for cells in combinations(pool, size):
            digits = frozenset().union(*(ctx.candidates[c] for c in cells))
            if len(digits) != size:
                continue
            nums = sorted(digits)
            affected = [
                i for i in unit.indices
                if i not in cells and ctx.grid[i] == 0 and digits & ctx.candidates[i]
            ]
            removals = ctx.removable(affected, nums)
            if not removals:
                continue
            if size == 2:
                explanation = (
                    f"Cells form a naked pair with {_fmt_set(nums)} in {label}. "
                    "These numbers can be removed from other cells."
                )
                reason = "forms naked pair"
            else:
                explanation = (
                    f"Three cells form a naked triple with {_fmt_set(nums)} in {label}. "
                    "Remove these from other cells."
                )
                reason = "forms naked triple"
            return Hint(
                cell_index=cells[0],
                value=0,
                technique=technique,
                explanation=explanation,
                highlights=(HintHighlight(tuple(cells), role), HintHighlight(_noted(ctx, removals), AFFECTED)),
                eliminated_numbers=tuple(EliminatedNumber(n, reason) for n in nums),
                notes_to_remove=tuple(removals),
            )
    return None


def _hidden_subset(ctx: HintContext, size: int) -> Optional[Hint]:
    """Paires/triplets cachés : size chiffres confinés à exactement size cases d'une unité."""
    technique = "Hidden Pairs" if size == 2 else "Hidden Triples"
    role = PAIR if size == 2 else TRIPLE
    for unit in UNITS:
        label = unit_label(unit)
        empty = ctx.empty_cells(unit.indices)
        positions = {n: ctx.cells_with(empty, n) for n in DIGITS}
        # chiffres encore à placer dans l'unité, avec au plus size emplacements
        open_digits = [
            n for n in DIGITS
            if not ctx.placed_in(unit.indices, n) and 1 <= len(positions[n]) <= size
        ]
        for nums in combinations(open_digits, size):
            if size == 2 and not (len(positions[nums[0]]) == 2 and positions[nums[0]] == positions[nums[1]]):
                continue
            cells = sorted(set().union(*(positions[n] for n in nums)))
            if len(cells) != size:
                continue
            removals = []
            for cell in cells:
                cell_notes = ctx.notes[cell]
                if not cell_notes:
                    continue
                possible = possible_values(ctx.grid, cell)
                removals.extend(
                    NoteRemoval(cell, n) for n in sorted(cell_notes) if n not in nums and n in possible
                )
            if not removals:
                continue
            if size == 2:
                explanation = (
                    f"{_fmt_set(nums)} can only go in these two cells in {label}. "
                    "Remove other candidates from them."
                )
                reason = "hidden pair"
            else:
                explanation = (
                    f"{_fmt_set(nums)} can only go in these three cells in {label}. "
                    "Remove other candidates."
                )
                reason = "hidden triple"
            return Hint(
                cell_index=cells[0],
                value=0,
                technique=technique,
                explanation=explanation,
                highlights=(HintHighlight(tuple(cells), role),),
                eliminated_numbers=tuple(EliminatedNumber(r.number, reason) for r in removals),
                notes_to_remove=tuple(removals),
            )
    return None


def find_naked_pairs(ctx: HintContext) -> Optional[Hint]:
    return _naked_subset(ctx, 2)


def find_hidden_pairs(ctx: HintContext) -> Optional[Hint]:
    return _hidden_subset(ctx, 2)


def find_naked_triples(ctx: HintContext) -> Optional[Hint]:
    return _naked_subset(ctx, 3)


def find_hidden_triples(ctx: HintContext) -> Optional[Hint]:
    return _hidden_subset(ctx, 3)


# ====================================================
#   AVANCÉ : poissons et ailes
# ====================================================

def _fish(ctx: HintContext, num: int, base: List[Unit], cover: List[Unit], size: int) -> Optional[Hint]:
    """
    X-Wing (size=2) / Swordfish (size=3) pour un chiffre.
    base = lignes (ou colonnes) portant le motif, cover = unités transverses.
    """
    cross = "col" if base is ROWS else "row"
    lines = []
    for unit in base:
        cells = ctx.cells_with(unit.indices, num)
        if 2 <= len(cells) <= size:
            lines.append((unit, [getattr(cell_info(i), cross) for i in cells]))

    for group in combinations(lines, size):
        if size == 2:
            if group[0][1] != group[1][1]:
                continue
            cover_pos = group[0][1]
        else:
            cover_pos = sorted(set().union(*(pos for _u, pos in group)))
            if len(cover_pos) != 3:
                continue

        base_units = [u for u, _pos in group]
        fish_cells = sorted(
            i for u in base_units for i in u.indices
            if num in ctx.candidates[i] and getattr(cell_info(i), cross) in cover_pos
        )
        affected = [
            i for p in cover_pos for i in cover[p].indices
            if i not in fish_cells and num in ctx.candidates[i]
        ]
        removals = ctx.removable(affected, (num,))
        if not removals:
            continue

        base_kind = "rows" if base is ROWS else "columns"
        cover_kind = "columns" if base is ROWS else "rows"
        base_nums = [u.number + 1 for u in base_units]
        cover_nums = [p + 1 for p in cover_pos]
        if size == 2:
            technique = "X-Wing"
            role = PAIR
            explanation = (
                f"X-Wing on {num} in {base_kind} {base_nums[0]} & {base_nums[1]}, "
                f"{cover_kind} {cover_nums[0]} & {cover_nums[1]}. "
                f"Remove {num} from other cells in these {cover_kind}."
            )
        else:
            technique = "Swordfish"
            role = TRIPLE
            explanation = (
                f"Swordfish on {num} in {base_kind} {', '.join(map(str, base_nums))} "
                f"and {cover_kind} {', '.join(map(str, cover_nums))}. "
                f"Remove {num} from other cells in these {cover_kind}."
            )
        return Hint(
            cell_index=fish_cells[0],
            value=0,
            technique=technique,
            explanation=explanation,
            highlights=(HintHighlight(tuple(fish_cells), role), HintHighlight(_noted(ctx, removals), AFFECTED)),
            eliminated_numbers=(EliminatedNumber(num, f"{technique} elimination"),),
            notes_to_remove=tuple(removals),
        )
    return None


def find_x_wing(ctx: HintContext) -> Optional[Hint]:
    for num in DIGITS:
        hint = _fish(ctx, num, ROWS, COLS, 2) or _fish(ctx, num, COLS, ROWS, 2)
        if hint:
            return hint
    return None


def find_swordfish(ctx: HintContext) -> Optional[Hint]:
    for num in DIGITS:
        hint = _fish(ctx, num, ROWS, COLS, 3) or _fish(ctx, num, COLS, ROWS, 3)
        if hint:
            return hint
    return None


def find_y_wing(ctx: HintContext) -> Optional[Hint]:
    """
    Pivot {A,B}, deux ailes voyant le pivot : {A,C} et {B,C}.
    Toute case voyant les deux ailes ne peut pas contenir C.
    """
    bivalue = [i for i in range(N_CELLS) if ctx.grid[i] == 0 and len(ctx.candidates[i]) == 2]
    for pivot in bivalue:
        a, b = sorted(ctx.candidates[pivot])
        wings = [
            cell for cell in bivalue
            if cell != pivot
            and cells_see_each_other(pivot, cell)
            and (a in ctx.candidates[cell]) != (b in ctx.candidates[cell])
        ]
        for wing1, wing2 in combinations(wings, 2):
            c1, c2 = ctx.candidates[wing1], ctx.candidates[wing2]
            # (A,C)+(B,C) puis l'ordre inverse (B,C)+(A,C)
            for first, second in ((a, b), (b, a)):
                if first not in c1 or second not in c2:
                    continue
                (c,) = tuple(c1 - {first})
                if c2 - {second} != {c}:
                    continue
                affected = [
                    i for i in range(N_CELLS)
                    if i not in (pivot, wing1, wing2)
                    and ctx.grid[i] == 0
                    and c in ctx.candidates[i]
                    and cells_see_each_other(i, wing1)
                    and cells_see_each_other(i, wing2)
                ]
                removals = ctx.removable(affected, (c,))
                if not removals:
                    continue
                return Hint(
                    cell_index=pivot,
                    value=0,
                    technique="Y-Wing",
                    explanation=(
                        f"Y-Wing: Pivot has {{{a},{b}}}, wings have {{{first},{c}}} and {{{second},{c}}}. "
                        f"Cells seeing both wings cannot have {c}."
                    ),
                    highlights=(
                        HintHighlight((pivot,), TARGET),
                        HintHighlight((wing1, wing2), PAIR),
                        HintHighlight(_noted(ctx, removals), AFFECTED),
                    ),
                    eliminated_numbers=(EliminatedNumber(c, "Y-Wing elimination"),),
                    notes_to_remove=tuple(removals),
                )
    return None


# ====================================================
#   CATALOGUE & POINT D'ENTRÉE
# ====================================================

Detector = Callable[[HintContext], Optional[Hint]]

# Ordre de priorité : du plus facile à repérer au plus avancé
TECHNIQUES: List[Tuple[str, Detector]] = [
    ("Invalid Notes", find_invalid_notes),
    ("Last Free Cell", find_last_free_cell),
    ("Naked Single", find_naked_single),
    ("Hidden Single", find_hidden_single),
    ("Pointing Pairs/Triples", find_pointing),
    ("Naked Pairs", find_naked_pairs),
    ("Hidden Pairs", find_hidden_pairs),
    ("Naked Triples", find_naked_triples),
    ("Hidden Triples", find_hidden_triples),
    ("X-Wing", find_x_wing),
    ("Y-Wing", find_y_wing),
    ("Swordfish", find_swordfish),
]


def get_hint(grid: Sequence[int], solution: Optional[Sequence[int]], notes: NotesInput) -> Optional[Hint]:
    """
    Prochaine étape logique pour la grille du joueur, ou None si aucune technique
    du catalogue ne s'applique. La solution est acceptée pour le contrat d'appel
    mais n'est jamais consultée : l'indice doit être déductible par le joueur.
    """
    check_grid(grid)
    if solution is not None:
        check_grid(solution, "solution")
    ctx = HintContext.build(grid, notes)

    for _name, detector in TECHNIQUES:
        hint = detector(ctx)
        if hint is not None:
            logger.debug("indice %s en %s (valeur %d)", hint.technique, cell_name(hint.cell_index), hint.value)
            return hint
    logger.debug("aucune technique applicable")
    return None


def full_notes(grid: Sequence[int]) -> Notes:
    """Notes "complètes" : tous les candidats de chaque case vide."""
    return all_candidates(grid, normalize_notes(None))


def apply_hint(grid: Sequence[int], notes: NotesInput, hint: Hint) -> Tuple[Grid, Notes]:
    """
    Applique un indice sans toucher aux entrées :
    place la valeur (et vide les notes de la case), efface les notes listées.
    """
    new_grid = list(grid)
    cells = [set(s) for s in normalize_notes(notes)]
    if hint.is_placement:
        new_grid[hint.cell_index] = hint.value
        cells[hint.cell_index].clear()
    for removal in hint.notes_to_remove:
        cells[removal.cell].discard(removal.number)
    return new_grid, tuple(frozenset(s) for s in cells)
