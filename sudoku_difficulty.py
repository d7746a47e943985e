# sudoku_difficulty.py
from __future__ import annotations

import hashlib
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Union

from sudoku_core import (
    DIGITS,
    N_CELLS,
    PEERS,
    Grid,
    given_mask,
    grid_to_str,
    is_complete_solution,
)
from sudoku_hash_db import load_global_hashes, save_global_hashes
from sudoku_hints import apply_hint, full_notes, get_hint
from sudoku_rng import SeededRandom, date_seed, shuffled

logger = logging.getLogger(__name__)

# Nombre de régénérations tolérées si une grille "complète" est invalide
MAX_REGENERATIONS = 3


# ---------- Utils de hash / représentation ----------

def hash_grid_sha256(grid: Sequence[int]) -> str:
    """Hash hex (64) d'une grille basée sur grid_to_str (exact match)."""
    return hashlib.sha256(grid_to_str(grid).encode("utf-8")).hexdigest().lower()


def book_hash_v1(puzzles: Sequence["GeneratedPuzzle"]) -> str:
    """
    Hash d'ensemble indépendant de l'ordre :
    - hash de chaque puzzle,
    - tri,
    - payload versionné,
    - re-hash.
    """
    per = sorted(hash_grid_sha256(p.puzzle) for p in puzzles)
    payload = "sudoku-book:v1\ncount=" + str(len(per)) + "\n" + "\n".join(per) + "\n"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest().lower()


# ====================================================
#   PROFILS DE DIFFICULTÉ
# ====================================================

@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    revealed: int  # cases visibles sur 81

    @property
    def cells_to_remove(self) -> int:
        return N_CELLS - self.revealed


EASY_PROFILE = DifficultyProfile("easy", 45)
MEDIUM_PROFILE = DifficultyProfile("medium", 35)
HARD_PROFILE = DifficultyProfile("hard", 28)
EXTREME_PROFILE = DifficultyProfile("extreme", 22)

PROFILES: Dict[str, DifficultyProfile] = {
    EASY_PROFILE.name: EASY_PROFILE,
    MEDIUM_PROFILE.name: MEDIUM_PROFILE,
    HARD_PROFILE.name: HARD_PROFILE,
    EXTREME_PROFILE.name: EXTREME_PROFILE,
}

Difficulty = Union[str, DifficultyProfile]


def get_profile(difficulty: Difficulty) -> DifficultyProfile:
    if isinstance(difficulty, DifficultyProfile):
        return difficulty
    try:
        return PROFILES[difficulty]
    except KeyError:
        raise ValueError(
            f"Difficulté inconnue : {difficulty!r} (attendu : {', '.join(PROFILES)})"
        ) from None


def reveal_count_for(difficulty: Difficulty) -> int:
    return get_profile(difficulty).revealed


# ====================================================
#   GÉNÉRATION D'UNE GRILLE COMPLÈTE
# ====================================================

def _can_place(grid: Grid, index: int, num: int) -> bool:
    return all(grid[p] != num for p in PEERS[index])


def generate_complete_grid(rng: Optional[SeededRandom] = None) -> Grid:
    """
    Remplit les cases 0..80 dans l'ordre par backtracking, chiffres mélangés à
    chaque position. Avec rng, tous les mélanges puisent dans ce générateur
    (même graine -> même grille).
    """
    grid: Grid = [0] * N_CELLS

    def backtrack(pos: int = 0) -> bool:
        if pos == N_CELLS:
            return True
        for v in shuffled(DIGITS, rng):
            if _can_place(grid, pos, v):
                grid[pos] = v
                if backtrack(pos + 1):
                    return True
                grid[pos] = 0
        return False

    if not backtrack():
        # impossible sur une 9x9 vide avec des contraintes correctes
        raise RuntimeError("Backtracking épuisé : aucune grille complète produite")
    return grid


def generate_seeded_grid(rng: SeededRandom) -> Grid:
    return generate_complete_grid(rng)


# ====================================================
#   PUZZLES (partie libre et défi du jour)
# ====================================================

@dataclass
class GeneratedPuzzle:
    puzzle: Grid
    solution: Grid
    difficulty: str
    date: Optional[str] = None

    @property
    def given(self) -> List[bool]:
        return given_mask(self.puzzle)

    def to_dict(self) -> dict:
        out = {"puzzle": list(self.puzzle), "solution": list(self.solution), "difficulty": self.difficulty}
        if self.date is not None:
            out["date"] = self.date
        return out


def _remove_cells(solution: Grid, count: int, rng: Optional[SeededRandom] = None) -> Grid:
    """Copie de la solution dont les count premières positions mélangées sont vidées."""
    puzzle = list(solution)
    for pos in shuffled(range(N_CELLS), rng)[:count]:
        puzzle[pos] = 0
    return puzzle


def create_puzzle(difficulty: Difficulty) -> GeneratedPuzzle:
    """
    Grille complète aléatoire + retrait de 81 - revealed cases.
    Pas de contrôle d'unicité de la solution (génération rapide assumée).
    """
    profile = get_profile(difficulty)
    for attempt in range(1, MAX_REGENERATIONS + 1):
        solution = generate_complete_grid()
        if is_complete_solution(solution):
            break
        logger.warning("Grille générée invalide (essai %d/%d), régénération", attempt, MAX_REGENERATIONS)
    else:
        logger.error("Aucune grille valide après %d essais", MAX_REGENERATIONS)
        raise RuntimeError(f"Impossible de générer une grille valide après {MAX_REGENERATIONS} essais")

    puzzle = _remove_cells(solution, profile.cells_to_remove)
    logger.debug("Puzzle %s créé (%d indices)", profile.name, profile.revealed)
    return GeneratedPuzzle(puzzle, solution, profile.name)


def create_daily_puzzle(date_str: str, difficulty: Difficulty = "hard") -> GeneratedPuzzle:
    """
    Puzzle entièrement déterminé par la date : graine = date_seed(date_str),
    grille puis retrait tirés du MÊME générateur, dans cet ordre.
    Si la grille est invalide : un seul nouvel essai avec graine + 1.
    """
    profile = get_profile(difficulty)
    seed = date_seed(date_str)
    for attempt_seed in (seed, seed + 1):
        rng = SeededRandom(attempt_seed)
        solution = generate_seeded_grid(rng)
        if is_complete_solution(solution):
            puzzle = _remove_cells(solution, profile.cells_to_remove, rng)
            logger.debug("Défi du %s : graine %d, %s", date_str, attempt_seed, profile.name)
            return GeneratedPuzzle(puzzle, solution, profile.name, date=date_str)
        logger.warning("Grille du %s invalide avec la graine %d", date_str, attempt_seed)

    logger.error("Défi du %s : grilles invalides pour les graines %d et %d", date_str, seed, seed + 1)
    raise RuntimeError(f"Impossible de générer le défi du {date_str}")


# ====================================================
#   RÉSOLUTION LOGIQUE (sans essai) : notation
# ====================================================

@dataclass
class Rating:
    solved: bool
    grid: Grid
    used: Dict[str, int] = field(default_factory=dict)
    steps: int = 0


def rate_puzzle(puzzle: Sequence[int], max_steps: int = N_CELLS * 10) -> Rating:
    """
    Résout comme un joueur qui a posé toutes ses notes : indice après indice,
    sans jamais deviner. Retourne les techniques utilisées et si la grille a été
    terminée. Une grille bloquée (technique hors catalogue) -> solved=False.
    """
    g = list(puzzle)
    notes = full_notes(g)
    used: Counter = Counter()

    for step in range(max_steps):
        if 0 not in g:
            return Rating(True, g, dict(used), step)
        hint = get_hint(g, None, notes)
        if hint is None:
            return Rating(False, g, dict(used), step)
        used[hint.technique] += 1
        g, notes = apply_hint(g, notes, hint)
        if hint.is_placement:
            # le joueur efface aussitôt ce chiffre des notes voisines
            peers = PEERS[hint.cell_index]
            notes = tuple(
                s - {hint.value} if i in peers else s for i, s in enumerate(notes)
            )
    return Rating(0 not in g, g, dict(used), max_steps)


def difficulty_score(used: Dict[str, int]) -> int:
    """Score indicatif : pondère chaque technique par sa difficulté."""
    weights = {
        "Last Free Cell": 1,
        "Naked Single": 1,
        "Hidden Single": 2,
        "Pointing Pairs": 3,
        "Pointing Triples": 3,
        "Naked Pairs": 4,
        "Hidden Pairs": 5,
        "Naked Triples": 6,
        "Hidden Triples": 7,
        "X-Wing": 8,
        "Y-Wing": 9,
        "Swordfish": 10,
    }
    return sum(weights.get(name, 0) * n for name, n in used.items())


# ====================================================
#   GÉNÉRATION MULTI-PUZZLES
# ====================================================

def generate_puzzles_for_profile(
    profile: Difficulty,
    count: int,
    hash_db_path: Optional[str] = None,
) -> List[GeneratedPuzzle]:
    """
    Génère `count` puzzles pour un profil donné, en garantissant :
      - pas de doublons dans la génération courante
      - pas de doublons vis-à-vis de l'historique global
        (fichier de hashes, via sudoku_hash_db).
    """
    profile = get_profile(profile)
    global_hashes = load_global_hashes(hash_db_path)

    puzzles: List[GeneratedPuzzle] = []
    seen_local: Set[str] = set()
    tries = 0
    max_tries = count * 100

    while len(puzzles) < count and tries < max_tries:
        if tries and tries % 500 == 0:
            print(f"[{profile.name}] tries={tries}, ok={len(puzzles)}/{count}")
        tries += 1

        generated = create_puzzle(profile)
        sig = grid_to_str(generated.puzzle)
        h = hash_grid_sha256(generated.puzzle)

        # 1. doublon local (dans cette série)
        if sig in seen_local:
            continue
        # 2. doublon global (dans tous les livres déjà générés)
        if h in global_hashes:
            continue

        seen_local.add(sig)
        global_hashes.add(h)
        puzzles.append(generated)

    if len(puzzles) < count:
        raise RuntimeError(f"Seulement {len(puzzles)} puzzles générés pour le profil {profile.name}")

    save_global_hashes(global_hashes, hash_db_path)
    return puzzles

