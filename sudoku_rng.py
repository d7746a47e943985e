# sudoku_rng.py
"""
Aléatoire reproductible pour le défi du jour.

- SeededRandom : Mulberry32, arithmétique entière 32 bits uniquement
  (même suite de tirages sur toutes les plateformes pour une graine donnée)
- date_seed : hash glissant d'une date "YYYY-MM-DD" -> graine >= 0
- shuffled : Fisher-Yates, du dernier indice vers 1, j = floor(next() * (i + 1))

Ne pas changer l'algorithme : les grilles quotidiennes déjà publiées en dépendent.
"""

from __future__ import annotations
import datetime
import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    """Produit 32 bits (bits de poids faible), comme Math.imul."""
    return (a * b) & MASK32


def _to_int32(x: int) -> int:
    x &= MASK32
    return x - (1 << 32) if x & 0x80000000 else x


class SeededRandom:
    """Générateur Mulberry32 ; next() renvoie un flottant dans [0, 1)."""

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & MASK32

    def next_uint32(self) -> int:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return (t ^ (t >> 14)) & MASK32

    def next(self) -> float:
        return self.next_uint32() / 4294967296

    def next_int(self, lo: int, hi: int) -> int:
        """Entier uniforme dans [lo, hi] (bornes incluses)."""
        return int(self.next() * (hi - lo + 1)) + lo

    def __repr__(self) -> str:
        return f"SeededRandom(seed={self.seed})"


def date_seed(date_str: str) -> int:
    """
    Hash glissant h = h * 31 + code, replié sur 32 bits signés à chaque caractère,
    puis valeur absolue.
    """
    h = 0
    for ch in date_str:
        h = _to_int32((h << 5) - h + ord(ch))
    return abs(h)


def shuffled(items: Sequence[T], rng: Optional[SeededRandom] = None) -> List[T]:
    """
    Copie mélangée de items.
    Avec rng : Fisher-Yates déterministe (consomme len(items) - 1 tirages).
    Sans rng : random.shuffle (chemin non reproductible).
    """
    result = list(items)
    if rng is None:
        random.shuffle(result)
        return result
    for i in range(len(result) - 1, 0, -1):
        j = int(rng.next() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def today_date_string(today: Optional[datetime.date] = None) -> str:
    """Date locale au format YYYY-MM-DD."""
    today = today or datetime.date.today()
    return today.strftime("%Y-%m-%d")
