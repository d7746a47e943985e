# sudoku_hash_db.py
"""
Historique global des puzzles déjà publiés (livres, toutes difficultés) :
un hash SHA256 par ligne, pour ne jamais imprimer deux fois la même grille.

Chemin : argument explicite, sinon variable d'environnement SUDOKU_HASH_DB,
sinon puzzle_hashes_all.txt dans le répertoire courant.
"""

import logging
import os
from typing import Optional, Set

logger = logging.getLogger(__name__)

HASH_DB_FILE = "puzzle_hashes_all.txt"
HASH_DB_ENV = "SUDOKU_HASH_DB"


def hash_db_path(path: Optional[str] = None) -> str:
    return path or os.environ.get(HASH_DB_ENV) or HASH_DB_FILE


# Charger l'ensemble des hashes déjà utilisés
def load_global_hashes(path: Optional[str] = None) -> Set[str]:
    path = hash_db_path(path)
    hashes = set()
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                h = line.strip()
                if h:
                    hashes.add(h)
    logger.debug("%d hashes chargés depuis %s", len(hashes), path)
    return hashes


# Sauvegarder l'ensemble des hashes utilisés (trié, réécriture complète)
def save_global_hashes(hashes: Set[str], path: Optional[str] = None) -> None:
    path = hash_db_path(path)
    with open(path, "w", encoding="utf-8") as f:
        for h in sorted(hashes):
            f.write(h + "\n")
    logger.debug("%d hashes écrits dans %s", len(hashes), path)
