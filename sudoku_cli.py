# sudoku_cli.py
"""
Ligne de commande :

  sudoku-engine new --difficulty medium
  sudoku-engine daily --date 2024-03-15
  sudoku-engine hint --grid 53..7....6..195... --notes notes.json --render hint.png
  sudoku-engine rate --grid <81 caractères>
  sudoku-engine book --output livre.pdf --difficulty hard --count 20
  sudoku-engine book --output mars.pdf --daily-from 2024-03-01 --days 31

Sorties JSON sur stdout ; entrée invalide -> message sur stderr, code 2.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from sudoku_core import NotesInput, parse_grid
from sudoku_difficulty import (
    PROFILES,
    create_daily_puzzle,
    create_puzzle,
    difficulty_score,
    rate_puzzle,
)
from sudoku_hints import get_hint
from sudoku_rng import today_date_string

logger = logging.getLogger(__name__)


def _read_arg(value: str) -> str:
    """Valeur brute, ou contenu du fichier si value est un chemin existant."""
    if os.path.isfile(value):
        with open(value, "r", encoding="utf-8") as f:
            return f.read()
    return value


def parse_notes(text: Optional[str]) -> NotesInput:
    """
    Notes en JSON : liste de 81 listes, ou objet {"index": [chiffres]}.
    """
    if not text:
        return None
    try:
        data = json.loads(_read_arg(text))
    except json.JSONDecodeError as exc:
        raise ValueError(f"notes JSON illisibles : {exc}") from exc
    if isinstance(data, dict):
        try:
            return {int(k): v for k, v in data.items()}
        except (TypeError, ValueError):
            raise ValueError("les clés des notes doivent être des index de case") from None
    if isinstance(data, list):
        return data
    raise ValueError("les notes doivent être une liste ou un objet JSON")


def _emit(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False))


# ---------- Sous-commandes ----------

def cmd_new(args) -> int:
    _emit(create_puzzle(args.difficulty).to_dict())
    return 0


def cmd_daily(args) -> int:
    date_str = args.date or today_date_string()
    _emit(create_daily_puzzle(date_str, args.difficulty).to_dict())
    return 0


def cmd_hint(args) -> int:
    grid = parse_grid(_read_arg(args.grid))
    solution = parse_grid(_read_arg(args.solution)) if args.solution else None
    notes = parse_notes(args.notes)

    hint = get_hint(grid, solution, notes)
    if hint is None:
        _emit({"hint": None, "message": "No logical step found. Try checking your notes or progress."})
        return 0

    payload = {"hint": hint.to_dict()}
    if args.render:
        # import tardif : matplotlib n'est chargé que si une figure est demandée
        from sudoku_book import save_hint_image

        payload["image"] = save_hint_image(args.render, grid, hint, notes=notes)
    _emit(payload)
    return 0


def cmd_rate(args) -> int:
    grid = parse_grid(_read_arg(args.grid))
    rating = rate_puzzle(grid)
    _emit(
        {
            "solved": rating.solved,
            "steps": rating.steps,
            "techniques": rating.used,
            "score": difficulty_score(rating.used),
            "grid": rating.grid,
        }
    )
    return 0


def cmd_book(args) -> int:
    from sudoku_book import build_book_pdf, build_daily_book_pdf

    if args.daily_from:
        if not args.days:
            raise ValueError("--days est requis avec --daily-from")
        puzzles, _hashes, book_hash = build_daily_book_pdf(
            args.daily_from, args.days, args.output, difficulty=args.difficulty or "hard", title=args.title
        )
    else:
        if not args.difficulty or not args.count:
            raise ValueError("--difficulty et --count sont requis (ou --daily-from et --days)")
        puzzles, _hashes, book_hash = build_book_pdf(
            args.difficulty, args.output, args.count, title=args.title, hash_db_path=args.hash_db
        )
    _emit({"output": args.output, "count": len(puzzles), "bookHash": book_hash})
    return 0


# ---------- Parseur ----------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sudoku-engine", description="Génération de Sudoku et indices logiques")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="niveau de journalisation (stderr)",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="nouveau puzzle aléatoire")
    p.add_argument("--difficulty", choices=list(PROFILES), default="medium")
    p.set_defaults(func=cmd_new)

    p = sub.add_parser("daily", help="défi du jour (identique pour tous)")
    p.add_argument("--date", help="YYYY-MM-DD (défaut : aujourd'hui)")
    p.add_argument("--difficulty", choices=list(PROFILES), default="hard")
    p.set_defaults(func=cmd_daily)

    p = sub.add_parser("hint", help="prochaine étape logique")
    p.add_argument("--grid", required=True, help="81 caractères, liste JSON, ou fichier")
    p.add_argument("--solution", help="solution (optionnelle, jamais consultée)")
    p.add_argument("--notes", help="notes du joueur en JSON, ou fichier")
    p.add_argument("--render", metavar="PNG", help="écrire une figure de l'indice")
    p.set_defaults(func=cmd_hint)

    p = sub.add_parser("rate", help="résolution logique complète et techniques utilisées")
    p.add_argument("--grid", required=True)
    p.set_defaults(func=cmd_rate)

    p = sub.add_parser("book", help="livre PDF (puzzles + solutions)")
    p.add_argument("--output", required=True)
    p.add_argument("--difficulty", choices=list(PROFILES))
    p.add_argument("--count", type=int)
    p.add_argument("--daily-from", metavar="DATE")
    p.add_argument("--days", type=int)
    p.add_argument("--title", default="Sudoku")
    p.add_argument("--hash-db", help="fichier d'historique des hashes (défaut : $SUDOKU_HASH_DB)")
    p.set_defaults(func=cmd_book)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ValueError as exc:
        logger.debug("entrée refusée", exc_info=True)
        print(f"erreur : {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
