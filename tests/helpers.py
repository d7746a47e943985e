"""Test data shared across modules."""

PUZZLE_STR = "53..7....6..195....98....6.8...6...34..8.3..17...2...6.6....28....419..5....8..79"
SOLUTION_STR = "534678912672195348198342567859761423426853791713924856961537284287419635345286179"

ALL_BUT_7 = {1, 2, 3, 4, 5, 6, 8, 9}


def with_blanks(grid, *indices):
    """Copy of grid with the given cells emptied."""
    g = list(grid)
    for i in indices:
        g[i] = 0
    return g
