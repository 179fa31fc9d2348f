"""
Search Module

This module implements chess search algorithms. The primary algorithm is
minimax with alpha-beta pruning, split into a maximizing and a minimizing
half that call each other.

Key Components:
    - max_search / min_search: Alpha-beta search for White / Black
    - minimax: Unpruned reference search
    - find_best_move: Root-level search function
    - find_legal_moves: Deterministic, capture-first move generation
    - AIMove / Evaluation: Search move and result types

"""

from minimax_chess.search.minimax import (
    AIMove,
    Evaluation,
    find_best_move,
    find_legal_moves,
    max_search,
    min_search,
    minimax,
    play_move,
)

__all__ = [
    'AIMove',
    'Evaluation',
    'find_best_move',
    'find_legal_moves',
    'max_search',
    'min_search',
    'minimax',
    'play_move',
]
