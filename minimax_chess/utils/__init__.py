"""
Utilities Module

This module provides utility functions for testing and benchmarking the
chess engine.

Key Components:
    - Mate-in-one suite: checkmate detection through search
    - Tactics suite: winning undefended material
    - Perft: Move generation verification

Testing Methodology:
    Each suite position has a known best move, and the engine's task is to
    find it within a small depth. Perft counts are compared with published
    numbers or with python-chess.
"""

from minimax_chess.utils.testing import (
    MATE_IN_ONE_POSITIONS,
    TACTICS_POSITIONS,
    evaluate_position,
    perft,
    run_mate_in_one,
    run_suite,
    run_tactics,
)

__all__ = [
    'MATE_IN_ONE_POSITIONS',
    'TACTICS_POSITIONS',
    'evaluate_position',
    'perft',
    'run_mate_in_one',
    'run_suite',
    'run_tactics',
]
