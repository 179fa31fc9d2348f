"""
Evaluation Module

This module provides position evaluation functions for the chess engine.
The key design principle is that evaluators are SWAPPABLE - the search
algorithm should work with any evaluator that implements the base interface.

Key Components:
    - Evaluator (ABC): Abstract base class defining the evaluation interface
    - MaterialEvaluator: Piece values only
    - PositionalEvaluator: Material plus king safety, mobility, space
      control, piece quality and pawn structure

Data Flow:
    Board → evaluator.evaluate() → float (pawns)
                                    Positive = White advantage
                                    Negative = Black advantage

"""

from minimax_chess.evaluation.base import MATE_SCORE, Evaluator
from minimax_chess.evaluation.material import MaterialEvaluator
from minimax_chess.evaluation.positional import PositionalEvaluator

__all__ = ['Evaluator', 'MaterialEvaluator', 'PositionalEvaluator', 'MATE_SCORE']
