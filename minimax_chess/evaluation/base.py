"""
Abstract Evaluator Interface

This module defines the abstract base class for all position evaluators.
By defining a common interface, we can swap between
evaluators without modifying the search algorithm.

Key Principles:
    1. Evaluators are stateless (weights come from an immutable config)
    2. evaluate() always returns pawns from White's perspective
    3. Positive = White advantage, Negative = Black advantage
    4. Decided games return +-MATE_SCORE, draws return 0.0

Convention:
    - Material values in pawns (pawn = 1, queen = 9)
    - Return 0 for perfectly equal positions
    - White is team -1, so White material is added and Black subtracted
"""

from abc import ABC, abstractmethod
from typing import Optional

from minimax_chess.board import Board, Outcome


# Evaluation constants
MATE_SCORE = 50000.0  # Score of a decided game


class Evaluator(ABC):
    """
    Abstract base class for position evaluation.

    All evaluator implementations must inherit from this class and implement
    the evaluate() method. This ensures compatibility with the search algorithm.

    Methods:
        evaluate(board): Returns position evaluation in pawns
        evaluate_terminal(board): Score of a decided game, None otherwise
    """

    @abstractmethod
    def evaluate(self, board: Board) -> float:
        """
        Evaluate a position from White's perspective.

        Args:
            board: Position to evaluate

        Returns:
            float: Evaluation in pawns
        """
        pass

    def evaluate_terminal(self, board: Board) -> Optional[float]:
        """
        Evaluate decided positions (checkmate or any draw).

        The board tracks its own outcome, so this is a lookup rather than a
        search for mates.

        Returns:
            float: Evaluation if the game is over
            None: If the game is still in progress
        """
        if board.outcome is Outcome.WHITE_WINS:
            return MATE_SCORE
        if board.outcome is Outcome.BLACK_WINS:
            return -MATE_SCORE
        if board.outcome is Outcome.DRAW:
            return 0.0
        return None

    def __repr__(self) -> str:
        """String representation of evaluator."""
        return f"{self.__class__.__name__}()"
