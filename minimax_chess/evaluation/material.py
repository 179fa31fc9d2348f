"""
Material Evaluation

Counts piece values and nothing else. Fast and easy to reason about, which
makes it the evaluator of choice for hand-checked search scenarios.
"""

from typing import Optional

from minimax_chess.board import BLACK, WHITE, Board
from minimax_chess.config import EvaluationConfig
from minimax_chess.evaluation.base import Evaluator


def material_count(board: Board, team: int, config: EvaluationConfig) -> float:
    """Sum of piece values of one team."""
    return sum(config.piece_value(piece.piece_type) for piece in board.pieces_of(team))


def material_balance(board: Board, config: EvaluationConfig) -> float:
    """White material minus Black material."""
    return material_count(board, WHITE, config) - material_count(board, BLACK, config)


class MaterialEvaluator(Evaluator):
    """
    Material-only evaluation.

    Attributes:
        config: Supplies the piece values
    """

    def __init__(self, config: Optional[EvaluationConfig] = None):
        self.config = config or EvaluationConfig()

    def evaluate(self, board: Board) -> float:
        terminal_score = self.evaluate_terminal(board)
        if terminal_score is not None:
            return terminal_score
        return material_balance(board, self.config)
