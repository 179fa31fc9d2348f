"""
Minimax Search with Alpha-Beta Pruning

This module implements the core search algorithm for the chess engine.
Minimax explores the game tree to find the best move, and alpha-beta
pruning dramatically reduces the number of nodes evaluated.

Key Concepts:
    - Minimax: Recursive algorithm that assumes optimal play by both sides
    - Alpha-Beta: Optimization that prunes branches that can't affect result
    - Move Ordering: Captures are searched before quiet moves
    - White (team -1) maximizes, Black (team 1) minimizes

Determinism:
    Moves are generated in a fixed order (board scan order, then pattern
    table order, captures first) and ties keep the first move seen, so the
    same position and depth always give the same move and value.

Every candidate is played on a full copy of the position, so sibling
branches never share state.

References:
    - Minimax: https://www.chessprogramming.org/Minimax
    - Alpha-Beta: https://www.chessprogramming.org/Alpha-Beta
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple

import chess

from minimax_chess.board import (
    PROMOTION_TYPES,
    WHITE,
    Board,
    Coordinate,
    MoveResult,
    PieceType,
)
from minimax_chess.board import rules
from minimax_chess.board.coordinates import TEAM_NAMES, coordinates_to_square, promotion_row
from minimax_chess.evaluation.base import Evaluator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIMove:
    """
    A candidate move produced by the search.

    Attributes:
        start: Square the piece leaves
        end: Destination square
        piece_type: Type of the moving piece
        promotion: Promotion type, NONE for ordinary moves
        team: Side making the move
    """

    start: Coordinate
    end: Coordinate
    piece_type: PieceType
    promotion: PieceType = PieceType.NONE
    team: int = WHITE

    def to_chess_move(self) -> chess.Move:
        promotion = int(self.promotion) if self.promotion != PieceType.NONE else None
        return chess.Move(coordinates_to_square(self.start), coordinates_to_square(self.end), promotion)

    def uci(self) -> str:
        """UCI notation, e.g. 'e2e4' or 'e7e8q'."""
        return self.to_chess_move().uci()

    def __str__(self) -> str:
        return self.uci()


class Evaluation(NamedTuple):
    """Search result: best move found (None at leaves) and its value."""

    move: Optional[AIMove]
    value: float


def find_legal_moves(board: Board) -> List[AIMove]:
    """
    Generate every legal move for the side to move.

    Ordering:
        Pieces in board scan order, destinations in pattern table order.
        Captures are prepended (so later captures come first), quiet moves
        appended. A pawn reaching the last row expands into Knight, Bishop,
        Rook and Queen promotions.

    Args:
        board: Position to generate moves for

    Returns:
        Ordered list of AIMove
    """
    moves = deque()
    team = board.turn
    for piece in board.pieces_in_scan_order(team):
        for target in rules.legal_destinations(board, piece):
            is_capture = board.piece_at(target) is not None
            if piece.piece_type == PieceType.PAWN and target.y == promotion_row(team):
                candidates = [
                    AIMove(piece.square, target, piece.piece_type, promotion, team)
                    for promotion in PROMOTION_TYPES
                ]
            else:
                candidates = [AIMove(piece.square, target, piece.piece_type, PieceType.NONE, team)]

            for move in candidates:
                if is_capture:
                    moves.appendleft(move)
                else:
                    moves.append(move)
    return list(moves)


def play_move(board: Board, move: AIMove) -> MoveResult:
    """
    Apply an AIMove to `board`.

    Raises:
        ValueError: If there is no piece on the move's start square
    """
    piece = board.piece_at(move.start)
    if piece is None:
        raise ValueError(f"No piece on {move.start} for move {move}")
    return board.apply_move(piece, move.end, move.promotion)


def max_search(
    board: Board,
    alpha: float,
    beta: float,
    depth: int,
    evaluator: Evaluator,
    nodes_searched: Optional[List[int]] = None,
) -> Evaluation:
    """
    Maximizing half of alpha-beta search (White to move).

    Args:
        board: Current position (not modified)
        alpha: Best value the maximizer can already guarantee
        beta: Best value the minimizer can already guarantee
        depth: Remaining plies
        evaluator: Position evaluation function
        nodes_searched: Optional mutable list [count] to track positions visited

    Returns:
        Evaluation of the best move. At a leaf, or when no move is
        available, the move is None and the value is the static evaluation.
    """
    if nodes_searched is not None:
        nodes_searched[0] += 1

    if depth == 0 or board.is_game_over:
        return Evaluation(None, evaluator.evaluate(board))

    best = Evaluation(None, -float("inf"))
    for move in find_legal_moves(board):
        child = board.copy()
        play_move(child, move)

        evaluation = min_search(child, alpha, beta, depth - 1, evaluator, nodes_searched)

        if evaluation.value > best.value:
            best = Evaluation(move, evaluation.value)
        alpha = max(alpha, evaluation.value)

        # Beta cutoff: Minimizing player won't allow this branch
        if alpha >= beta:
            break

    if best.move is None:
        return Evaluation(None, evaluator.evaluate(board))
    return best


def min_search(
    board: Board,
    alpha: float,
    beta: float,
    depth: int,
    evaluator: Evaluator,
    nodes_searched: Optional[List[int]] = None,
) -> Evaluation:
    """
    Minimizing half of alpha-beta search (Black to move).

    Mirror of max_search: keeps the lowest value and tightens beta.
    """
    if nodes_searched is not None:
        nodes_searched[0] += 1

    if depth == 0 or board.is_game_over:
        return Evaluation(None, evaluator.evaluate(board))

    best = Evaluation(None, float("inf"))
    for move in find_legal_moves(board):
        child = board.copy()
        play_move(child, move)

        evaluation = max_search(child, alpha, beta, depth - 1, evaluator, nodes_searched)

        if evaluation.value < best.value:
            best = Evaluation(move, evaluation.value)
        beta = min(beta, evaluation.value)

        # Alpha cutoff: Maximizing player won't allow this branch
        if alpha >= beta:
            break

    if best.move is None:
        return Evaluation(None, evaluator.evaluate(board))
    return best


def minimax(
    board: Board,
    depth: int,
    maximizing_player: bool,
    evaluator: Evaluator,
    nodes_searched: Optional[List[int]] = None,
) -> Evaluation:
    """
    Plain minimax without pruning.

    Visits the full tree, so it is only practical at small depths. It
    returns exactly what max_search / min_search return for the same
    position and depth, which makes it a reference for testing pruning.
    """
    if nodes_searched is not None:
        nodes_searched[0] += 1

    if depth == 0 or board.is_game_over:
        return Evaluation(None, evaluator.evaluate(board))

    best = Evaluation(None, -float("inf") if maximizing_player else float("inf"))
    for move in find_legal_moves(board):
        child = board.copy()
        play_move(child, move)

        value = minimax(child, depth - 1, not maximizing_player, evaluator, nodes_searched).value

        if maximizing_player and value > best.value:
            best = Evaluation(move, value)
        elif not maximizing_player and value < best.value:
            best = Evaluation(move, value)

    if best.move is None:
        return Evaluation(None, evaluator.evaluate(board))
    return best


def find_best_move(
    board: Board,
    depth: int,
    evaluator: Evaluator,
    verbose: bool = False,
) -> Tuple[Optional[AIMove], float, int]:
    """
    Find the best move in the current position.

    Args:
        board: Current position (not modified)
        depth: Search depth in plies (higher = stronger but slower)
        evaluator: Position evaluation function
        verbose: If True, print search statistics

    Returns:
        Tuple of (best_move, evaluation, nodes)
            - best_move: The best move found, None if the game is over
            - evaluation: Score of the best move (White's perspective)
            - nodes: Number of positions visited

    Raises:
        ValueError: If depth is not positive
    """
    if depth <= 0:
        raise ValueError(f"depth must be positive, got {depth}")

    nodes = [0]
    if board.turn == WHITE:
        result = max_search(board, -float("inf"), float("inf"), depth, evaluator, nodes)
    else:
        result = min_search(board, -float("inf"), float("inf"), depth, evaluator, nodes)

    logger.debug(
        f"Search {TEAM_NAMES[board.turn]} depth {depth}: "
        f"best={result.move}, value={result.value:.2f}, nodes={nodes[0]}"
    )
    if verbose:
        print(f"\nNodes searched: {nodes[0]}")
        print(f"Best move: {result.move}, Score: {result.value:.2f}")

    return result.move, result.value, nodes[0]
