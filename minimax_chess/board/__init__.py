"""
Board Module

This module holds the chess rules: grid coordinates, piece movement
patterns, move legality and the game state machine.

Key Components:
    - Coordinate: (x, y) grid address, row 0 = rank 8
    - Piece / PieceType / MoveCategory: pieces and their pattern tables
    - rules: break points, attack queries, check-safety, castling
    - Board: squares, piece arena, move application, draw detection

Data Flow:
    Board + Piece + Coordinate → check_valid_move() → MoveCheck
    Board.apply_move() → MoveResult (accepted / rejected / promotion pending)
"""

from minimax_chess.board.board import (
    Board,
    DrawReason,
    MoveResult,
    MoveStatus,
    Outcome,
    Square,
)
from minimax_chess.board.coordinates import BLACK, WHITE, Coordinate
from minimax_chess.board.pieces import (
    PROMOTION_TYPES,
    Move,
    MoveCategory,
    Piece,
    PieceType,
    pattern_table,
)
from minimax_chess.board.rules import MoveCheck, Rejection

__all__ = [
    'Board',
    'Square',
    'Outcome',
    'DrawReason',
    'MoveStatus',
    'MoveResult',
    'Coordinate',
    'WHITE',
    'BLACK',
    'Piece',
    'PieceType',
    'Move',
    'MoveCategory',
    'PROMOTION_TYPES',
    'pattern_table',
    'MoveCheck',
    'Rejection',
]
