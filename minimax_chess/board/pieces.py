"""
Piece Types and Movement Patterns

Every piece type owns a fixed table of (offset, category) entries. Offsets
are expressed relative to the piece's forward direction: the absolute
destination is `square + offset * team`, which makes the tables mirror
symmetric between White (-1) and Black (1).

Pattern tables:
    Pawn:   (0,1) MOVE, (0,2) START_ONLY, (+-1,1) EAT_ENPASSANT
    Rook:   orthogonal offsets at distance 1-7, EAT_MOVE
    Bishop: diagonal offsets at distance 1-7, EAT_MOVE
    Queen:  rook entries followed by bishop entries
    Knight: the eight knight jumps, EAT_MOVE_JUMP
    King:   (+-2,0) START_ONLY (castling), then the eight neighbours, EAT_MOVE
"""

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from functools import lru_cache
from typing import Dict, NamedTuple, Tuple

import chess

from minimax_chess.board.coordinates import (
    WHITE,
    Coordinate,
    back_row,
    pawn_start_row,
)


class PieceType(IntEnum):
    """Piece kinds. Values match python-chess piece types (NONE = 0)."""

    NONE = 0
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def symbol(self) -> str:
        return chess.piece_symbol(self.value) if self is not PieceType.NONE else ""


PROMOTION_TYPES = (PieceType.KNIGHT, PieceType.BISHOP, PieceType.ROOK, PieceType.QUEEN)


class MoveCategory(Enum):
    """
    Admission rule of a pattern entry.

        START_ONLY:    only while the piece has not moved (pawn double step, castling)
        MOVE:          destination must be empty
        EAT_MOVE:      empty destination or opposing piece
        EAT_MOVE_JUMP: like EAT_MOVE, ignores pieces in between
        EAT_ENPASSANT: opposing piece, or the current en-passant target
    """

    START_ONLY = "start_only"
    MOVE = "move"
    EAT_MOVE = "eat_move"
    EAT_MOVE_JUMP = "eat_move_jump"
    EAT_ENPASSANT = "eat_enpassant"


# Categories that can take a piece standing on the destination
CAPTURE_CATEGORIES = frozenset(
    {MoveCategory.EAT_MOVE, MoveCategory.EAT_MOVE_JUMP, MoveCategory.EAT_ENPASSANT}
)


class Move(NamedTuple):
    """Pattern table entry."""

    dx: int
    dy: int
    category: MoveCategory


def _pawn_moves():
    return [
        Move(0, 1, MoveCategory.MOVE),
        Move(0, 2, MoveCategory.START_ONLY),
        Move(1, 1, MoveCategory.EAT_ENPASSANT),
        Move(-1, 1, MoveCategory.EAT_ENPASSANT),
    ]


def _lineal_moves():
    moves = []
    for distance in range(1, 8):
        moves.append(Move(distance, 0, MoveCategory.EAT_MOVE))
        moves.append(Move(0, distance, MoveCategory.EAT_MOVE))
        moves.append(Move(-distance, 0, MoveCategory.EAT_MOVE))
        moves.append(Move(0, -distance, MoveCategory.EAT_MOVE))
    return moves


def _diagonal_moves():
    moves = []
    for distance in range(1, 8):
        moves.append(Move(distance, -distance, MoveCategory.EAT_MOVE))
        moves.append(Move(-distance, distance, MoveCategory.EAT_MOVE))
        moves.append(Move(distance, distance, MoveCategory.EAT_MOVE))
        moves.append(Move(-distance, -distance, MoveCategory.EAT_MOVE))
    return moves


def _knight_moves():
    moves = []
    for a in (1, 2):
        for b in (1, 2):
            if a != b:
                moves.append(Move(a, b, MoveCategory.EAT_MOVE_JUMP))
                moves.append(Move(-a, -b, MoveCategory.EAT_MOVE_JUMP))
                moves.append(Move(a, -b, MoveCategory.EAT_MOVE_JUMP))
                moves.append(Move(-a, b, MoveCategory.EAT_MOVE_JUMP))
    return moves


def _king_moves():
    # Castling entries come first
    moves = [
        Move(-2, 0, MoveCategory.START_ONLY),
        Move(2, 0, MoveCategory.START_ONLY),
    ]
    for dx, dy in ((0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0), (-1, 1)):
        moves.append(Move(dx, dy, MoveCategory.EAT_MOVE))
    return moves


@lru_cache(maxsize=None)
def pattern_table(piece_type: PieceType) -> Tuple[Move, ...]:
    """
    Movement pattern table of a piece type.

    Tables are built once and shared; they are immutable tuples.

    Raises:
        ValueError: For PieceType.NONE
    """
    builders = {
        PieceType.PAWN: _pawn_moves,
        PieceType.KNIGHT: _knight_moves,
        PieceType.BISHOP: _diagonal_moves,
        PieceType.ROOK: _lineal_moves,
        PieceType.QUEEN: lambda: _lineal_moves() + _diagonal_moves(),
        PieceType.KING: _king_moves,
    }
    if piece_type not in builders:
        raise ValueError(f"No movement pattern for piece type {piece_type!r}")
    return tuple(builders[piece_type]())


@lru_cache(maxsize=None)
def pattern_lookup(piece_type: PieceType) -> Dict[Tuple[int, int], Tuple[MoveCategory, ...]]:
    """Pattern table indexed by relative offset."""
    lookup: Dict[Tuple[int, int], Tuple[MoveCategory, ...]] = {}
    for move in pattern_table(piece_type):
        lookup[(move.dx, move.dy)] = lookup.get((move.dx, move.dy), ()) + (move.category,)
    return lookup


# Starting files on the back rank
HOME_FILES = {
    PieceType.ROOK: (0, 7),
    PieceType.KNIGHT: (1, 6),
    PieceType.BISHOP: (2, 5),
    PieceType.QUEEN: (3,),
    PieceType.KING: (4,),
}


def is_home_square(team: int, piece_type: PieceType, coor: Coordinate) -> bool:
    """True if `coor` is a square the piece type starts the game on."""
    if piece_type == PieceType.PAWN:
        return coor.y == pawn_start_row(team)
    return coor.y == back_row(team) and coor.x in HOME_FILES.get(piece_type, ())


@dataclass
class Piece:
    """
    A piece in the board arena.

    The board owns every Piece; `square` mirrors the square that holds this
    piece's id, and the board keeps both sides in agreement.

    Attributes:
        id: Arena identity, stable for the life of the piece
        team: WHITE (-1) or BLACK (1)
        piece_type: Current type (changes on promotion)
        square: Coordinate of the square holding this piece
        has_moved: Drives castling and pawn double step eligibility
        patterns: Movement pattern table of the current type
    """

    id: int
    team: int
    piece_type: PieceType
    square: Coordinate
    has_moved: bool = False
    patterns: Tuple[Move, ...] = field(init=False, repr=False)

    def __post_init__(self):
        self.patterns = pattern_table(self.piece_type)

    def promote(self, piece_type: PieceType) -> None:
        """Change type and regenerate the pattern table."""
        self.piece_type = piece_type
        self.patterns = pattern_table(piece_type)

    def relative_offset(self, target: Coordinate) -> Tuple[int, int]:
        """Offset of `target` from this piece, in the piece's forward frame."""
        return (target.x - self.square.x) * self.team, (target.y - self.square.y) * self.team

    def destination(self, move: Move) -> Coordinate:
        """Absolute destination of a pattern entry from the current square."""
        return self.square.shifted(move.dx * self.team, move.dy * self.team)

    def copy(self) -> "Piece":
        return replace(self)

    @property
    def symbol(self) -> str:
        """FEN letter: upper case for White."""
        letter = self.piece_type.symbol
        return letter.upper() if self.team == WHITE else letter

    def __str__(self) -> str:
        return f"{self.symbol}@{self.square}"
