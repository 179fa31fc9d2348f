"""
Move Legality

This module answers every rules question the engine asks about a single
piece: can it go there, what squares does it attack, would the move leave
its own king in check.

Key Concepts:
    - Pattern entry: (offset, category) from the piece's pattern table
    - Break point: first occupied square along a ray from the piece.
      Destinations on the same ray beyond it are unreachable. Break points
      are recomputed for every query because they depend on occupancy.
    - Check-safety: the move is simulated on the live board, the king is
      tested for attacks, and the board is restored unconditionally.

Legality queries never raise for rule violations; they return a MoveCheck
holding either the admitted category or a Rejection.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, NamedTuple, Optional, Tuple

from minimax_chess.board.coordinates import Coordinate, ray_direction, sign
from minimax_chess.board.pieces import (
    CAPTURE_CATEGORIES,
    MoveCategory,
    Piece,
    PieceType,
    pattern_lookup,
)

if TYPE_CHECKING:
    from minimax_chess.board.board import Board

logger = logging.getLogger(__name__)

# Farther than any on-board distance
NO_BREAK = 8


class Rejection(Enum):
    """Closed set of reasons a move is refused."""

    WRONG_TURN_OR_GAME_OVER = "wrong_turn_or_game_over"
    NO_MATCHING_PATTERN = "no_matching_pattern"
    BLOCKED_BY_BREAK_POINT = "blocked_by_break_point"
    LEAVES_KING_IN_CHECK = "leaves_king_in_check"
    CASTLING_PRECONDITION_FAILED = "castling_precondition_failed"


class MoveCheck(NamedTuple):
    """Result of a legality query."""

    category: Optional[MoveCategory] = None
    rejection: Optional[Rejection] = None

    @property
    def is_legal(self) -> bool:
        return self.category is not None


# ============================================================================
# Break points
# ============================================================================

def break_points(board: "Board", piece: Piece) -> Dict[Tuple[int, int], int]:
    """
    Compute the piece's break points from the current occupancy.

    Every non-jump pattern entry whose destination is occupied is a break
    point. Only the nearest one per ray matters.

    Returns:
        Mapping of unit direction (piece-relative frame) to the distance of
        the first occupied square on that ray
    """
    points: Dict[Tuple[int, int], int] = {}
    for move in piece.patterns:
        if move.category is MoveCategory.EAT_MOVE_JUMP:
            continue
        target = piece.destination(move)
        if not target.in_bounds() or board.piece_at(target) is None:
            continue
        ray = ray_direction(move.dx, move.dy)
        if ray is None:
            continue
        direction, distance = ray
        if distance < points.get(direction, NO_BREAK):
            points[direction] = distance
    return points


def is_beyond_break_point(offset: Tuple[int, int], points: Dict[Tuple[int, int], int]) -> bool:
    """True if `offset` lies on a ray strictly past that ray's break point."""
    ray = ray_direction(*offset)
    if ray is None:
        return False
    direction, distance = ray
    return distance > points.get(direction, NO_BREAK)


# ============================================================================
# Attacks
# ============================================================================

def _path_clear(board: "Board", origin: Coordinate, target: Coordinate) -> bool:
    # Squares strictly between origin and target must be empty, i.e. the
    # break point of this ray is not closer than the target
    step_x = sign(target.x - origin.x)
    step_y = sign(target.y - origin.y)
    current = origin.shifted(step_x, step_y)
    while current != target:
        if board.piece_at(current) is not None:
            return False
        current = current.shifted(step_x, step_y)
    return True


def attacks(board: "Board", piece: Piece, target: Coordinate) -> bool:
    """
    Does `piece` attack `target`?

    A square is attacked when a capture-capable pattern entry (EAT_MOVE,
    EAT_MOVE_JUMP, EAT_ENPASSANT) lands on it and, for sliding entries,
    nothing stands in between. Occupancy of the target itself and the
    attacker's own king safety are irrelevant.
    """
    if target == piece.square or not target.in_bounds():
        return False
    categories = pattern_lookup(piece.piece_type).get(piece.relative_offset(target))
    if not categories or CAPTURE_CATEGORIES.isdisjoint(categories):
        return False
    if MoveCategory.EAT_MOVE_JUMP in categories:
        return True
    return _path_clear(board, piece.square, target)


def attacked_squares(board: "Board", piece: Piece) -> List[Coordinate]:
    """Every square the piece attacks, in pattern table order."""
    points = break_points(board, piece)
    squares = []
    for move in piece.patterns:
        if move.category not in CAPTURE_CATEGORIES:
            continue
        target = piece.destination(move)
        if not target.in_bounds():
            continue
        if move.category is not MoveCategory.EAT_MOVE_JUMP and is_beyond_break_point(
            (move.dx, move.dy), points
        ):
            continue
        squares.append(target)
    return squares


def is_square_attacked(board: "Board", coor: Coordinate, by_team: int) -> bool:
    """True if any piece of `by_team` attacks `coor`."""
    return any(attacks(board, attacker, coor) for attacker in board.pieces_of(by_team))


def is_in_check(board: "Board", team: int) -> bool:
    """True if the king of `team` is attacked. A missing king is never in check."""
    king = board.get_king(team)
    if king is None:
        return False
    return is_square_attacked(board, king.square, -team)


# ============================================================================
# Special rules
# ============================================================================

def _is_en_passant_target(board: "Board", piece: Piece, target: Coordinate) -> bool:
    if board.en_passant_square is None or target != board.en_passant_square:
        return False
    shadowed = board.piece_at(board.en_passant_pawn_square)
    return shadowed is not None and shadowed.team != piece.team


def castling_allowed(board: "Board", king: Piece, target: Coordinate) -> bool:
    """
    Check castling preconditions for a king moving two files.

    The rook on the corresponding corner must be an unmoved rook of the same
    team, and every square from the king's origin up to (not including) the
    rook must be empty apart from the king and not attacked by the opponent.
    """
    origin = king.square
    rook_x = 7 if target.x > origin.x else 0
    rook = board.piece_at(Coordinate(rook_x, origin.y))
    if rook is None or rook.piece_type != PieceType.ROOK or rook.team != king.team or rook.has_moved:
        return False

    step = 1 if rook_x > origin.x else -1
    for x in range(origin.x, rook_x, step):
        coor = Coordinate(x, origin.y)
        occupant = board.piece_at(coor)
        if occupant is not None and occupant.id != king.id:
            return False
        if is_square_attacked(board, coor, -king.team):
            return False
    return True


def is_king_safe_after(board: "Board", piece: Piece, target: Coordinate) -> bool:
    """
    Simulate the move and report whether the mover's king is left unattacked.

    The simulation lifts any captured occupant (including a pawn taken en
    passant) and is always reverted. A probe onto the opposing king is not a
    playable move; it is reported as unsafe without touching the board.
    """
    occupant = board.piece_at(target)
    if occupant is not None and occupant.piece_type == PieceType.KING and occupant.team != piece.team:
        return False

    captured = occupant
    if (
        captured is None
        and piece.piece_type == PieceType.PAWN
        and target.x != piece.square.x
        and _is_en_passant_target(board, piece, target)
    ):
        captured = board.piece_at(board.en_passant_pawn_square)

    with board.simulated_move(piece, target, captured):
        return not is_in_check(board, piece.team)


# ============================================================================
# Legality
# ============================================================================

def _admit(
    board: "Board",
    piece: Piece,
    target: Coordinate,
    category: MoveCategory,
    points: Dict[Tuple[int, int], int],
) -> Optional[Rejection]:
    """Apply one pattern entry's admission rule. Returns None when admitted."""
    if category is not MoveCategory.EAT_MOVE_JUMP and is_beyond_break_point(
        piece.relative_offset(target), points
    ):
        return Rejection.BLOCKED_BY_BREAK_POINT

    occupant = board.piece_at(target)

    if category is MoveCategory.START_ONLY:
        if piece.has_moved or occupant is not None:
            return Rejection.NO_MATCHING_PATTERN
        if piece.piece_type == PieceType.KING and not castling_allowed(board, piece, target):
            return Rejection.CASTLING_PRECONDITION_FAILED
    elif category is MoveCategory.MOVE:
        if occupant is not None:
            return Rejection.NO_MATCHING_PATTERN
    elif category is MoveCategory.EAT_ENPASSANT:
        if occupant is None:
            if not _is_en_passant_target(board, piece, target):
                return Rejection.NO_MATCHING_PATTERN
        elif occupant.team == piece.team:
            return Rejection.NO_MATCHING_PATTERN
    else:
        # EAT_MOVE / EAT_MOVE_JUMP
        if occupant is not None and occupant.team == piece.team:
            return Rejection.NO_MATCHING_PATTERN

    if not is_king_safe_after(board, piece, target):
        return Rejection.LEAVES_KING_IN_CHECK
    return None


def _check(board: "Board", piece: Piece, target: Coordinate, points) -> MoveCheck:
    categories = pattern_lookup(piece.piece_type).get(piece.relative_offset(target))
    if not categories:
        return MoveCheck(rejection=Rejection.NO_MATCHING_PATTERN)

    rejection = Rejection.NO_MATCHING_PATTERN
    for category in categories:
        rejection = _admit(board, piece, target, category, points)
        if rejection is None:
            return MoveCheck(category=category)
    return MoveCheck(rejection=rejection)


def check_valid_move(board: "Board", piece: Piece, target: Coordinate) -> MoveCheck:
    """
    Decide whether `piece` may move to `target` in the current position.

    Turn order is not considered here (attack and hint queries are asked for
    both sides); move application adds that check.

    Args:
        board: Position to query (temporarily mutated, always restored)
        piece: Piece to move
        target: Destination

    Returns:
        MoveCheck with the admitted category, or the rejection reason
    """
    if not target.in_bounds():
        return MoveCheck(rejection=Rejection.NO_MATCHING_PATTERN)
    return _check(board, piece, target, break_points(board, piece))


def legal_destinations(board: "Board", piece: Piece) -> List[Coordinate]:
    """Legal destinations of a piece, in pattern table order."""
    points = break_points(board, piece)
    destinations = []
    for move in piece.patterns:
        target = piece.destination(move)
        if target.in_bounds() and _admit(board, piece, target, move.category, points) is None:
            destinations.append(target)
    return destinations


def has_legal_move(board: "Board", team: int) -> bool:
    """True as soon as one legal move is found for `team`."""
    for piece in board.pieces_of(team):
        points = break_points(board, piece)
        for move in piece.patterns:
            target = piece.destination(move)
            if target.in_bounds() and _admit(board, piece, target, move.category, points) is None:
                return True
    return False
