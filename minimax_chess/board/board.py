"""
Board State

The Board owns the 64 squares, the piece arena and all game bookkeeping:
turn, en-passant target, the move-count (fifty-move) counter, the position
history and the outcome.

Representation:
    - squares: 64 Square entries indexed by `y * 8 + x`, each holding an
      optional piece id
    - pieces: arena of Piece objects keyed by id
    - team_pieces: per-team list of piece ids (iteration order of pieces_of)

FEN input and output go through python-chess, so any position python-chess
accepts can be loaded.

Example:
    >>> board = Board.starting_position()
    >>> pawn = board.piece_at(Coordinate.from_name("e2"))
    >>> result = board.apply_move(pawn, Coordinate.from_name("e4"))
    >>> result.accepted
    True
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import chess

from minimax_chess.board import rules
from minimax_chess.board.coordinates import (
    ALL_COORDINATES,
    BLACK,
    TEAM_NAMES,
    WHITE,
    Coordinate,
    back_row,
    coordinates_to_square,
    promotion_row,
    square_to_coordinates,
)
from minimax_chess.board.pieces import (
    PROMOTION_TYPES,
    MoveCategory,
    Piece,
    PieceType,
    is_home_square,
)
from minimax_chess.board.rules import MoveCheck, Rejection

logger = logging.getLogger(__name__)

DEFAULT_FIFTY_MOVE_THRESHOLD = 51

# (occupancy, turn, castling rights, en-passant square)
PositionKey = Tuple[Tuple[str, ...], int, Tuple[bool, bool, bool, bool], Optional[Coordinate]]


class Outcome(Enum):
    IN_PROGRESS = "in_progress"
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    DRAW = "draw"


class DrawReason(Enum):
    STALEMATE = "stalemate"
    REPETITION = "repetition"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVE = "fifty_move"


class MoveStatus(Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    PROMOTION_REQUIRED = "promotion_required"


@dataclass(frozen=True)
class MoveResult:
    """
    Event emitted by move application.

    The board never plays sounds or prints messages; callers map these
    results to whatever presentation they use.
    """

    status: MoveStatus
    rejection: Optional[Rejection] = None
    category: Optional[MoveCategory] = None
    captured: PieceType = PieceType.NONE
    castled: bool = False
    promotion: PieceType = PieceType.NONE
    outcome: Outcome = Outcome.IN_PROGRESS

    @property
    def accepted(self) -> bool:
        return self.status is MoveStatus.ACCEPTED

    @property
    def is_capture(self) -> bool:
        return self.captured is not PieceType.NONE


@dataclass
class Square:
    """A board square: its coordinate and the id of the piece on it, if any."""

    coor: Coordinate
    piece_id: Optional[int] = None


class Board:
    """
    Chess position with full game bookkeeping.

    Attributes:
        turn: Team to move (WHITE or BLACK)
        en_passant_square: Square a pawn just skipped over, if any
        en_passant_pawn_square: Square of the pawn that can be taken en passant
        fifty_move_count: Full moves since the last pawn move or capture
        halfmove_clock: FEN half-move clock, bumped on every quiet half-move
        fullmove_number: FEN full-move number, bumped after each Black move
        fifty_move_threshold: Count at which the game is drawn
        history: Position snapshots, the current one last
        outcome: Game state
        draw_reason: Set when outcome is DRAW
    """

    def __init__(self, fifty_move_threshold: int = DEFAULT_FIFTY_MOVE_THRESHOLD):
        self.squares: List[Square] = [Square(coor) for coor in ALL_COORDINATES]
        self.pieces: Dict[int, Piece] = {}
        self.team_pieces: Dict[int, List[int]] = {WHITE: [], BLACK: []}
        self.turn = WHITE
        self.en_passant_square: Optional[Coordinate] = None
        self.en_passant_pawn_square: Optional[Coordinate] = None
        self.fifty_move_count = 0
        self.halfmove_clock = 0
        self.fullmove_number = 1
        self.fifty_move_threshold = fifty_move_threshold
        self.history: List[PositionKey] = []
        self.outcome = Outcome.IN_PROGRESS
        self.draw_reason: Optional[DrawReason] = None
        self._next_id = 0

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def empty(cls, fifty_move_threshold: int = DEFAULT_FIFTY_MOVE_THRESHOLD) -> "Board":
        """Board with no pieces and White to move."""
        board = cls(fifty_move_threshold)
        board.history = [board.position_key()]
        return board

    @classmethod
    def starting_position(cls, fifty_move_threshold: int = DEFAULT_FIFTY_MOVE_THRESHOLD) -> "Board":
        return cls.from_fen(chess.STARTING_FEN, fifty_move_threshold)

    @classmethod
    def from_fen(cls, fen: str, fifty_move_threshold: int = DEFAULT_FIFTY_MOVE_THRESHOLD) -> "Board":
        """
        Load a position from FEN.

        Pieces are placed in board scan order (a8 to h1). A piece counts as
        unmoved when it stands on a home square; kings and rooks additionally
        need the matching castling right. The half-move clock is kept as is
        and also seeds the full-move counter this board uses for the draw.

        Raises:
            ValueError: If python-chess rejects the FEN
        """
        cb = chess.Board(fen)
        board = cls(fifty_move_threshold)

        occupied = [
            (square_to_coordinates(square), piece) for square, piece in cb.piece_map().items()
        ]
        for coor, piece in sorted(occupied, key=lambda item: item[0].index):
            team = WHITE if piece.color == chess.WHITE else BLACK
            board.place_piece(team, PieceType(piece.piece_type), coor)

        for team, color in ((WHITE, chess.WHITE), (BLACK, chess.BLACK)):
            kingside = cb.has_kingside_castling_rights(color)
            queenside = cb.has_queenside_castling_rights(color)
            king = board.get_king(team)
            if king is not None and not (kingside or queenside):
                king.has_moved = True
            for rook_x, has_right in ((7, kingside), (0, queenside)):
                rook = board.piece_at(Coordinate(rook_x, back_row(team)))
                if rook is not None and rook.piece_type == PieceType.ROOK and rook.team == team:
                    rook.has_moved = not has_right

        board.turn = WHITE if cb.turn == chess.WHITE else BLACK
        if cb.ep_square is not None:
            board.en_passant_square = square_to_coordinates(cb.ep_square)
            # The pawn that just advanced belongs to the side not to move
            board.en_passant_pawn_square = board.en_passant_square.shifted(0, -board.turn)

        board.fifty_move_count = cb.halfmove_clock // 2
        board.halfmove_clock = cb.halfmove_clock
        board.fullmove_number = cb.fullmove_number
        board.history = [board.position_key()]
        board.update_outcome()
        return board

    def to_chess_board(self) -> chess.Board:
        """Equivalent python-chess board (used for FEN output and display)."""
        cb = chess.Board(None)
        for piece in self.pieces.values():
            cb.set_piece_at(
                coordinates_to_square(piece.square),
                chess.Piece(int(piece.piece_type), piece.team == WHITE),
            )
        cb.turn = self.turn == WHITE
        rights = "".join(
            letter for letter, allowed in zip("KQkq", self.castling_rights()) if allowed
        )
        cb.set_castling_fen(rights or "-")
        if self.en_passant_square is not None:
            cb.ep_square = coordinates_to_square(self.en_passant_square)
        cb.halfmove_clock = self.halfmove_clock
        cb.fullmove_number = self.fullmove_number
        return cb

    def fen(self) -> str:
        return self.to_chess_board().fen()

    def copy(self) -> "Board":
        """
        Total deep clone.

        Squares, pieces, team lists and history are all duplicated, so the
        clone and the original can be mutated independently.
        """
        clone = Board(self.fifty_move_threshold)
        clone.squares = [Square(square.coor, square.piece_id) for square in self.squares]
        clone.pieces = {piece_id: piece.copy() for piece_id, piece in self.pieces.items()}
        clone.team_pieces = {team: list(ids) for team, ids in self.team_pieces.items()}
        clone.turn = self.turn
        clone.en_passant_square = self.en_passant_square
        clone.en_passant_pawn_square = self.en_passant_pawn_square
        clone.fifty_move_count = self.fifty_move_count
        clone.halfmove_clock = self.halfmove_clock
        clone.fullmove_number = self.fullmove_number
        clone.history = list(self.history)
        clone.outcome = self.outcome
        clone.draw_reason = self.draw_reason
        clone._next_id = self._next_id
        return clone

    # ========================================================================
    # Queries
    # ========================================================================

    def piece_at(self, coor: Optional[Coordinate]) -> Optional[Piece]:
        if coor is None or not coor.in_bounds():
            return None
        piece_id = self.squares[coor.index].piece_id
        return None if piece_id is None else self.pieces[piece_id]

    def get_piece(self, piece_id: int) -> Piece:
        """
        Raises:
            ValueError: For an id not on the board
        """
        try:
            return self.pieces[piece_id]
        except KeyError:
            raise ValueError(f"No piece with id {piece_id}") from None

    def pieces_of(self, team: int) -> List[Piece]:
        return [self.pieces[piece_id] for piece_id in self.team_pieces[team]]

    def pieces_in_scan_order(self, team: int) -> List[Piece]:
        """Pieces of `team` ordered by square index (a8 first)."""
        found = []
        for square in self.squares:
            if square.piece_id is not None:
                piece = self.pieces[square.piece_id]
                if piece.team == team:
                    found.append(piece)
        return found

    def get_king(self, team: int) -> Optional[Piece]:
        for piece_id in self.team_pieces[team]:
            piece = self.pieces[piece_id]
            if piece.piece_type == PieceType.KING:
                return piece
        return None

    def count(self, team: int, piece_type: PieceType) -> int:
        return sum(1 for piece in self.pieces_of(team) if piece.piece_type == piece_type)

    def castling_rights(self) -> Tuple[bool, bool, bool, bool]:
        """(White kingside, White queenside, Black kingside, Black queenside)."""
        rights = []
        for team in (WHITE, BLACK):
            king = self.get_king(team)
            king_ready = (
                king is not None and not king.has_moved and king.square == Coordinate(4, back_row(team))
            )
            for rook_x in (7, 0):
                rook = self.piece_at(Coordinate(rook_x, back_row(team)))
                rights.append(
                    king_ready
                    and rook is not None
                    and rook.piece_type == PieceType.ROOK
                    and rook.team == team
                    and not rook.has_moved
                )
        return tuple(rights)

    def position_key(self) -> PositionKey:
        """Snapshot used for repetition detection."""
        occupancy = tuple(
            self.pieces[square.piece_id].symbol if square.piece_id is not None else ""
            for square in self.squares
        )
        return occupancy, self.turn, self.castling_rights(), self.en_passant_square

    def check_valid_move(self, piece: Piece, target: Coordinate) -> MoveCheck:
        return rules.check_valid_move(self, piece, target)

    def legal_destinations(self, piece: Piece) -> List[Coordinate]:
        return rules.legal_destinations(self, piece)

    def is_in_check(self, team: int) -> bool:
        return rules.is_in_check(self, team)

    @property
    def is_game_over(self) -> bool:
        return self.outcome is not Outcome.IN_PROGRESS

    # ========================================================================
    # Placement (setup and construction)
    # ========================================================================

    def place_piece(
        self,
        team: int,
        piece_type: PieceType,
        coor: Coordinate,
        has_moved: Optional[bool] = None,
    ) -> Piece:
        """
        Put a new piece on `coor`, replacing any occupant.

        Args:
            has_moved: Defaults to "not on a home square"

        Raises:
            ValueError: Off-board coordinate or PieceType.NONE
        """
        if not coor.in_bounds():
            raise ValueError(f"Coordinate off the board: ({coor.x}, {coor.y})")
        if piece_type == PieceType.NONE:
            raise ValueError("Cannot place a piece of type NONE")
        if team not in (WHITE, BLACK):
            raise ValueError(f"Unknown team {team!r}")

        self.remove_piece(coor)
        if has_moved is None:
            has_moved = not is_home_square(team, piece_type, coor)
        piece = Piece(self._next_id, team, piece_type, coor, has_moved)
        self._next_id += 1
        self.pieces[piece.id] = piece
        self.team_pieces[team].append(piece.id)
        self.squares[coor.index].piece_id = piece.id
        return piece

    def remove_piece(self, coor: Coordinate) -> Optional[Piece]:
        """Take the piece on `coor` off the board and return it."""
        piece = self.piece_at(coor)
        if piece is not None:
            self._capture(piece)
        return piece

    def reset_bookkeeping(self) -> None:
        """
        Start a fresh game record from the current placement.

        Called when a setup is finalised: counters cleared, en passant
        cleared, history restarted, outcome recomputed.
        """
        self.fifty_move_count = 0
        self.halfmove_clock = 0
        self.fullmove_number = 1
        self.en_passant_square = None
        self.en_passant_pawn_square = None
        self.outcome = Outcome.IN_PROGRESS
        self.draw_reason = None
        self.history = [self.position_key()]
        self.update_outcome()

    # ========================================================================
    # Move application
    # ========================================================================

    def _capture(self, piece: Piece) -> None:
        self.team_pieces[piece.team].remove(piece.id)
        del self.pieces[piece.id]
        self.squares[piece.square.index].piece_id = None

    def _relocate(self, piece: Piece, target: Coordinate) -> None:
        self.squares[piece.square.index].piece_id = None
        self.squares[target.index].piece_id = piece.id
        piece.square = target

    @contextmanager
    def simulated_move(
        self, piece: Piece, target: Coordinate, captured: Optional[Piece] = None
    ) -> Iterator[None]:
        """
        Temporarily play `piece` to `target`, lifting `captured`.

        The captured piece is taken out of its team list (so it cannot
        attack) and put back at the same position when the block exits,
        whatever happens inside it.
        """
        origin = piece.square
        captured_index = None
        if captured is not None:
            team_ids = self.team_pieces[captured.team]
            captured_index = team_ids.index(captured.id)
            team_ids.pop(captured_index)
            self.squares[captured.square.index].piece_id = None
        self.squares[origin.index].piece_id = None
        self.squares[target.index].piece_id = piece.id
        piece.square = target
        try:
            yield
        finally:
            piece.square = origin
            self.squares[target.index].piece_id = None
            self.squares[origin.index].piece_id = piece.id
            if captured is not None:
                self.squares[captured.square.index].piece_id = captured.id
                self.team_pieces[captured.team].insert(captured_index, captured.id)

    def _reject(self, piece: Piece, target: Coordinate, rejection: Rejection) -> MoveResult:
        logger.debug(f"Rejected {piece} -> {target}: {rejection.value}")
        return MoveResult(MoveStatus.REJECTED, rejection=rejection, outcome=self.outcome)

    def apply_move(
        self,
        piece: Piece,
        target: Coordinate,
        promotion: PieceType = PieceType.NONE,
    ) -> MoveResult:
        """
        Validate and play a move.

        Args:
            piece: Piece to move (must belong to this board)
            target: Destination
            promotion: Promotion type for a pawn reaching the last row

        Returns:
            MoveResult. REJECTED and PROMOTION_REQUIRED leave the board
            untouched.

        Raises:
            ValueError: Piece not on this board, promotion type on a
                non-promoting move, or a promotion type other than Knight,
                Bishop, Rook, Queen
        """
        if promotion != PieceType.NONE and promotion not in PROMOTION_TYPES:
            raise ValueError(f"Cannot promote to {promotion.name}")

        if self.pieces.get(piece.id) is not piece:
            raise ValueError(f"{piece} does not belong to this board")
        if self.is_game_over or piece.team != self.turn:
            return self._reject(piece, target, Rejection.WRONG_TURN_OR_GAME_OVER)

        check = rules.check_valid_move(self, piece, target)
        if not check.is_legal:
            return self._reject(piece, target, check.rejection)

        promotes = piece.piece_type == PieceType.PAWN and target.y == promotion_row(piece.team)
        if promotes and promotion == PieceType.NONE:
            return MoveResult(MoveStatus.PROMOTION_REQUIRED, category=check.category, outcome=self.outcome)
        if not promotes and promotion != PieceType.NONE:
            raise ValueError(f"{piece} -> {target} is not a promoting move")

        origin = piece.square
        occupant = self.piece_at(target)
        captured = None
        castled = False

        if check.category is MoveCategory.START_ONLY and piece.piece_type == PieceType.KING:
            self._castle_rook(piece, target)
            castled = True
        elif check.category is MoveCategory.EAT_ENPASSANT:
            captured = occupant if occupant is not None else self.piece_at(self.en_passant_pawn_square)
        elif occupant is not None:
            captured = occupant

        captured_type = PieceType.NONE
        if captured is not None:
            captured_type = captured.piece_type
            self._capture(captured)

        self._relocate(piece, target)
        piece.has_moved = True

        self.en_passant_square = None
        self.en_passant_pawn_square = None
        if piece.piece_type == PieceType.PAWN and check.category is MoveCategory.START_ONLY:
            self.en_passant_square = origin.shifted(0, piece.team)
            self.en_passant_pawn_square = target

        if piece.piece_type == PieceType.PAWN or captured is not None:
            self.fifty_move_count = 0
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
            if piece.team == WHITE:
                self.fifty_move_count += 1

        if promotion != PieceType.NONE:
            piece.promote(promotion)

        if piece.team == BLACK:
            self.fullmove_number += 1
        self.turn = -self.turn
        self.history.append(self.position_key())
        self.update_outcome()

        return MoveResult(
            MoveStatus.ACCEPTED,
            category=check.category,
            captured=captured_type,
            castled=castled,
            promotion=promotion,
            outcome=self.outcome,
        )

    def _castle_rook(self, king: Piece, target: Coordinate) -> None:
        if target.x > king.square.x:
            rook_from, rook_to = 7, 5
        else:
            rook_from, rook_to = 0, 3
        rook = self.piece_at(Coordinate(rook_from, king.square.y))
        self._relocate(rook, Coordinate(rook_to, king.square.y))
        rook.has_moved = True

    # ========================================================================
    # Outcome
    # ========================================================================

    def is_threefold_repetition(self) -> bool:
        if not self.history:
            return False
        return self.history.count(self.history[-1]) >= 3

    def has_insufficient_material(self, team: int) -> bool:
        """
        True when `team` alone cannot force mate.

        Fewer than two bishops, fewer than three knights, not exactly one
        bishop with one knight, and no queens, rooks or pawns.
        """
        counts = {piece_type: 0 for piece_type in PieceType}
        for piece in self.pieces_of(team):
            counts[piece.piece_type] += 1
        if counts[PieceType.QUEEN] or counts[PieceType.ROOK] or counts[PieceType.PAWN]:
            return False
        bishops = counts[PieceType.BISHOP]
        knights = counts[PieceType.KNIGHT]
        return bishops < 2 and knights < 3 and not (bishops == 1 and knights == 1)

    def update_outcome(self) -> Outcome:
        """
        Decide the game state for the side to move.

        Checked in order: no legal move (checkmate or stalemate), threefold
        repetition, insufficient material on both sides, move-count rule.
        A decided game stays decided.
        """
        if self.outcome is not Outcome.IN_PROGRESS:
            return self.outcome
        # Incomplete setups have no game to decide
        if self.get_king(WHITE) is None or self.get_king(BLACK) is None:
            return self.outcome

        if not rules.has_legal_move(self, self.turn):
            if rules.is_in_check(self, self.turn):
                self.outcome = Outcome.WHITE_WINS if self.turn == BLACK else Outcome.BLACK_WINS
                logger.debug(f"Checkmate: {self.outcome.value}")
            else:
                self._declare_draw(DrawReason.STALEMATE)
        elif self.is_threefold_repetition():
            self._declare_draw(DrawReason.REPETITION)
        elif self.has_insufficient_material(WHITE) and self.has_insufficient_material(BLACK):
            self._declare_draw(DrawReason.INSUFFICIENT_MATERIAL)
        elif self.fifty_move_count >= self.fifty_move_threshold:
            self._declare_draw(DrawReason.FIFTY_MOVE)
        return self.outcome

    def _declare_draw(self, reason: DrawReason) -> None:
        self.outcome = Outcome.DRAW
        self.draw_reason = reason
        logger.debug(f"Draw by {reason.value}")

    # ========================================================================
    # Display
    # ========================================================================

    def __str__(self) -> str:
        return str(self.to_chess_board())

    def __repr__(self) -> str:
        return f"Board('{self.fen()}', turn={TEAM_NAMES[self.turn]}, outcome={self.outcome.value})"
