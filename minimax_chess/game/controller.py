"""
Game Controller

The boundary a user interface talks to. It owns one Board, forwards user
moves to it, holds a pawn move while its promotion type is chosen, runs the
AI, and manages setup mode (free placement of pieces).

Every move request returns the Board's MoveResult unchanged, so the caller
can map accepted / rejected / promotion-pending events to its own feedback.

Example:
    >>> game = GameController()
    >>> game.attempt_move(Coordinate.from_name("e2"), Coordinate.from_name("e4")).accepted
    True
    >>> game.play_ai_move().accepted
    True
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple, Union

from minimax_chess.board import (
    BLACK,
    PROMOTION_TYPES,
    WHITE,
    Board,
    Coordinate,
    DrawReason,
    MoveResult,
    MoveStatus,
    Outcome,
    Piece,
    PieceType,
    Rejection,
)
from minimax_chess.board.coordinates import TEAM_NAMES
from minimax_chess.config import EngineConfig
from minimax_chess.evaluation import Evaluator, PositionalEvaluator
from minimax_chess.search import AIMove, find_best_move, play_move

logger = logging.getLogger(__name__)

PieceRef = Union[int, Coordinate]


class SetupStatus(Enum):
    """Result of trying to leave setup mode."""

    READY = "ready"
    MISSING_KING = "missing_king"
    KINGS_IN_CONTACT = "kings_in_contact"


class GameController:
    """
    One game between a user and the engine.

    Attributes:
        config: Engine settings (depth, AI side, fifty-move threshold)
        evaluator: Evaluation used by the AI
        board: Current position
        setup_active: True while pieces are being placed freely
        pending_promotion: (piece id, destination) of a pawn move waiting
            for its promotion type
    """

    def __init__(self, config: Optional[EngineConfig] = None, evaluator: Optional[Evaluator] = None):
        self.config = config or EngineConfig()
        self.evaluator = evaluator or PositionalEvaluator(self.config.evaluation)
        self.board = Board.starting_position(self.config.fifty_move_threshold)
        self.setup_active = False
        self.pending_promotion: Optional[Tuple[int, Coordinate]] = None

    def new_game(self, fen: Optional[str] = None) -> None:
        """
        Reset to the starting position, or to `fen`.

        Raises:
            ValueError: If the FEN is malformed
        """
        if fen is None:
            self.board = Board.starting_position(self.config.fifty_move_threshold)
        else:
            self.board = Board.from_fen(fen, self.config.fifty_move_threshold)
        self.setup_active = False
        self.pending_promotion = None
        logger.info(f"New game: {self.board.fen()}")

    # ========================================================================
    # State
    # ========================================================================

    @property
    def outcome(self) -> Outcome:
        return self.board.outcome

    @property
    def draw_reason(self) -> Optional[DrawReason]:
        return self.board.draw_reason

    @property
    def turn(self) -> int:
        return self.board.turn

    @property
    def is_ai_turn(self) -> bool:
        return not self.setup_active and self.board.turn == self.config.ai_team

    def _resolve(self, piece_ref: PieceRef) -> Piece:
        if isinstance(piece_ref, Coordinate):
            piece = self.board.piece_at(piece_ref)
            if piece is None:
                raise ValueError(f"No piece on {piece_ref}")
            return piece
        return self.board.get_piece(piece_ref)

    # ========================================================================
    # Play
    # ========================================================================

    def legal_destinations(self, piece_ref: PieceRef) -> List[Coordinate]:
        """
        Squares the piece may move to right now (move hints).

        Empty during setup, after the game ended, or for the side not to move.
        """
        piece = self._resolve(piece_ref)
        if self.setup_active or self.board.is_game_over or piece.team != self.board.turn:
            return []
        return self.board.legal_destinations(piece)

    def attempt_move(
        self,
        piece_ref: PieceRef,
        destination: Coordinate,
        promotion: PieceType = PieceType.NONE,
    ) -> MoveResult:
        """
        Play a user move.

        A pawn reaching the last row without a promotion type is held as
        pending; finish it with choose_promotion().

        Raises:
            ValueError: Unknown piece reference or invalid promotion type
        """
        piece = self._resolve(piece_ref)
        if self.setup_active:
            return MoveResult(
                MoveStatus.REJECTED,
                rejection=Rejection.WRONG_TURN_OR_GAME_OVER,
                outcome=self.board.outcome,
            )

        result = self.board.apply_move(piece, destination, promotion)
        if result.status is MoveStatus.PROMOTION_REQUIRED:
            self.pending_promotion = (piece.id, destination)
            logger.debug(f"Promotion pending for {piece} -> {destination}")
        else:
            self.pending_promotion = None

        if result.accepted:
            logger.info(f"{TEAM_NAMES[piece.team]} played {piece.piece_type.name} to {destination}")
            self._log_outcome()
        return result

    def choose_promotion(self, piece_type: PieceType) -> MoveResult:
        """
        Complete the pending pawn move with `piece_type`.

        Raises:
            ValueError: If no promotion is pending or the type is not
                Knight, Bishop, Rook or Queen
        """
        if self.pending_promotion is None:
            raise ValueError("No promotion is pending")
        if piece_type not in PROMOTION_TYPES:
            raise ValueError(f"Cannot promote to {piece_type.name}")
        piece_id, destination = self.pending_promotion
        return self.attempt_move(piece_id, destination, piece_type)

    def compute_ai_move(self, depth: Optional[int] = None) -> Optional[AIMove]:
        """Best move for the side to move, without playing it."""
        if self.setup_active or self.board.is_game_over:
            return None
        move, value, nodes = find_best_move(self.board, depth or self.config.search_depth, self.evaluator)
        logger.info(f"AI ({TEAM_NAMES[self.board.turn]}) chose {move} (value {value:.2f}, {nodes} nodes)")
        return move

    def play_ai_move(self, depth: Optional[int] = None) -> Optional[MoveResult]:
        """
        Search and play the AI's move.

        Returns:
            The MoveResult, or None when there is nothing to play
        """
        move = self.compute_ai_move(depth)
        if move is None:
            return None
        self.pending_promotion = None
        result = play_move(self.board, move)
        self._log_outcome()
        return result

    def _log_outcome(self) -> None:
        if self.board.outcome is Outcome.DRAW:
            logger.info(f"Game drawn ({self.board.draw_reason.value})")
        elif self.board.is_game_over:
            logger.info(f"Game over: {self.board.outcome.value}")

    # ========================================================================
    # Setup mode
    # ========================================================================

    def _require_setup(self) -> None:
        if not self.setup_active:
            raise ValueError("Setup mode is not active")

    def begin_setup(self) -> None:
        """Enter setup mode. Play is disabled until finish_setup() succeeds."""
        self.setup_active = True
        self.pending_promotion = None
        logger.info("Setup mode entered")

    def toggle_setup(self) -> Optional[SetupStatus]:
        """
        Enter setup mode, or try to leave it.

        Returns:
            None when entering; the SetupStatus when leaving
        """
        if self.setup_active:
            return self.finish_setup()
        self.begin_setup()
        return None

    def place_piece(self, team: int, piece_type: PieceType, coor: Coordinate) -> Piece:
        """
        Put a piece on `coor`, replacing any occupant.

        Raises:
            ValueError: Outside setup mode, or invalid team / type / square
        """
        self._require_setup()
        return self.board.place_piece(team, piece_type, coor)

    def remove_piece(self, coor: Coordinate) -> Optional[Piece]:
        """
        Raises:
            ValueError: Outside setup mode
        """
        self._require_setup()
        return self.board.remove_piece(coor)

    def validate_setup(self) -> SetupStatus:
        """Check that each side has exactly one king and the kings are apart."""
        kings = {}
        for team in (WHITE, BLACK):
            team_kings = [p for p in self.board.pieces_of(team) if p.piece_type == PieceType.KING]
            if len(team_kings) != 1:
                return SetupStatus.MISSING_KING
            kings[team] = team_kings[0]

        white_king, black_king = kings[WHITE].square, kings[BLACK].square
        if max(abs(white_king.x - black_king.x), abs(white_king.y - black_king.y)) <= 1:
            return SetupStatus.KINGS_IN_CONTACT
        return SetupStatus.READY

    def finish_setup(self) -> SetupStatus:
        """
        Leave setup mode if the placement is playable.

        On success the game record restarts from the placed position. On
        failure setup mode stays active.

        Raises:
            ValueError: Outside setup mode
        """
        self._require_setup()
        status = self.validate_setup()
        if status is SetupStatus.READY:
            self.setup_active = False
            self.board.reset_bookkeeping()
            logger.info(f"Setup finished: {self.board.fen()}")
            self._log_outcome()
        else:
            logger.info(f"Setup rejected: {status.value}")
        return status
