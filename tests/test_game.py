"""
Unit Tests for the Game Controller

Tests for the boundary a user interface talks to, focusing on:
    - User moves by square or by piece id
    - Move hints
    - Deferred promotion
    - AI moves
    - Setup mode: placement, validation, resuming play
"""

import pytest

from minimax_chess.board import (
    BLACK,
    WHITE,
    Coordinate,
    MoveStatus,
    Outcome,
    PieceType,
    Rejection,
)
from minimax_chess.config import EngineConfig
from minimax_chess.evaluation import MaterialEvaluator, PositionalEvaluator
from minimax_chess.game import GameController, SetupStatus


def sq(name):
    return Coordinate.from_name(name)


@pytest.fixture
def game():
    """Controller with a fast, shallow AI."""
    return GameController(EngineConfig(search_depth=1), MaterialEvaluator())


class TestUserMoves:
    """Tests for moves entered by the user."""

    def test_move_by_square(self, game):
        result = game.attempt_move(sq("e2"), sq("e4"))

        assert result.accepted
        assert game.turn == BLACK
        assert game.board.piece_at(sq("e4")).piece_type == PieceType.PAWN

    def test_move_by_piece_id(self, game):
        knight_id = game.board.piece_at(sq("g1")).id

        result = game.attempt_move(knight_id, sq("f3"))

        assert result.accepted
        assert game.board.piece_at(sq("f3")).id == knight_id

    def test_illegal_move_reports_reason(self, game):
        result = game.attempt_move(sq("e2"), sq("e5"))

        assert result.status is MoveStatus.REJECTED
        assert result.rejection is Rejection.NO_MATCHING_PATTERN
        assert game.turn == WHITE

    def test_empty_square(self, game):
        with pytest.raises(ValueError):
            game.attempt_move(sq("e4"), sq("e5"))

    def test_unknown_piece_id(self, game):
        with pytest.raises(ValueError):
            game.attempt_move(999, sq("e5"))

    def test_move_hints(self, game):
        assert set(game.legal_destinations(sq("g1"))) == {sq("f3"), sq("h3")}

    def test_no_hints_for_side_not_to_move(self, game):
        assert game.legal_destinations(sq("g8")) == []

    def test_no_hints_after_game_over(self, game):
        game.new_game("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")

        assert game.outcome is Outcome.BLACK_WINS
        assert game.legal_destinations(sq("a2")) == []


class TestPromotion:
    """Tests for the deferred promotion choice."""

    FEN = "8/4P3/8/8/8/8/k7/4K3 w - - 0 1"

    def test_promotion_is_held_until_chosen(self, game):
        game.new_game(self.FEN)

        result = game.attempt_move(sq("e7"), sq("e8"))

        assert result.status is MoveStatus.PROMOTION_REQUIRED
        assert game.pending_promotion is not None
        assert game.turn == WHITE, "Turn must not pass before the type is chosen"

        result = game.choose_promotion(PieceType.QUEEN)

        assert result.accepted
        assert game.pending_promotion is None
        assert game.board.piece_at(sq("e8")).piece_type == PieceType.QUEEN
        assert game.turn == BLACK

    def test_underpromotion(self, game):
        game.new_game(self.FEN)
        game.attempt_move(sq("e7"), sq("e8"))

        game.choose_promotion(PieceType.KNIGHT)

        assert game.board.piece_at(sq("e8")).piece_type == PieceType.KNIGHT

    def test_promotion_in_one_step(self, game):
        game.new_game(self.FEN)

        result = game.attempt_move(sq("e7"), sq("e8"), PieceType.ROOK)

        assert result.accepted
        assert result.promotion is PieceType.ROOK

    def test_nothing_pending(self, game):
        with pytest.raises(ValueError):
            game.choose_promotion(PieceType.QUEEN)

    def test_invalid_promotion_type(self, game):
        game.new_game(self.FEN)
        game.attempt_move(sq("e7"), sq("e8"))

        with pytest.raises(ValueError):
            game.choose_promotion(PieceType.KING)
        assert game.pending_promotion is not None


class TestAIMoves:
    """Tests for engine moves."""

    def test_compute_does_not_play(self, game):
        game.new_game("4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1")
        fen = game.board.fen()

        move = game.compute_ai_move()

        assert move.uci() == "d2d5"
        assert game.board.fen() == fen

    def test_play_ai_move(self, game):
        game.attempt_move(sq("e2"), sq("e4"))
        assert game.is_ai_turn

        result = game.play_ai_move()

        assert result.accepted
        assert game.turn == WHITE
        assert not game.is_ai_turn

    def test_ai_delivers_mate(self, game):
        game.new_game("6k1/5ppp/8/8/8/8/8/R6K w - - 0 1")

        result = game.play_ai_move()

        assert result.outcome is Outcome.WHITE_WINS
        assert game.outcome is Outcome.WHITE_WINS

    def test_no_ai_move_after_game_over(self, game):
        game.new_game("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")

        assert game.compute_ai_move() is None
        assert game.play_ai_move() is None

    def test_default_evaluator(self):
        assert isinstance(GameController().evaluator, PositionalEvaluator)

    def test_threshold_from_config(self):
        game = GameController(EngineConfig(fifty_move_threshold=25))
        game.new_game("4k3/8/8/4p3/4P3/8/8/K7 b - - 0 1")

        assert game.board.fifty_move_threshold == 25


class TestSetupMode:
    """Tests for free placement of pieces."""

    def test_play_disabled_during_setup(self, game):
        game.begin_setup()

        result = game.attempt_move(sq("e2"), sq("e4"))

        assert result.status is MoveStatus.REJECTED
        assert result.rejection is Rejection.WRONG_TURN_OR_GAME_OVER
        assert game.legal_destinations(sq("e2")) == []
        assert game.compute_ai_move() is None
        assert not game.is_ai_turn

    def test_placement_requires_setup(self, game):
        with pytest.raises(ValueError):
            game.place_piece(WHITE, PieceType.QUEEN, sq("d4"))
        with pytest.raises(ValueError):
            game.remove_piece(sq("e2"))
        with pytest.raises(ValueError):
            game.finish_setup()

    def test_missing_king(self, game):
        game.begin_setup()
        game.remove_piece(sq("e8"))

        assert game.finish_setup() is SetupStatus.MISSING_KING
        assert game.setup_active, "Setup stays active after a rejected finish"

    def test_two_kings_on_one_side(self, game):
        game.begin_setup()
        game.place_piece(BLACK, PieceType.KING, sq("d5"))

        assert game.validate_setup() is SetupStatus.MISSING_KING

    def test_kings_in_contact(self, game):
        game.begin_setup()
        game.remove_piece(sq("e8"))
        game.place_piece(BLACK, PieceType.KING, sq("e2"))

        assert game.finish_setup() is SetupStatus.KINGS_IN_CONTACT
        assert game.setup_active

    def test_finish_restarts_game_record(self, game, play):
        play(game.board, "g1f3", "g8f6")
        game.begin_setup()
        game.place_piece(WHITE, PieceType.QUEEN, sq("d4"))

        status = game.finish_setup()

        assert status is SetupStatus.READY
        assert not game.setup_active
        assert len(game.board.history) == 1
        assert game.board.fifty_move_count == 0
        assert game.board.halfmove_clock == 0
        assert game.board.en_passant_square is None
        assert game.attempt_move(sq("d4"), sq("d5")).accepted

    def test_finish_detects_decided_position(self, game):
        game.begin_setup()
        for coor in list(p.square for p in game.board.pieces.values()):
            game.remove_piece(coor)
        game.place_piece(BLACK, PieceType.KING, sq("a8"))
        game.place_piece(WHITE, PieceType.KING, sq("h1"))
        game.place_piece(WHITE, PieceType.QUEEN, sq("b6"))
        game.board.turn = BLACK

        assert game.finish_setup() is SetupStatus.READY
        assert game.outcome is Outcome.DRAW

    def test_toggle(self, game):
        assert game.toggle_setup() is None
        assert game.setup_active

        assert game.toggle_setup() is SetupStatus.READY
        assert not game.setup_active
