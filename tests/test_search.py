"""
Unit Tests for Search Module

Tests for minimax search with alpha-beta pruning, focusing on:
    - Mate in one and simple captures
    - Determinism: same position and depth give the same move and value
    - Pruning never changes the result of plain minimax
    - Move generation order
"""

import chess
import pytest

from minimax_chess.board import WHITE, Board, Coordinate, PieceType
from minimax_chess.evaluation import MATE_SCORE, MaterialEvaluator, PositionalEvaluator
from minimax_chess.search import (
    AIMove,
    find_best_move,
    find_legal_moves,
    max_search,
    min_search,
    minimax,
    play_move,
)
from minimax_chess.utils import (
    MATE_IN_ONE_POSITIONS,
    TACTICS_POSITIONS,
    evaluate_position,
    run_mate_in_one,
    run_tactics,
)

EQUIVALENCE_POSITIONS = [
    chess.STARTING_FEN,
    "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3",
    "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
    "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1",
    "4k3/3q4/8/8/3R4/8/8/4K3 b - - 0 1",
]


class TestFindBestMove:
    """Tests for the search entry point."""

    @pytest.fixture
    def evaluator(self):
        """Material keeps the expected values easy to compute by hand."""
        return MaterialEvaluator()

    def test_mate_in_one(self, evaluator):
        """Test that engine finds mate in 1."""

        board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R6K w - - 0 1")

        best_move, score, nodes = find_best_move(board, depth=1, evaluator=evaluator)

        assert best_move.uci() == "a1a8", f"Should find Ra8#, got {best_move}"
        assert score == MATE_SCORE
        assert nodes > 0, "Should search at least one node"

        play_move(board, best_move)
        assert board.outcome.value == "white_wins", f"Move {best_move} should be checkmate"

    @pytest.mark.parametrize("depth", [1, 2])
    def test_black_mates(self, evaluator, depth):
        """Black finds Qh4# after 1.f3 e5 2.g4."""

        board = Board.from_fen("rnbqkbnr/pppp1ppp/8/4p3/6P1/5P2/PPPPP2P/RNBQKBNR b KQkq - 0 2")

        best_move, score, _ = find_best_move(board, depth=depth, evaluator=evaluator)

        assert best_move.uci() == "d8h4"
        assert score == -MATE_SCORE

    def test_wins_undefended_piece(self, evaluator):
        board = Board.from_fen("4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1")

        best_move, score, _ = find_best_move(board, depth=1, evaluator=evaluator)

        assert best_move.uci() == "d2d5"
        assert score == 9.0

    def test_starting_position_depth_one(self, evaluator):
        """
        Every first move keeps material level, so the first generated move
        (a2a3) is kept with value 0.
        """
        board = Board.starting_position()

        best_move, score, nodes = find_best_move(board, depth=1, evaluator=evaluator)

        assert best_move.uci() == "a2a3"
        assert score == 0.0
        assert nodes == 21, "Root plus one leaf per move"

    def test_board_not_modified(self, evaluator):
        board = Board.from_fen("r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3")
        fen = board.fen()

        find_best_move(board, depth=2, evaluator=evaluator)

        assert board.fen() == fen
        assert len(board.history) == 1

    def test_game_over_returns_no_move(self, evaluator):
        """A decided position yields no move and its static value."""

        board = Board.from_fen("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")

        best_move, score, nodes = find_best_move(board, depth=3, evaluator=evaluator)

        assert best_move is None
        assert score == -MATE_SCORE
        assert nodes == 1

    def test_invalid_depth(self, evaluator):
        with pytest.raises(ValueError):
            find_best_move(Board.starting_position(), depth=0, evaluator=evaluator)

    def test_deterministic(self, evaluator):
        """Repeated searches agree on move, value and node count."""

        board = Board.from_fen("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")

        first = find_best_move(board, depth=2, evaluator=evaluator)
        second = find_best_move(board, depth=2, evaluator=evaluator)

        assert first == second

    def test_positional_search(self):
        """The positional evaluator plugs into the same search."""

        board = Board.from_fen("6k1/5ppp/8/8/8/8/8/R6K w - - 0 1")

        best_move, score, _ = find_best_move(board, depth=1, evaluator=PositionalEvaluator())

        assert best_move.uci() == "a1a8"
        assert score == MATE_SCORE


class TestAlphaBeta:
    """Pruning must not change what plain minimax finds."""

    @pytest.mark.parametrize("fen", EQUIVALENCE_POSITIONS)
    def test_matches_minimax(self, fen):
        evaluator = MaterialEvaluator()
        board = Board.from_fen(fen)
        maximizing = board.turn == WHITE

        pruned_nodes = [0]
        full_nodes = [0]
        if maximizing:
            pruned = max_search(board, -float("inf"), float("inf"), 2, evaluator, pruned_nodes)
        else:
            pruned = min_search(board, -float("inf"), float("inf"), 2, evaluator, pruned_nodes)
        full = minimax(board, 2, maximizing, evaluator, full_nodes)

        assert pruned == full
        assert pruned_nodes[0] <= full_nodes[0], "Pruning should never visit more nodes"

    def test_matches_minimax_positional(self):
        evaluator = PositionalEvaluator()
        board = Board.from_fen("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1")

        pruned = max_search(board, -float("inf"), float("inf"), 2, evaluator)
        full = minimax(board, 2, True, evaluator)

        assert pruned == full

    def test_leaf_returns_static_value(self):
        evaluator = MaterialEvaluator()
        board = Board.from_fen("4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1")

        result = max_search(board, -float("inf"), float("inf"), 0, evaluator)

        assert result.move is None
        assert result.value == 4.0


class TestMoveGeneration:
    """Tests for find_legal_moves ordering."""

    def test_scan_order(self):
        """Pieces from a8 to h1, destinations in pattern table order."""

        moves = [move.uci() for move in find_legal_moves(Board.starting_position())]

        assert len(moves) == 20
        assert moves[:4] == ["a2a3", "a2a4", "b2b3", "b2b4"]
        assert moves[-4:] == ["b1a3", "b1c3", "g1f3", "g1h3"]

    def test_captures_first(self):
        board = Board.from_fen("4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1")

        moves = find_legal_moves(board)

        assert moves[0].uci() == "d2d5"
        assert moves[0].piece_type == PieceType.QUEEN

    def test_promotion_choices(self):
        """A pawn reaching the last row expands into four moves."""

        board = Board.from_fen("8/4P3/8/8/8/8/k7/4K3 w - - 0 1")

        moves = [move.uci() for move in find_legal_moves(board)]

        assert moves[:4] == ["e7e8n", "e7e8b", "e7e8r", "e7e8q"]

    def test_moves_carry_team(self):
        board = Board.from_fen("4k3/3q4/8/8/3R4/8/8/4K3 b - - 0 1")

        assert all(move.team == board.turn for move in find_legal_moves(board))

    def test_no_moves_when_mated(self):
        board = Board.from_fen("rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")

        assert find_legal_moves(board) == []


class TestAIMove:
    """Tests for the AIMove value type."""

    def test_uci(self):
        move = AIMove(Coordinate.from_name("e7"), Coordinate.from_name("e8"), PieceType.PAWN, PieceType.QUEEN)

        assert move.uci() == "e7e8q"
        assert str(move) == "e7e8q"
        assert move.to_chess_move() == chess.Move.from_uci("e7e8q")

    def test_play_move_from_empty_square(self):
        board = Board.starting_position()
        move = AIMove(Coordinate.from_name("e4"), Coordinate.from_name("e5"), PieceType.PAWN)

        with pytest.raises(ValueError):
            play_move(board, move)


class TestSuites:
    """Tests for the bundled benchmark positions."""

    def test_mate_in_one_suite(self):
        results = run_mate_in_one(MaterialEvaluator(), depth=1, verbose=False)

        assert results['score'] == results['total'] == len(MATE_IN_ONE_POSITIONS)

    def test_tactics_suite(self):
        results = run_tactics(MaterialEvaluator(), depth=2, verbose=False)

        assert results['score'] == results['total'] == len(TACTICS_POSITIONS)

    def test_evaluate_position(self):
        position = TACTICS_POSITIONS[0]
        result = evaluate_position(position, depth=1, evaluator=MaterialEvaluator())

        assert result.correct
        assert result.found_move == "d2d5"
        assert result.nodes_searched > 0
