"""
Unit Tests for UCI Interface

Tests for UCI protocol implementation, focusing on:
    - Command parsing: uci, isready, position, go, stop, quit
    - Position setup: FEN parsing, move application
    - Search invocation: depth handling
    - Output format: Proper UCI responses
    - Error handling: Invalid FEN, illegal moves
"""

import chess
import pytest

from minimax_chess.board import BLACK, WHITE, Coordinate, PieceType
from minimax_chess.config import EngineConfig
from minimax_chess.evaluation import MATE_SCORE, MaterialEvaluator
from minimax_chess.uci import UCIEngine
from minimax_chess.uci.interface import MAX_SCORE_CP, parse_uci_move, score_to_cp


@pytest.fixture
def engine():
    """Create a UCI engine with a fast evaluator and depth 1 by default."""
    return UCIEngine(evaluator=MaterialEvaluator(), config=EngineConfig(search_depth=1))


def scripted_input(monkeypatch, commands):
    """Feed `commands` to input(), then signal end of input."""
    lines = iter(commands)

    def fake_input():
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


class TestUCICommands:
    """Tests for UCI command handling."""

    def test_handle_uci(self, engine, capsys):
        """Test 'uci' command response."""

        engine.handle_uci()

        output = capsys.readouterr().out

        assert "id name MinimaxChess" in output, "Should include engine name"
        assert "id author" in output, "Should include author"
        assert "option name Depth type spin default 1" in output
        assert output.strip().endswith("uciok"), "Should end with uciok"

    def test_handle_isready(self, engine, capsys):
        """Test 'isready' command response."""

        engine.handle_isready()

        assert "readyok" in capsys.readouterr().out, "Should output readyok"

    def test_handle_ucinewgame(self, engine):
        """Test 'ucinewgame' command."""

        engine.handle_position(["position", "startpos", "moves", "e2e4", "e7e5"])

        engine.handle_ucinewgame()

        assert engine.board.fen() == chess.STARTING_FEN, "Board should be reset"

    def test_handle_position_startpos(self, engine):
        engine.handle_position(["position", "startpos"])

        assert engine.board.fen() == chess.STARTING_FEN

    def test_handle_position_with_moves(self, engine):
        engine.handle_position(["position", "startpos", "moves", "e2e4", "e7e5", "g1f3"])

        reference = chess.Board()
        for move in ("e2e4", "e7e5", "g1f3"):
            reference.push_uci(move)

        assert engine.board.fen() == reference.fen()

    def test_handle_position_fen(self, engine):
        fen = "r1bqkbnr/pppp1ppp/2n5/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R w KQkq - 2 3"

        engine.handle_position(["position", "fen"] + fen.split())

        assert engine.board.fen() == fen

    def test_fen_with_moves(self, engine):
        fen = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"

        engine.handle_position(["position", "fen"] + fen.split() + ["moves", "e7e5"])

        expected = chess.Board(fen)
        expected.push_uci("e7e5")
        assert engine.board.fen() == expected.fen()

    def test_promotion_move(self, engine):
        engine.handle_position(
            ["position", "fen"] + "8/4P3/8/8/8/8/k7/4K3 w - - 0 1".split() + ["moves", "e7e8q"]
        )

        queen = engine.board.piece_at(Coordinate.from_name("e8"))
        assert queen.piece_type == PieceType.QUEEN

    def test_handle_go_depth(self, engine, capsys):
        engine.handle_position(["position", "fen"] + "4k3/8/8/3r4/8/8/3Q4/4K3 w - - 0 1".split())

        engine.handle_go(["go", "depth", "1"])
        engine.handle_stop()

        output = capsys.readouterr().out
        assert "info depth 1 score cp 900" in output
        assert "pv d2d5" in output
        assert "bestmove d2d5" in output
        assert not engine.searching

    def test_handle_go_default_depth(self, engine, capsys):
        engine.handle_go(["go", "wtime", "1000", "btime", "1000"])
        engine.handle_stop()

        output = capsys.readouterr().out
        assert "info depth 1 " in output, "Time controls are ignored; the configured depth is used"
        assert "bestmove a2a3" in output

    def test_handle_stop_without_search(self, engine):
        """'stop' with nothing running is a no-op."""

        engine.handle_stop()

        assert not engine.searching

    def test_handle_quit(self, engine):
        with pytest.raises(SystemExit):
            engine.handle_quit()


class TestUCIOutput:
    """Tests for UCI output format."""

    def test_bestmove_is_legal(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "e2e4"])

        engine.handle_go(["go", "depth", "1"])
        engine.handle_stop()

        lines = capsys.readouterr().out.strip().splitlines()
        bestmove = lines[-1].split()[1]
        reference = chess.Board()
        reference.push_uci("e2e4")
        assert chess.Move.from_uci(bestmove) in reference.legal_moves

    def test_mate_score_is_clamped(self, engine, capsys):
        engine.handle_position(["position", "fen"] + "6k1/5ppp/8/8/8/8/8/R6K w - - 0 1".split())

        engine.handle_go(["go", "depth", "1"])
        engine.handle_stop()

        output = capsys.readouterr().out
        assert f"score cp {MAX_SCORE_CP} " in output
        assert "bestmove a1a8" in output

    def test_score_from_side_to_move(self, engine, capsys):
        """Black delivering mate reports a winning score for Black."""

        engine.handle_position(
            ["position", "startpos", "moves", "f2f3", "e7e5", "g2g4"]
        )

        engine.handle_go(["go", "depth", "1"])
        engine.handle_stop()

        output = capsys.readouterr().out
        assert f"score cp {MAX_SCORE_CP} " in output
        assert "bestmove d8h4" in output

    @pytest.mark.parametrize("score,turn,expected", [
        (1.5, WHITE, 150),
        (1.5, BLACK, -150),
        (-0.25, BLACK, 25),
        (MATE_SCORE, WHITE, MAX_SCORE_CP),
        (-MATE_SCORE, WHITE, -MAX_SCORE_CP),
        (-MATE_SCORE, BLACK, MAX_SCORE_CP),
    ])
    def test_score_to_cp(self, score, turn, expected):
        assert score_to_cp(score, turn) == expected

    def test_null_move_when_game_over(self, engine, capsys):
        engine.handle_position(
            ["position", "startpos", "moves", "f2f3", "e7e5", "g2g4", "d8h4"]
        )

        engine.handle_go(["go", "depth", "1"])
        engine.handle_stop()

        assert "bestmove 0000" in capsys.readouterr().out


class TestUCIErrorHandling:
    """Tests for error handling in UCI."""

    def test_invalid_fen(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "e2e4"])
        fen_before = engine.board.fen()

        engine.handle_position(["position", "fen", "invalid", "fen"])

        assert "Invalid FEN" in capsys.readouterr().err
        assert engine.board.fen() == fen_before, "Board should be unchanged"

    def test_illegal_move_stops_move_list(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "e2e4", "e7e4", "d2d4"])

        assert "Illegal move: e7e4" in capsys.readouterr().err
        reference = chess.Board()
        reference.push_uci("e2e4")
        assert engine.board.fen() == reference.fen(), "Moves after the illegal one are dropped"

    def test_missing_promotion_piece_is_illegal(self, engine, capsys):
        engine.handle_position(
            ["position", "fen"] + "8/4P3/8/8/8/8/k7/4K3 w - - 0 1".split() + ["moves", "e7e8"]
        )

        assert "Illegal move: e7e8" in capsys.readouterr().err

    def test_malformed_move(self, engine, capsys):
        engine.handle_position(["position", "startpos", "moves", "zz99"])

        assert "Invalid move format" in capsys.readouterr().err
        assert engine.board.fen() == chess.STARTING_FEN

    def test_parse_move_from_empty_square(self, engine):
        assert parse_uci_move(engine.board, "e4e5") is None


class TestUCIIntegration:
    """Integration tests for full UCI sessions."""

    def test_full_uci_session(self, engine, capsys, monkeypatch):
        scripted_input(monkeypatch, [
            "uci",
            "isready",
            "",
            "ucinewgame",
            "position startpos moves e2e4 e7e5",
            "go depth 1",
            "stop",
            "quit",
        ])

        with pytest.raises(SystemExit):
            engine.run()

        output = capsys.readouterr().out
        assert "uciok" in output
        assert "readyok" in output
        assert "bestmove" in output

    def test_unknown_command_ignored(self, engine, capsys, monkeypatch):
        scripted_input(monkeypatch, ["xyzzy", "isready"])

        engine.run()

        assert capsys.readouterr().out.strip() == "readyok"

    def test_end_of_input_stops_loop(self, engine, monkeypatch):
        scripted_input(monkeypatch, [])

        engine.run()
