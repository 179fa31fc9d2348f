"""
UCI Protocol Implementation

This module implements the Universal Chess Interface (UCI) protocol for
communication between the chess engine and GUI applications.
Searches are depth limited; there is no time management.

UCI Commands Supported:
    - uci: Identify engine
    - isready: Synchronization check
    - ucinewgame: Start new game
    - position: Set board position
    - go: Start searching
    - stop: Wait for the running search to report
    - quit: Shutdown engine

Threading:
    - Main thread: Listen for UCI commands
    - Search thread: Run alpha-beta search on a copy of the board
    - A search always runs to completion; 'stop' waits for its bestmove

References:
    - UCI Protocol: https://www.chessprogramming.org/UCI
"""

import logging
import sys
import threading
import time
from pathlib import Path
from typing import Optional

import chess

from minimax_chess.board import WHITE, Board, PieceType
from minimax_chess.board.coordinates import square_to_coordinates
from minimax_chess.config import EngineConfig
from minimax_chess.evaluation import MATE_SCORE, Evaluator, PositionalEvaluator
from minimax_chess.search import find_best_move, find_legal_moves

LOG_DIR = Path.home() / ".minimax_chess"

# Decided games are reported at this bound instead of MATE_SCORE in centipawns
MAX_SCORE_CP = 32000


def setup_logger(debug=True):
    """
    Setup file-based logger for UCI debugging.

    The engine's module loggers all live under "minimax_chess", so their
    records land in the same file.

    Args:
        debug: If True, log at DEBUG level; otherwise INFO level

    Returns:
        Configured logger instance
    """
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / "engine.log"

    logger = logging.getLogger("minimax_chess")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.handlers.clear()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def score_to_cp(score: float, turn: int) -> int:
    """
    Convert a White-relative score in pawns to UCI centipawns.

    UCI scores are seen from the side to move. Decided games (+-MATE_SCORE)
    are clamped to +-MAX_SCORE_CP.
    """
    if abs(score) >= MATE_SCORE:
        cp = MAX_SCORE_CP if score > 0 else -MAX_SCORE_CP
    else:
        cp = int(score * 100)
    return cp if turn == WHITE else -cp


def parse_uci_move(board: Board, move_str: str):
    """
    Translate a UCI move string into (piece, destination, promotion).

    Returns:
        The triple, or None if no piece stands on the start square

    Raises:
        ValueError: If the string is not UCI notation (python-chess error)
    """
    move = chess.Move.from_uci(move_str)
    piece = board.piece_at(square_to_coordinates(move.from_square))
    if piece is None:
        return None
    promotion = PieceType(move.promotion) if move.promotion else PieceType.NONE
    return piece, square_to_coordinates(move.to_square), promotion


class UCIEngine:
    """
    UCI-compliant chess engine interface.

    This class handles all UCI communication and coordinates the search
    algorithm with the evaluation function.

    Attributes:
        board: Current position
        config: Engine settings (default depth, fifty-move threshold)
        evaluator: Position evaluation function
        searching: Flag indicating if search is in progress
        search_thread: Background thread for search

    Methods:
        run: Main UCI command loop
        handle_uci: Respond to 'uci' command
        handle_isready: Respond to 'isready' command
        handle_position: Set board position
        handle_go: Start search
        handle_stop: Wait for search
        handle_quit: Shutdown engine
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, config: Optional[EngineConfig] = None, debug=True):
        """
        Initialize UCI engine.

        Args:
            evaluator: Position evaluator (default: PositionalEvaluator)
            config: Engine settings (default: EngineConfig())
            debug: Enable debug logging (default: True)
        """
        self.config = config or EngineConfig()
        self.board = Board.starting_position(self.config.fifty_move_threshold)
        self.evaluator = evaluator if evaluator else PositionalEvaluator(self.config.evaluation)

        # Search state
        self.searching = False
        self.search_thread: Optional[threading.Thread] = None

        # Engine info
        self.name = "MinimaxChess"
        self.version = "0.1.0"
        self.author = "minimax-chess developers"

        self.logger = setup_logger(debug=debug)
        self.logger.info("=== MinimaxChess Engine Started ===")
        self.logger.info(f"Log file: {LOG_DIR / 'engine.log'}")

    def run(self):
        """
        Main UCI command loop.

        Listens for UCI commands on stdin and responds on stdout.
        Runs until 'quit' command is received.

        Commands:
            - uci: Identify engine
            - isready: Sync check
            - ucinewgame: Reset for new game
            - position [fen | startpos] moves ...
            - go [depth X]
            - stop: Wait for search
            - quit: Exit
        """
        while True:
            try:
                # Read command from stdin
                command = input().strip()

                if not command:
                    continue

                self.logger.debug(f">>> {command}")

                # Parse command
                tokens = command.split()
                cmd = tokens[0].lower()

                # Handle commands
                if cmd == "uci":
                    self.handle_uci()

                elif cmd == "isready":
                    self.handle_isready()

                elif cmd == "ucinewgame":
                    self.handle_ucinewgame()

                elif cmd == "position":
                    self.handle_position(tokens)

                elif cmd == "go":
                    self.handle_go(tokens)

                elif cmd == "stop":
                    self.handle_stop()

                elif cmd == "quit":
                    self.handle_quit()
                    break

                else:
                    # Unknown commands are ignored per the UCI protocol
                    self.logger.debug(f"Unknown command ignored: {command}")

            except EOFError:
                self.logger.info("EOF received, shutting down")
                break
            except Exception as e:
                self.logger.error(f"Command error: {e}", exc_info=True)
                print(f"# Error: {e}", file=sys.stderr)

    def handle_uci(self):
        """
        Handle 'uci' command - identify engine.

        Response:
            id name MinimaxChess 0.1.0
            id author ...
            option name Depth ...
            uciok
        """
        self.logger.info("Handling: uci")

        depth_option = (
            f"option name Depth type spin default {self.config.search_depth} min 1 max 8"
        )

        print(f"id name {self.name} {self.version}")
        print(f"id author {self.author}")
        print(depth_option)
        print("uciok")
        sys.stdout.flush()

        self.logger.debug(f"<<< id name {self.name} {self.version}")
        self.logger.debug(f"<<< id author {self.author}")
        self.logger.debug(f"<<< {depth_option}")
        self.logger.debug("<<< uciok")

    def handle_isready(self):
        """
        Handle 'isready' command - synchronization.

        Response:
            readyok
        """
        self.logger.info("Handling: isready")
        print("readyok")
        sys.stdout.flush()
        self.logger.debug("<<< readyok")

    def handle_ucinewgame(self):
        """Handle 'ucinewgame' command - reset for new game."""
        self.logger.info("Handling: ucinewgame - resetting board")
        self.board = Board.starting_position(self.config.fifty_move_threshold)

    def handle_position(self, tokens):
        """
        Handle 'position' command - set board position.

        Formats:
            position startpos
            position startpos moves e2e4 e7e5
            position fen <FEN string>
            position fen <FEN string> moves e2e4

        Args:
            tokens: Command tokens (e.g., ['position', 'startpos', 'moves', 'e2e4'])
        """
        self.logger.info(f"Handling: position {' '.join(tokens[1:])}")

        if len(tokens) < 2:
            self.logger.warning("Position command with insufficient arguments")
            return

        # Parse position type
        if tokens[1] == "startpos":
            self.board = Board.starting_position(self.config.fifty_move_threshold)
            move_index = 2
        elif tokens[1] == "fen":
            try:
                moves_index = tokens.index("moves")
                fen = " ".join(tokens[2:moves_index])
                move_index = moves_index
            except ValueError:
                fen = " ".join(tokens[2:])
                move_index = len(tokens)

            try:
                self.board = Board.from_fen(fen, self.config.fifty_move_threshold)
                self.logger.debug(f"Set position from FEN: {fen}")
            except ValueError as e:
                self.logger.error(f"Invalid FEN: {e}")
                print(f"# Invalid FEN: {e}", file=sys.stderr)
                return
        else:
            self.logger.warning(f"Unknown position type: {tokens[1]}")
            return

        # Apply moves
        if move_index < len(tokens) and tokens[move_index] == "moves":
            moves_applied = []
            for move_str in tokens[move_index + 1:]:
                try:
                    parsed = parse_uci_move(self.board, move_str)
                    result = self.board.apply_move(*parsed) if parsed else None
                    if result is not None and result.accepted:
                        moves_applied.append(move_str)
                    else:
                        self.logger.error(f"Illegal move: {move_str}")
                        print(f"# Illegal move: {move_str}", file=sys.stderr)
                        break
                except ValueError as e:
                    self.logger.error(f"Invalid move format: {move_str} - {e}")
                    print(f"# Invalid move format: {move_str} - {e}", file=sys.stderr)
                    break

            if moves_applied:
                self.logger.debug(f"Applied moves: {' '.join(moves_applied)}")

        fen = self.board.fen()
        self.logger.info(f"Position updated: {fen[:60]}{'...' if len(fen) > 60 else ''}")
        self.logger.debug(f"Full FEN: {fen}")

    def handle_go(self, tokens):
        """
        Handle 'go' command - start search.

        Formats:
            go depth 3
            go (uses the configured depth)

        Time control arguments are accepted and ignored.

        Args:
            tokens: Command tokens (e.g., ['go', 'depth', '3'])
        """
        self.logger.info(f"Handling: go {' '.join(tokens[1:])}")

        depth = None
        i = 1
        while i < len(tokens):
            if tokens[i] == "depth" and i + 1 < len(tokens):
                depth = int(tokens[i + 1])
                i += 2
            else:
                i += 1

        if depth is None:
            depth = self.config.search_depth
            self.logger.debug(f"No depth specified, using default depth {depth}")

        self.logger.info(f"Starting search thread with depth={depth}")

        # Make a copy of the board for the search thread to avoid race conditions
        board_copy = self.board.copy()

        self.searching = True
        self.search_thread = threading.Thread(
            target=self._search_thread,
            args=(depth, board_copy)
        )
        self.search_thread.start()

    def _search_thread(self, depth: int, board: Board):
        """
        Background thread for search.

        Runs alpha-beta search and sends result via UCI protocol.

        Args:
            depth: Search depth
            board: Copy of the board to search

        Output:
            info depth X score cp Y nodes Z time T pv <move>
            bestmove <move>
        """
        start_time = time.time()

        try:
            fen = board.fen()
            self.logger.info(f"Search started: depth={depth}, position={fen[:50]}{'...' if len(fen) > 50 else ''}")

            best_move, score, nodes_searched = find_best_move(board, depth, self.evaluator)

            elapsed_ms = int((time.time() - start_time) * 1000)
            self.logger.info(f"Search complete: best_move={best_move.uci() if best_move else 'None'}, score={score:.2f}, nodes={nodes_searched}, time={elapsed_ms}ms")

            if best_move:
                info_parts = [
                    "info",
                    f"depth {depth}",
                    f"score cp {score_to_cp(score, board.turn)}",
                    f"nodes {nodes_searched}",
                    f"time {elapsed_ms}",
                    f"pv {best_move.uci()}",
                ]
                info_msg = " ".join(info_parts)
                bestmove_msg = f"bestmove {best_move.uci()}"

                print(info_msg)
                print(bestmove_msg)
                sys.stdout.flush()

                self.logger.debug(f"<<< {info_msg}")
                self.logger.debug(f"<<< {bestmove_msg}")
            else:
                # Game already decided: null move
                self.logger.warning(f"No move to play ({board.outcome.value})")
                print("bestmove 0000")
                sys.stdout.flush()

        except Exception as e:
            elapsed_time = time.time() - start_time
            self.logger.error(f"Search error after {elapsed_time:.3f}s: {e}", exc_info=True)
            print(f"# Search error: {e}", file=sys.stderr)

            # Send a legal move as fallback
            legal_moves = find_legal_moves(board)
            if legal_moves:
                fallback_move = legal_moves[0].uci()
                self.logger.warning(f"Using fallback move: {fallback_move}")
                print(f"bestmove {fallback_move}")
                sys.stdout.flush()
                self.logger.debug(f"<<< bestmove {fallback_move}")
            else:
                self.logger.error("No legal moves available for fallback!")

        finally:
            self.searching = False
            self.logger.debug("Search thread finished")

    def handle_stop(self):
        """
        Handle 'stop' command.

        Searches cannot be interrupted; this waits for the running search,
        which then reports its bestmove as usual.
        """
        self.logger.info("Handling: stop")

        if self.search_thread and self.search_thread.is_alive():
            self.logger.debug("Waiting for search thread to finish")
            self.search_thread.join()

    def handle_quit(self):
        """Handle 'quit' command - shutdown engine."""
        self.logger.info("Handling: quit - shutting down engine")

        # Wait for search to complete before quitting
        if self.search_thread and self.search_thread.is_alive():
            self.logger.debug("Waiting for search thread to complete before quitting")
            self.search_thread.join()

        self.logger.info("=== MinimaxChess Engine Stopped ===")
        sys.exit(0)


def main():
    """Run the engine on stdin/stdout."""
    engine = UCIEngine()
    engine.run()
