"""
Board Coordinates

This module defines the grid addressing used by every other part of the
engine, and the conversions between it and python-chess square indices.

Orientation:
    - Row 0 = Rank 8 (Black's back rank)
    - Row 7 = Rank 1 (White's back rank)
    - Column 0 = A-file
    - Column 7 = H-file

Teams are signed integers: White = -1, Black = 1. A piece's "forward"
direction in rows is its team sign, so White pawns walk toward row 0.
"""

from typing import NamedTuple, Optional

import chess

WHITE = -1
BLACK = 1

TEAM_NAMES = {WHITE: "white", BLACK: "black"}

BOARD_SIZE = 8


class Coordinate(NamedTuple):
    """
    A (column, row) pair on the 8x8 grid.

    Attributes:
        x: Column index (0 = a-file)
        y: Row index (0 = rank 8)
    """

    x: int
    y: int

    def in_bounds(self) -> bool:
        return 0 <= self.x < BOARD_SIZE and 0 <= self.y < BOARD_SIZE

    def shifted(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)

    @property
    def index(self) -> int:
        """Arena index of this coordinate (row-major from row 0)."""
        return self.y * BOARD_SIZE + self.x

    @property
    def is_light(self) -> bool:
        """a8 (0, 0) is a light square."""
        return (self.x + self.y) % 2 == 0

    @property
    def name(self) -> str:
        """Algebraic name, e.g. 'e4'."""
        return chess.square_name(coordinates_to_square(self))

    @classmethod
    def from_name(cls, name: str) -> "Coordinate":
        """
        Parse an algebraic square name.

        Raises:
            ValueError: If the name is not a square (python-chess error)
        """
        return square_to_coordinates(chess.parse_square(name))

    @classmethod
    def from_index(cls, index: int) -> "Coordinate":
        return cls(index % BOARD_SIZE, index // BOARD_SIZE)

    def __str__(self) -> str:
        return self.name if self.in_bounds() else f"({self.x}, {self.y})"


ALL_COORDINATES = tuple(Coordinate.from_index(i) for i in range(BOARD_SIZE * BOARD_SIZE))


def square_to_coordinates(square: int) -> Coordinate:
    """
    Convert python-chess square index to a Coordinate.

    Args:
        square: Square index (0-63) where 0=A1, 63=H8

    Returns:
        Coordinate where row 0 = rank 8 and column 0 = A-file
    """
    rank = chess.square_rank(square)
    file = chess.square_file(square)
    return Coordinate(file, 7 - rank)


def coordinates_to_square(coor: Coordinate) -> int:
    """
    Convert a Coordinate to python-chess square index.

    Raises:
        ValueError: If the coordinate is off the board
    """
    if not coor.in_bounds():
        raise ValueError(f"Coordinate off the board: ({coor.x}, {coor.y})")
    return chess.square(coor.x, 7 - coor.y)


def promotion_row(team: int) -> int:
    """Row a pawn of the given team promotes on."""
    return 0 if team == WHITE else BOARD_SIZE - 1


def pawn_start_row(team: int) -> int:
    return 6 if team == WHITE else 1


def back_row(team: int) -> int:
    return 7 if team == WHITE else 0


def sign(value: int) -> int:
    return (value > 0) - (value < 0)


def ray_direction(dx: int, dy: int) -> Optional[tuple]:
    """
    Unit direction and distance of an offset lying on a rank, file or diagonal.

    Returns:
        ((ux, uy), distance) or None for offsets that are not on a ray
        (knight jumps, the null offset)
    """
    if dx == 0 and dy == 0:
        return None
    if dx == 0 or dy == 0 or abs(dx) == abs(dy):
        return (sign(dx), sign(dy)), max(abs(dx), abs(dy))
    return None
