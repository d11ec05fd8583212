import random
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, Union

from static_list import StaticList

BOARD_SIZE = 8

# 12 pieces with at most one action per diagonal each
MAX_ACTIONS = 48

KING_MOVES = ((1, 1), (-1, 1), (1, -1), (-1, -1))
BLACK_MOVES = ((1, 1), (-1, 1))
RED_MOVES = ((1, -1), (-1, -1))

Square = Tuple[int, int]


class Color(Enum):
    BLACK = "black"
    RED = "red"

    def opposite(self) -> "Color":
        return Color.RED if self is Color.BLACK else Color.BLACK

    def king_row(self) -> int:
        """The row a man of this color is promoted on."""
        return BOARD_SIZE - 1 if self is Color.BLACK else 0

    def __str__(self):
        return self.value


class Piece(NamedTuple):
    """
    Contents of one square. EMPTY has no color; an occupied square has a
    color and a king flag.
    """
    color: Optional[Color] = None
    king: bool = False

    @property
    def is_empty(self) -> bool:
        return self.color is None

    def crowned(self) -> "Piece":
        if self.color is None:
            raise ValueError("tried to king empty piece")
        return Piece(self.color, True)

    def directions(self) -> Tuple[Tuple[int, int], ...]:
        if self.color is None:
            return ()
        if self.king:
            return KING_MOVES
        return BLACK_MOVES if self.color is Color.BLACK else RED_MOVES

    def __str__(self):
        if self.color is Color.BLACK:
            return "B" if self.king else "b"
        if self.color is Color.RED:
            return "R" if self.king else "r"
        return "_"


EMPTY = Piece()
BLACK_MAN = Piece(Color.BLACK, False)
BLACK_KING = Piece(Color.BLACK, True)
RED_MAN = Piece(Color.RED, False)
RED_KING = Piece(Color.RED, True)


class Move(NamedTuple):
    start: Square
    end: Square


class Capture(NamedTuple):
    start: Square
    end: Square
    captured: Square


Action = Union[Move, Capture]


class ActionBuffer:
    """
    Collects the actions found while scanning a board.

    Captures and simple moves are kept apart; as soon as one capture has
    been seen, moves are no longer recorded and every read only sees the
    captures. That is the forced-capture rule.
    """

    def __init__(self, capacity: int = MAX_ACTIONS):
        self.captures: StaticList[Capture] = StaticList(capacity)
        self.moves: StaticList[Move] = StaticList(capacity)

    def add_action(self, action: Action):
        if isinstance(action, Capture):
            self.captures.push(action)
        elif not self.contains_capture():
            self.moves.push(action)

    def contains_capture(self) -> bool:
        return len(self.captures) > 0

    def has_actions(self) -> bool:
        return len(self.captures) > 0 or len(self.moves) > 0

    def _active(self) -> StaticList:
        return self.captures if self.contains_capture() else self.moves

    def get(self, index: int) -> Action:
        return self._active().get(index)

    def clear(self):
        self.captures.clear()
        self.moves.clear()

    def random_action(self, rng=random) -> Action:
        active = self._active()
        if not len(active):
            raise IndexError("Called random_action with no actions available")
        return active.get(rng.randrange(len(active)))

    def __len__(self) -> int:
        return len(self._active())

    def __iter__(self):
        return iter(self._active())


class Board:
    """
    An 8x8 checkers board for two players: Black and Red.

    Squares are stored flattened, indexed by y * 8 + x with x the column and
    y the row. Black starts on rows 0..2 and moves toward row 7; Red starts
    on rows 5..7 and moves toward row 0. Only squares with (x + y) even are
    ever used.

    The board also tracks whose turn it is and who made the last action
    (None until the first action is executed).
    """

    def __init__(self, starting_color: Color = Color.BLACK):
        self.squares: List[Piece] = [EMPTY] * (BOARD_SIZE * BOARD_SIZE)
        self.current_turn = starting_color
        self.last_turn: Optional[Color] = None

    def clone(self) -> "Board":
        """
        Return an independent copy of the board for experimentation.
        """
        new_board = Board.__new__(Board)
        new_board.squares = self.squares[:]
        new_board.current_turn = self.current_turn
        new_board.last_turn = self.last_turn
        return new_board

    def get_current_color(self) -> Color:
        return self.current_turn

    def get_last_turn(self) -> Optional[Color]:
        return self.last_turn

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < BOARD_SIZE and 0 <= y < BOARD_SIZE

    def get_piece(self, x: int, y: int) -> Optional[Piece]:
        """Return the piece at (x, y), or None if the square is off the board."""
        if not self.in_bounds(x, y):
            return None
        return self.squares[y * BOARD_SIZE + x]

    def set_piece(self, x: int, y: int, piece: Piece):
        if not self.in_bounds(x, y):
            raise IndexError(f"square ({x}, {y}) is off the board")
        self.squares[y * BOARD_SIZE + x] = piece

    def reset(self):
        """
        Place 12 black men on rows 0..2 and 12 red men on rows 5..7.
        Every other square is emptied.
        """
        self.squares = [EMPTY] * (BOARD_SIZE * BOARD_SIZE)
        for y in range(3):
            for x in range(BOARD_SIZE):
                if (x + y) % 2 == 0:
                    self.set_piece(x, y, BLACK_MAN)
        for y in range(5, BOARD_SIZE):
            for x in range(BOARD_SIZE):
                if (x + y) % 2 == 0:
                    self.set_piece(x, y, RED_MAN)

    def count(self, color: Color) -> int:
        return sum(1 for piece in self.squares if piece.color is color)

    def _get_action(self, x: int, y: int, dx: int, dy: int, piece: Piece) -> Optional[Action]:
        """
        The single action available to `piece` at (x, y) in direction
        (dx, dy), if any.
        """
        adjacent = self.get_piece(x + dx, y + dy)
        if adjacent is None:
            return None
        if adjacent.is_empty:
            return Move((x, y), (x + dx, y + dy))
        if adjacent.color is piece.color:
            return None
        landing = self.get_piece(x + 2 * dx, y + 2 * dy)
        if landing is None or not landing.is_empty:
            return None
        return Capture((x, y), (x + 2 * dx, y + 2 * dy), (x + dx, y + dy))

    def get_actions(self, x: int, y: int, buffer: ActionBuffer):
        """Add every action of the piece at (x, y) to `buffer`."""
        piece = self.get_piece(x, y)
        if piece is None or piece.is_empty:
            raise ValueError(f"no piece to move at ({x}, {y})")
        for dx, dy in piece.directions():
            action = self._get_action(x, y, dx, dy, piece)
            if action is not None:
                buffer.add_action(action)

    def collect_actions(self, buffer: ActionBuffer) -> ActionBuffer:
        """
        Fill `buffer` with the legal actions of the side to move, scanning
        rows then columns. The buffer is cleared first.
        """
        buffer.clear()
        for y in range(BOARD_SIZE):
            for x in range(BOARD_SIZE):
                if self.squares[y * BOARD_SIZE + x].color is self.current_turn:
                    self.get_actions(x, y, buffer)
        return buffer

    def get_all_actions(self) -> List[Action]:
        """
        Returns the legal actions for the side to move.

        In checkers, capturing is mandatory, so if any capture exists on the
        board only captures are returned.
        """
        return list(self.collect_actions(ActionBuffer()))

    def piece_has_capture(self, x: int, y: int) -> bool:
        """Whether the piece at (x, y) can capture from where it stands."""
        piece = self.get_piece(x, y)
        if piece is None or piece.is_empty:
            return False
        for dx, dy in piece.directions():
            if isinstance(self._get_action(x, y, dx, dy, piece), Capture):
                return True
        return False

    def _king_piece(self, x: int, y: int):
        self.set_piece(x, y, self.get_piece(x, y).crowned())

    def _finish_turn(self, mover: Color, keep_turn: bool):
        self.last_turn = mover
        if not keep_turn:
            self.current_turn = mover.opposite()

    def execute_action(self, action: Action):
        """
        Apply `action` to the board.

        A man reaching its king row is crowned. After a simple move the turn
        passes to the other side. After a capture the same side stays on
        move while the capturing piece can capture again from its new
        square.
        """
        (x, y), (nx, ny) = action.start, action.end
        piece = self.get_piece(x, y)
        if piece is None or piece.is_empty:
            raise ValueError(f"no piece to move at ({x}, {y})")
        mover = self.current_turn

        self.set_piece(x, y, EMPTY)
        if isinstance(action, Capture):
            self.set_piece(*action.captured, EMPTY)
        self.set_piece(nx, ny, piece)
        if ny == piece.color.king_row():
            self._king_piece(nx, ny)

        keep_turn = isinstance(action, Capture) and self.piece_has_capture(nx, ny)
        self._finish_turn(mover, keep_turn)

    def make_random_move(self, rng=random, buffer: Optional[ActionBuffer] = None) -> Optional[Color]:
        """
        Play a uniformly random legal action.

        Returns None if an action was played. If the side to move has no
        legal action the board is left untouched and the winner (the other
        side) is returned.
        """
        if buffer is None:
            buffer = ActionBuffer()
        self.collect_actions(buffer)
        if not buffer.has_actions():
            return self.current_turn.opposite()
        self.execute_action(buffer.random_action(rng))
        buffer.clear()
        return None

    def render(self) -> str:
        rule = "-" * (2 * BOARD_SIZE + 1)
        lines = [rule]
        for y in range(BOARD_SIZE):
            lines.append("".join(f"|{self.get_piece(x, y)}" for x in range(BOARD_SIZE)) + "|")
            lines.append(rule)
        return "\n".join(lines)

    def print_board(self):
        """
        Display the board in a simple ASCII format.
        """
        print(self.render())

    def __str__(self):
        return self.render()
