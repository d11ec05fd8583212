import argparse
import logging
import random
import time
from typing import List, Optional

from game import Board, Color
from MCTS import DEFAULT_ITERATIONS, Tree


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Checkers move search with Monte Carlo Tree Search")
    parser.add_argument("--iterations", type=int, default=DEFAULT_ITERATIONS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--self-play", action="store_true",
                        help="play random moves against itself instead of searching")
    parser.add_argument("--delay", type=float, default=0.0,
                        help="seconds to wait between self-play moves")
    parser.add_argument("--max-turns", type=int, default=None,
                        help="stop self-play after this many actions")
    parser.add_argument("--verbose", action="store_true")
    return parser


def find_best_move(board: Board, iterations: int, rng: random.Random):
    tree = Tree(board, iterations=iterations, rng=rng)
    start = time.perf_counter()
    move = tree.get_best_move()
    return move, time.perf_counter() - start


def self_play(board: Board, rng: random.Random, delay: float = 0.0,
              max_turns: Optional[int] = None) -> Optional[Color]:
    """
    Play random actions for both sides, printing the board after each one.
    Returns the winner, or None if max_turns ran out first.
    """
    turns = 0
    while max_turns is None or turns < max_turns:
        winner = board.make_random_move(rng)
        if winner is not None:
            print(f"{winner} wins after {turns} actions")
            return winner
        turns += 1
        board.print_board()
        if delay:
            time.sleep(delay)
    print(f"stopped after {turns} actions "
          f"(black {board.count(Color.BLACK)}, red {board.count(Color.RED)})")
    return None


def main(args: Optional[List[str]] = None):
    options = build_parser().parse_args(args)
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)

    rng = random.Random(options.seed)
    board = Board(Color.BLACK)
    board.reset()

    if options.self_play:
        self_play(board, rng, options.delay, options.max_turns)
        return

    move, elapsed = find_best_move(board, options.iterations, rng)
    print("best move", move)
    print(f"took: {elapsed:.2f}s")


if __name__ == "__main__":
    main()
