import math
import random

import pytest

from game import BLACK_KING, BLACK_MAN, RED_MAN, Board, Capture, Color
from MCTS import UCT_CONST, NodeState, Tree, uct_value


@pytest.fixture
def start_board():
    board = Board(Color.BLACK)
    board.reset()
    return board


def test_unvisited_child_beats_any_visited_sibling():
    assert uct_value(0, 0, 100) == math.inf
    assert uct_value(0, 0, 100) > uct_value(1000, 1000, 1001)
    assert uct_value(0, 0, 1) > uct_value(1, 1, 1)


def test_uct_formula():
    expected = 3 / 4 + math.sqrt(math.log2(UCT_CONST * 10 / 4))
    assert uct_value(3, 4, 10) == pytest.approx(expected)


def test_uct_exploration_clamped_at_zero():
    assert uct_value(2, 4, 1) == pytest.approx(0.5)


def test_root_is_a_snapshot(start_board):
    tree = Tree(start_board)
    root = tree.node(tree.root)
    assert isinstance(root, NodeState)
    assert root.loc == tree.root
    assert root.action_taken is None
    assert (root.sims, root.wins) == (0, 0)

    start_board.set_piece(0, 0, RED_MAN)
    assert tree.board(tree.root).get_piece(0, 0) == BLACK_MAN


def test_expand_creates_one_child_per_action(start_board):
    tree = Tree(start_board)
    assert tree.expand(tree.root) == 7
    children = tree.children(tree.root)
    assert [tree.node(c).action_taken for c in children] == start_board.get_all_actions()
    for child in children:
        state = tree.node(child)
        assert state.loc == child
        expected = start_board.clone()
        expected.execute_action(state.action_taken)
        assert tree.board(child).squares == expected.squares
        assert tree.board(child).get_current_color() is Color.RED
    assert tree.expand(tree.root) == 0
    assert len(tree.children(tree.root)) == 7


def test_select_node_prefers_first_unvisited_child(start_board):
    tree = Tree(start_board)
    assert tree.select_node() == tree.root
    tree.expand(tree.root)
    assert tree.select_node() == tree.children(tree.root)[0]


def test_every_root_child_is_tried_once_first(start_board):
    tree = Tree(start_board, rng=random.Random(11))
    tree.expand(tree.root)
    tree.run(7)
    assert [tree.node(c).sims for c in tree.children(tree.root)] == [1] * 7


def test_back_propagate_credits_the_mover(start_board):
    tree = Tree(start_board)
    tree.expand(tree.root)
    child = tree.children(tree.root)[0]

    tree.back_propagate(child, Color.BLACK)
    assert (tree.node(child).sims, tree.node(child).wins) == (1, 1)
    assert (tree.node(tree.root).sims, tree.node(tree.root).wins) == (1, 0)

    tree.back_propagate(child, Color.RED)
    assert (tree.node(child).sims, tree.node(child).wins) == (2, 1)
    assert tree.node(tree.root).sims == 2


def test_visit_accounting(start_board):
    tree = Tree(start_board, rng=random.Random(3))
    tree.expand(tree.root)
    tree.run(40)

    root_children = tree.children(tree.root)
    assert sum(tree.node(c).sims for c in root_children) == 40
    assert tree.node(tree.root).sims == 40
    for handle in tree.arena:
        state = tree.node(handle)
        assert 0 <= state.wins <= state.sims
        assert state.sims >= sum(tree.node(c).sims for c in tree.children(handle))


def test_single_action_skips_search():
    board = Board(Color.BLACK)
    board.set_piece(3, 3, BLACK_MAN)
    board.set_piece(4, 4, RED_MAN)
    tree = Tree(board)
    assert tree.get_best_move() == Capture((3, 3), (5, 5), (4, 4))
    assert len(tree.arena) == 1
    assert tree.node(tree.root).sims == 0


def test_no_action_returns_none():
    board = Board(Color.RED)
    board.set_piece(0, 7, BLACK_KING)
    tree = Tree(board)
    assert tree.get_best_move() is None
    assert tree.select_best_move() is None


def test_terminal_node_is_rolled_out_in_place():
    board = Board(Color.RED)
    board.set_piece(0, 7, BLACK_KING)
    tree = Tree(board, rng=random.Random(0))
    assert tree.play_out(tree.root) is Color.BLACK
    tree.expand_tree()
    assert tree.children(tree.root) == []
    assert tree.node(tree.root).sims == 1
    assert tree.node(tree.root).wins == 0


def test_best_move_is_most_visited_child(start_board):
    tree = Tree(start_board)
    tree.expand(tree.root)
    children = tree.children(tree.root)
    for child, sims in zip(children, [3, 9, 9, 1, 0, 2, 4]):
        tree.node(child).sims = sims
        tree.node(child).wins = sims
    tree.node(children[3]).wins = 1
    assert tree.select_best_move() == tree.node(children[1]).action_taken


def test_search_is_reproducible_with_a_seed(start_board):
    first = Tree(start_board, iterations=30, rng=random.Random(5)).get_best_move()
    second = Tree(start_board, iterations=30, rng=random.Random(5)).get_best_move()
    assert first == second
    assert first in start_board.get_all_actions()


def test_search_runs_configured_iterations(start_board):
    tree = Tree(start_board, iterations=25, rng=random.Random(9))
    move = tree.get_best_move()
    assert move in start_board.get_all_actions()
    assert tree.node(tree.root).sims == 25
    assert sum(tree.node(c).sims for c in tree.children(tree.root)) == 25


def test_search_does_not_touch_the_input_board(start_board):
    before = start_board.squares[:]
    Tree(start_board, iterations=10, rng=random.Random(1)).get_best_move()
    assert start_board.squares == before
    assert start_board.get_current_color() is Color.BLACK
    assert start_board.get_last_turn() is None
