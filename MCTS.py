import logging
import math
import random
from typing import List, Optional

import numpy as np

from arena import Arena, NodeId
from game import MAX_ACTIONS, Action, ActionBuffer, Board, Color
from static_list import StaticList

log = logging.getLogger(__name__)

UCT_CONST = 1.141
DEFAULT_ITERATIONS = 10000


def uct_value(wins: int, sims: int, parent_sims: int, c: float = UCT_CONST) -> float:
    """
    UCT score of a child with `wins` out of `sims` playouts under a parent
    that has been visited `parent_sims` times:

        wins / sims + sqrt(log2(c * parent_sims / sims))

    Unvisited children score infinity so they are always tried before any
    visited sibling. The exploration term is clamped at zero when the log
    would go negative.
    """
    if sims == 0:
        return math.inf
    ratio = c * parent_sims / sims
    exploration = math.sqrt(math.log2(ratio)) if ratio > 1 else 0.0
    return wins / sims + exploration


class NodeState:
    """
    Statistics for one node of the search tree.
    - board: handle of this node's board snapshot (the position after action_taken).
    - sims: number of playouts that passed through this node.
    - wins: playouts won by the player who made action_taken.
    - action_taken: the action leading here from the parent (None for the root).
    - loc: this node's own handle in the node arena, written right after insertion.
    """
    __slots__ = ("board", "sims", "wins", "action_taken", "loc")

    def __init__(self, board: NodeId, action_taken: Optional[Action] = None):
        self.board = board
        self.sims = 0
        self.wins = 0
        self.action_taken = action_taken
        self.loc: Optional[NodeId] = None

    def __repr__(self):
        return (f"NodeState(loc={self.loc}, sims={self.sims}, wins={self.wins}, "
                f"action={self.action_taken})")


class Tree:
    """
    Monte Carlo Tree Search over checkers positions.

    Tree nodes and board snapshots live in two separate arenas and refer to
    each other by handle. A tree is built for a single decision and thrown
    away once the move has been chosen.
    """

    def __init__(self, board: Board, iterations: int = DEFAULT_ITERATIONS,
                 c: float = UCT_CONST, rng: Optional[random.Random] = None):
        """
        :param board: the position to search from; it is copied, never mutated.
        :param iterations: number of playouts run by get_best_move.
        :param c: exploration constant in the UCT formula.
        :param rng: source of randomness for playouts and rollout choice.
        """
        self.iterations = iterations
        self.c = c
        self.rng = rng if rng is not None else random.Random()
        self.arena: Arena[NodeState] = Arena()
        self.board_arena: Arena[Board] = Arena()
        self._actions = ActionBuffer()
        self._children: StaticList[NodeId] = StaticList(MAX_ACTIONS)
        self.root = self._new_node(board.clone())

    def _new_node(self, board: Board, action: Optional[Action] = None) -> NodeId:
        state = NodeState(self.board_arena.new_node(board), action)
        node_id = self.arena.new_node(state)
        state.loc = node_id
        return node_id

    def node(self, node_id: NodeId) -> NodeState:
        return self.arena.get(node_id)

    def board(self, node_id: NodeId) -> Board:
        return self.board_arena.get(self.node(node_id).board)

    def children(self, node_id: NodeId) -> List[NodeId]:
        return self.arena.children(node_id)

    def uct_value(self, node_id: NodeId) -> float:
        parent = self.arena.parent(node_id)
        parent_sims = self.node(parent).sims if parent is not None else 1
        state = self.node(node_id)
        return uct_value(state.wins, state.sims, parent_sims, self.c)

    def expand(self, node_id: NodeId) -> int:
        """
        Give `node_id` one child per legal action of its board. Nodes that
        already have children are left alone. Returns the number of
        children created.
        """
        if self.arena.children(node_id):
            return 0
        board = self.board(node_id)
        created = 0
        for action in board.collect_actions(self._actions):
            child_board = board.clone()
            child_board.execute_action(action)
            child = self._new_node(child_board, action)
            self.arena.append(node_id, child)
            created += 1
        self._actions.clear()
        log.debug("expanded node %d into %d children", node_id, created)
        return created

    def select_node(self) -> NodeId:
        """
        Selection phase: descend from the root, always taking the child
        with the highest UCT value, until reaching a node without children.
        """
        node_id = self.root
        children = self.arena.children(node_id)
        while children:
            scores = np.array([self.uct_value(child) for child in children])
            node_id = children[int(np.argmax(scores))]
            children = self.arena.children(node_id)
        return node_id

    def play_out(self, node_id: NodeId) -> Color:
        """
        Simulation phase: play random moves on a copy of the node's board
        until one side cannot move. Returns the winner.
        """
        board = self.board(node_id).clone()
        winner = None
        while winner is None:
            winner = board.make_random_move(self.rng, self._actions)
        return winner

    def back_propagate(self, node_id: NodeId, winner: Color):
        """
        Backpropagation: walk from `node_id` up to the root, counting the
        playout at every node and a win wherever the player who moved into
        that node is the winner.
        """
        current: Optional[NodeId] = node_id
        while current is not None:
            state = self.node(current)
            if self.board(current).get_last_turn() is winner:
                state.wins += 1
            state.sims += 1
            current = self.arena.parent(current)

    def expand_tree(self):
        """One iteration: selection, expansion, playout and backpropagation."""
        promising = self.select_node()
        self.expand(promising)

        self._children.clear()
        for child in self.arena.children(promising):
            self._children.push(child)

        test_node = promising
        if len(self._children) > 0:
            test_node = self._children.get(self.rng.randrange(len(self._children)))

        self.back_propagate(test_node, self.play_out(test_node))

    def run(self, n: Optional[int] = None):
        """Run `n` iterations (defaults to the configured iteration count)."""
        if n is None:
            n = self.iterations
        for _ in range(n):
            self.expand_tree()
        log.info("Played %d games.", n)
        log.info("Size of tree: %d.", len(self.arena))

    def select_best_move(self) -> Optional[Action]:
        """
        The action of the root's most visited child, or None if the root
        has no children.
        """
        children = self.arena.children(self.root)
        if not children:
            return None
        visits = np.array([self.node(child).sims for child in children])
        return self.node(children[int(np.argmax(visits))]).action_taken

    def get_best_move(self) -> Optional[Action]:
        """
        Choose an action for the side to move at the root.

        A forced action is returned straight away without searching; a
        position without legal actions returns None.
        """
        starting_moves = self.board(self.root).get_all_actions()
        if not starting_moves:
            return None
        if len(starting_moves) == 1:
            return starting_moves[0]
        self.expand(self.root)
        self.run()
        return self.select_best_move()
