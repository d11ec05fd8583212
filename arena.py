from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")

NodeId = int


class _Slot(Generic[T]):
    __slots__ = ("value", "parent", "children")

    def __init__(self, value: T):
        self.value = value
        self.parent: Optional[NodeId] = None
        self.children: List[NodeId] = []


class Arena(Generic[T]):
    """
    Append-only store addressed by integer handles.

    Every value also carries an optional parent handle and an ordered list
    of child handles, so a tree can live in here without the nodes pointing
    at each other. Nothing is ever removed; the whole arena is dropped at
    once when the owner is done with it.
    """

    def __init__(self):
        self._slots: List[_Slot[T]] = []

    def new_node(self, value: T) -> NodeId:
        self._slots.append(_Slot(value))
        return len(self._slots) - 1

    def _slot(self, node_id: NodeId) -> _Slot[T]:
        if not 0 <= node_id < len(self._slots):
            raise KeyError(f"unknown handle {node_id}")
        return self._slots[node_id]

    def get(self, node_id: NodeId) -> T:
        return self._slot(node_id).value

    def append(self, parent_id: NodeId, child_id: NodeId):
        """Attach child_id as the last child of parent_id."""
        child = self._slot(child_id)
        if child.parent is not None:
            raise ValueError(f"node {child_id} already has parent {child.parent}")
        self._slot(parent_id).children.append(child_id)
        child.parent = parent_id

    def parent(self, node_id: NodeId) -> Optional[NodeId]:
        return self._slot(node_id).parent

    def children(self, node_id: NodeId) -> List[NodeId]:
        return self._slot(node_id).children

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, node_id) -> bool:
        return isinstance(node_id, int) and 0 <= node_id < len(self._slots)

    def __iter__(self) -> Iterator[NodeId]:
        return iter(range(len(self._slots)))
