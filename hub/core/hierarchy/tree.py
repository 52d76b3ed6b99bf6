"""Arena-indexed menu tree with per-node visibility filtering.

Nodes live in a flat list; ``parent`` and ``children`` are integer indices
into that list. Every walk is iterative, so depth is bounded only by memory.

Siblings are ordered by ``(order, input position)`` when the tree is built.
Filtering and serialization never reorder.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Mapping, Optional, Union

from hub.common.logger import get_logger

logger = get_logger("hierarchy")

Accessor = Union[str, Callable[[Any], Any]]


def _accessor(attr: Accessor) -> Callable[[Any], Any]:
    if callable(attr):
        return attr

    def get(obj: Any) -> Any:
        if isinstance(obj, Mapping):
            return obj.get(attr)
        return getattr(obj, attr, None)

    return get


@dataclass
class TreeNode:
    """A node in the arena."""
    key: Hashable
    item: Any
    order: int
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


class MenuTree:
    """
    Ordered forest of menu items.

    Build with ``MenuTree.from_items``; ``filter`` returns a new pruned tree
    and leaves this one untouched.
    """

    def __init__(self, nodes: List[TreeNode], roots: List[int]):
        self.nodes = nodes
        self.roots = roots
        self._index: Dict[Hashable, int] = {node.key: i for i, node in enumerate(nodes)}

    @classmethod
    def from_items(
        cls,
        items: Iterable[Any],
        *,
        key: Accessor = "id",
        parent_key: Accessor = "parent_id",
        order: Accessor = "order",
    ) -> "MenuTree":
        """
        Build a tree from flat records.

        Args:
            items: Objects or mappings, one per menu item
            key: Attribute/key name (or callable) for the item's identifier
            parent_key: Attribute/key name (or callable) for the parent's identifier
            order: Attribute/key name (or callable) for the sibling position

        Returns:
            MenuTree containing every item reachable from a root

        Raises:
            ValueError: If two items share a key
        """
        get_key = _accessor(key)
        get_parent = _accessor(parent_key)
        get_order = _accessor(order)

        entries = list(items)
        keys = [get_key(item) for item in entries]
        orders = [get_order(item) or 0 for item in entries]

        position: Dict[Hashable, int] = {}
        for i, k in enumerate(keys):
            if k in position:
                raise ValueError(f"Duplicate menu key: {k}")
            position[k] = i

        children_of: Dict[int, List[int]] = {i: [] for i in range(len(entries))}
        roots: List[int] = []
        orphans = 0
        for i, item in enumerate(entries):
            parent = get_parent(item)
            if parent is None:
                roots.append(i)
            elif parent in position:
                children_of[position[parent]].append(i)
            else:
                orphans += 1
                logger.warning(f"Dropping menu item {keys[i]}: parent {parent} not found")

        def sort_key(i: int) -> tuple:
            return (orders[i], i)

        nodes: List[TreeNode] = []
        new_roots: List[int] = []
        stack = [(i, None) for i in reversed(sorted(roots, key=sort_key))]
        while stack:
            src, parent_idx = stack.pop()
            idx = len(nodes)
            nodes.append(TreeNode(keys[src], entries[src], orders[src], parent_idx))
            if parent_idx is None:
                new_roots.append(idx)
            else:
                nodes[parent_idx].children.append(idx)
            for child in reversed(sorted(children_of[src], key=sort_key)):
                stack.append((child, idx))

        unreachable = len(entries) - len(nodes) - orphans
        if unreachable:
            logger.warning(f"Dropping {unreachable} menu item(s) caught in a parent cycle")

        return cls(nodes, new_roots)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Any]:
        """Yield items in depth-first, sibling-ordered sequence."""
        for idx in self.walk():
            yield self.nodes[idx].item

    def walk(self, start: Optional[int] = None) -> Iterator[int]:
        """Yield node indices depth-first from ``start`` (or every root)."""
        stack = [start] if start is not None else list(reversed(self.roots))
        while stack:
            idx = stack.pop()
            yield idx
            stack.extend(reversed(self.nodes[idx].children))

    def index_of(self, key: Hashable) -> int:
        """Get the arena index for an item key."""
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"Menu item not in tree: {key}") from None

    def children(self, key: Hashable) -> List[Any]:
        """Direct children of an item, in order."""
        node = self.nodes[self.index_of(key)]
        return [self.nodes[c].item for c in node.children]

    def descendants(self, key: Hashable) -> List[Any]:
        """All descendants of an item, depth-first."""
        start = self.index_of(key)
        return [self.nodes[idx].item for idx in self.walk(start) if idx != start]

    def path(self, key: Hashable, name: Accessor = "name") -> List[Any]:
        """Names from the root down to the item."""
        get_name = _accessor(name)
        names = []
        idx: Optional[int] = self.index_of(key)
        while idx is not None:
            node = self.nodes[idx]
            names.append(get_name(node.item))
            idx = node.parent
        names.reverse()
        return names

    def hierarchy_path(self, key: Hashable, name: Accessor = "name", separator: str = " > ") -> str:
        return separator.join(str(n) for n in self.path(key, name))

    def filter(self, predicate: Callable[[Any], bool]) -> "MenuTree":
        """
        Keep the items that pass ``predicate`` and whose parent was kept.

        Each item is evaluated on its own; an inaccessible item takes its
        subtree with it, while its siblings and ancestors are unaffected.
        A kept item whose children were all pruned stays, as a leaf.
        """
        nodes: List[TreeNode] = []
        roots: List[int] = []
        stack = [(r, None) for r in reversed(self.roots)]
        while stack:
            src, parent_idx = stack.pop()
            node = self.nodes[src]
            if not predicate(node.item):
                continue
            idx = len(nodes)
            nodes.append(TreeNode(node.key, node.item, node.order, parent_idx))
            if parent_idx is None:
                roots.append(idx)
            else:
                nodes[parent_idx].children.append(idx)
            stack.extend((child, idx) for child in reversed(node.children))
        return MenuTree(nodes, roots)

    def to_nested(self, serialize: Optional[Callable[[Any], Any]] = None) -> List[Dict[str, Any]]:
        """Render as ``[{"item": ..., "children": [...]}, ...]``."""
        result: List[Dict[str, Any]] = []
        stack = [(r, result) for r in reversed(self.roots)]
        while stack:
            idx, sink = stack.pop()
            node = self.nodes[idx]
            entry = {
                "item": serialize(node.item) if serialize else node.item,
                "children": [],
            }
            sink.append(entry)
            stack.extend((child, entry["children"]) for child in reversed(node.children))
        return result
