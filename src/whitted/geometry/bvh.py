"""Bounding volume hierarchy over intersectable elements.

The tree indexes element bounding boxes so that a ray query tests only the
elements whose boxes it can reach. Construction is a cheap top-down split at
the middle of the element midpoints; queries are recursive branch-and-bound
searches for the nearest hit, with a short-circuit mode for occlusion.

Node layout:
    BVHLeaf: references one element by index into the tree's snapshot.
    BVHInternal: always exactly two children; its bounds are the union of
        theirs. A node with a single child cannot be expressed.

Tie rules:
    - During the split, elements whose midpoint equals the pivot go to the
      side that is currently smaller (the left side only when strictly
      smaller). Both sides are therefore never empty.
    - A hit replaces the running best only when strictly closer, so on exact
      ties the first element found wins.
    - Children with equal entry distances are visited left first.

Example:
    >>> from whitted.geometry.bvh import BVHTree
    >>> tree = BVHTree(scene_elements)
    >>> hit = tree.trace(ray, 1e-4, math.inf)
    >>> if hit is not None:
    ...     print(hit.index, hit.t)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np

from whitted.core.ray import Ray, Vec3
from whitted.geometry.aabb import AxisAlignedBox
from whitted.geometry.shape import Hit

logger = logging.getLogger(__name__)


class Intersectable(Protocol):
    """Anything the tree can index: an intersection test plus bounds."""

    def intersects(self, ray: Ray, t_min: float, t_max: float) -> Hit | None: ...

    def bounds(self) -> AxisAlignedBox: ...


# =============================================================================
# Node Types
# =============================================================================


@dataclass(frozen=True)
class BVHLeaf:
    """Leaf referencing a single element."""

    index: int
    bounds: AxisAlignedBox


@dataclass(frozen=True)
class BVHInternal:
    """Internal node with exactly two children."""

    left: BVHNode
    right: BVHNode
    bounds: AxisAlignedBox


BVHNode = BVHLeaf | BVHInternal


@dataclass(frozen=True)
class TreeHit:
    """Nearest hit reported by a tree query.

    Attributes:
        index: Index of the hit element in the tree's snapshot.
        t: Ray parameter of the hit.
        normal: World-space unit normal at the hit.
    """

    index: int
    t: float
    normal: Vec3


# =============================================================================
# Construction
# =============================================================================


def build_node(items: Sequence[tuple[int, AxisAlignedBox]]) -> BVHNode | None:
    """Recursively build a subtree from (element_index, bounds) pairs.

    Args:
        items: Elements to index, with their world-space bounds.

    Returns:
        The subtree root, or None when ``items`` is empty.
    """
    if not items:
        return None
    if len(items) == 1:
        index, box = items[0]
        return BVHLeaf(index, box)
    if len(items) == 2:
        left = BVHLeaf(items[0][0], items[0][1])
        right = BVHLeaf(items[1][0], items[1][1])
        return BVHInternal(left, right, left.bounds.union(right.bounds))

    midpoints = np.array([box.midpoint() for _, box in items])
    lo = midpoints.min(axis=0)
    hi = midpoints.max(axis=0)
    extent = hi - lo
    axis = int(np.argmax(extent))
    pivot = 0.5 * (lo[axis] + hi[axis])

    left_items: list[tuple[int, AxisAlignedBox]] = []
    right_items: list[tuple[int, AxisAlignedBox]] = []
    for item, mid in zip(items, midpoints[:, axis]):
        if mid < pivot:
            left_items.append(item)
        elif mid > pivot:
            right_items.append(item)
        elif len(left_items) < len(right_items):
            left_items.append(item)
        else:
            right_items.append(item)

    left_node = build_node(left_items)
    right_node = build_node(right_items)
    # Ties always go to the smaller side, so neither side can be empty here
    assert left_node is not None and right_node is not None
    return BVHInternal(left_node, right_node, left_node.bounds.union(right_node.bounds))


# =============================================================================
# Query
# =============================================================================


def box_entry(box: AxisAlignedBox, ray: Ray, t_min: float, t_max: float) -> float | None:
    """Distance at which the ray enters ``box`` within [t_min, t_max].

    A ray starting inside the box enters at ``t_min``.

    Returns:
        The clamped entry distance, or None when the box is out of reach.
    """
    if box.is_empty():
        return None
    t_entry, t_exit, _, _ = box.slab_interval(ray)
    if t_entry > t_exit or t_exit < t_min or t_entry > t_max:
        return None
    return max(t_entry, t_min)


class _Search:
    """Running state of one tree query."""

    def __init__(
        self,
        elements: Sequence[Intersectable],
        ray: Ray,
        t_min: float,
        t_max: float,
        shortcircuit: bool,
    ) -> None:
        self.elements = elements
        self.ray = ray
        self.t_min = t_min
        self.shortcircuit = shortcircuit
        self.best_index: int | None = None
        self.best_t = t_max
        self.best_normal: Vec3 | None = None

    @property
    def done(self) -> bool:
        return self.shortcircuit and self.best_index is not None

    def visit(self, node: BVHNode) -> None:
        if isinstance(node, BVHLeaf):
            hit = self.elements[node.index].intersects(self.ray, self.t_min, self.best_t)
            if hit is None:
                return
            if self.best_index is None or hit.t < self.best_t:
                self.best_index = node.index
                self.best_t = hit.t
                self.best_normal = hit.normal
            return

        left_entry = box_entry(node.left.bounds, self.ray, self.t_min, self.best_t)
        right_entry = box_entry(node.right.bounds, self.ray, self.t_min, self.best_t)
        candidates = [
            (entry, child)
            for entry, child in ((left_entry, node.left), (right_entry, node.right))
            if entry is not None and self._reachable(entry)
        ]
        # Stable sort keeps the left child first on equal entries
        candidates.sort(key=lambda pair: pair[0])
        for entry, child in candidates:
            if not self._reachable(entry):
                break
            self.visit(child)
            if self.done:
                return

    def _reachable(self, entry: float) -> bool:
        if self.best_index is None:
            return entry <= self.best_t
        return entry < self.best_t


class BVHTree:
    """A bounding volume hierarchy built over a snapshot of elements.

    The element sequence is copied into a tuple at construction; leaf indices
    refer to positions in that snapshot and the tree is read-only afterwards.

    Attributes:
        root: Root node, or None for an empty tree.
        elements: The indexed elements.
    """

    def __init__(self, elements: Sequence[Intersectable]) -> None:
        self.elements: tuple[Intersectable, ...] = tuple(elements)
        items = [(i, element.bounds()) for i, element in enumerate(self.elements)]
        self.root: BVHNode | None = build_node(items)
        logger.debug("Built BVH over %d elements (depth %d)", len(self.elements), self.depth())

    def __len__(self) -> int:
        return len(self.elements)

    def trace(
        self,
        ray: Ray,
        t_min: float = 0.0,
        t_max: float = math.inf,
        shortcircuit: bool = False,
    ) -> TreeHit | None:
        """Find the nearest element hit by ``ray`` with t in [t_min, t_max].

        Args:
            ray: The query ray.
            t_min: Smallest accepted ray parameter.
            t_max: Largest accepted ray parameter.
            shortcircuit: Stop at the first hit found instead of the nearest.

        Returns:
            The hit record, or None when nothing is hit. An empty tree always
            returns None.
        """
        if self.root is None:
            return None
        search = _Search(self.elements, ray, t_min, t_max, shortcircuit)
        search.visit(self.root)
        if search.best_index is None:
            return None
        assert search.best_normal is not None
        return TreeHit(search.best_index, search.best_t, search.best_normal)

    def occluded(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Return True if anything is hit within [t_min, t_max]."""
        return self.trace(ray, t_min, t_max, shortcircuit=True) is not None

    # =========================================================================
    # Inspection
    # =========================================================================

    def iter_nodes(self) -> Iterator[BVHNode]:
        """Yield every node in depth-first, left-first order."""
        stack = [] if self.root is None else [self.root]
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, BVHInternal):
                stack.append(node.right)
                stack.append(node.left)

    def leaves(self) -> list[BVHLeaf]:
        return [] if self.root is None else self.leaves_of(self.root)

    def leaf_count(self) -> int:
        return sum(1 for node in self.iter_nodes() if isinstance(node, BVHLeaf))

    @staticmethod
    def leaves_of(node: BVHNode) -> list[BVHLeaf]:
        """Leaves of the subtree rooted at ``node``, left to right."""
        if isinstance(node, BVHLeaf):
            return [node]
        return BVHTree.leaves_of(node.left) + BVHTree.leaves_of(node.right)

    def depth(self) -> int:
        """Number of levels in the tree (0 when empty)."""

        def _depth(node: BVHNode) -> int:
            if isinstance(node, BVHLeaf):
                return 1
            return 1 + max(_depth(node.left), _depth(node.right))

        return 0 if self.root is None else _depth(self.root)

    def format(self) -> str:
        """Render the tree as indented text, one node per line."""
        lines: list[str] = []

        def _emit(node: BVHNode, indent: int) -> None:
            pad = "  " * indent
            box = f"[{node.bounds.min.tolist()} .. {node.bounds.max.tolist()}]"
            if isinstance(node, BVHLeaf):
                lines.append(f"{pad}leaf {node.index} {box}")
            else:
                lines.append(f"{pad}node {box}")
                _emit(node.left, indent + 1)
                _emit(node.right, indent + 1)

        if self.root is None:
            return "<empty>"
        _emit(self.root, 0)
        return "\n".join(lines)
