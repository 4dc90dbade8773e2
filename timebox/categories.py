"""
Builds category forests from flat parent-pointer rows.

Rows are indexed by id first and children lists are assembled from that
index, so a row whose parent id cannot be resolved is left out of the forest
entirely, and rows on a parent cycle are never reachable from a root.
"""

import logging
from typing import Dict, List, Sequence, Set

from .domain import CategoryNode, CategoryRow

logger = logging.getLogger(__name__)


def _index_rows(rows: Sequence[CategoryRow]) -> Dict[int, CategoryRow]:
    index: Dict[int, CategoryRow] = {}
    for row in rows:
        if row.id in index:
            logger.warning(
                "Duplicate category id, keeping first row",
                extra={"category_id": row.id, "ignored_name": row.name},
            )
            continue
        index[row.id] = row
    return index


def find_parent_cycles(rows: Sequence[CategoryRow]) -> List[int]:
    """Return the ids of rows whose parent chain loops back on itself."""
    return _cycles_in(_index_rows(rows))


def _cycles_in(index: Dict[int, CategoryRow]) -> List[int]:
    cyclic: Set[int] = set()
    for start_id in index:
        seen: List[int] = []
        current = start_id
        while current in index and current not in seen:
            seen.append(current)
            parent_id = index[current].parent_id
            if not parent_id:
                break
            current = parent_id
        else:
            if current in seen:
                cyclic.update(seen[seen.index(current):])
    return sorted(cyclic)


def build_hierarchy(rows: Sequence[CategoryRow]) -> List[CategoryNode]:
    """
    Convert flat ``(id, name, parent_id)`` rows into a forest.

    Pass one indexes every row by id; pass two records each resolvable
    parent's child ids in source order. The forest is then materialized from
    the roots (rows with no parent id). Rows pointing at an unknown parent are
    excluded, as is everything below them.
    """
    index = _index_rows(rows)
    children_ids: Dict[int, List[int]] = {row_id: [] for row_id in index}
    root_ids: List[int] = []

    for row_id, row in index.items():
        if not row.parent_id:
            root_ids.append(row_id)
        elif row.parent_id in index:
            children_ids[row.parent_id].append(row_id)
        else:
            logger.debug(
                "Category parent not found, excluding row",
                extra={"category_id": row_id, "parent_id": row.parent_id},
            )

    cycles = _cycles_in(index)
    if cycles:
        logger.warning(
            "Category parent cycle detected, rows are unreachable",
            extra={"category_ids": cycles},
        )

    def materialize(row_id: int, path: Set[int]) -> CategoryNode:
        # Nodes reachable from a root cannot loop, path guards anyway
        path = path | {row_id}
        return CategoryNode(
            name=index[row_id].name,
            children=[
                materialize(child_id, path)
                for child_id in children_ids[row_id]
                if child_id not in path
            ],
        )

    forest = [materialize(root_id, set()) for root_id in root_ids]
    logger.debug(
        "Built category hierarchy",
        extra={"row_count": len(rows), "root_count": len(forest)},
    )
    return forest


def iter_paths(
    forest: Sequence[CategoryNode], separator: str = " / "
) -> List[str]:
    """Every root-to-node path in the forest, depth first."""
    paths: List[str] = []

    def walk(nodes: Sequence[CategoryNode], prefix: List[str]) -> None:
        for node in nodes:
            chain = prefix + [node.name]
            paths.append(separator.join(chain))
            walk(node.children, chain)

    walk(forest, [])
    return paths
