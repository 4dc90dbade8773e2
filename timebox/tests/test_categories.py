"""
Tests for building category forests from flat parent-pointer rows.
"""

from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from timebox.categories import build_hierarchy, find_parent_cycles, iter_paths
from timebox.domain import CategoryRow
from timebox.tests.factories import sales_category_rows


@composite
def category_rows(draw):
    """Generate rows with unique ids and arbitrary (possibly dangling)
    parent ids."""
    ids = draw(
        st.lists(
            st.integers(min_value=1, max_value=40),
            min_size=0,
            max_size=25,
            unique=True,
        )
    )
    rows = []
    for row_id in ids:
        parent_id = draw(
            st.one_of(
                st.just(0),
                st.sampled_from(ids) if ids else st.just(0),
                st.integers(min_value=41, max_value=60),
            )
        )
        rows.append(
            CategoryRow(id=row_id, name=f"c{row_id}", parent_id=parent_id)
        )
    return rows


def _resolves_to_root(row: CategoryRow, index) -> bool:
    seen = set()
    current = row
    while current.parent_id:
        if current.parent_id not in index or current.id in seen:
            return False
        seen.add(current.id)
        current = index[current.parent_id]
    return True


class TestBuildHierarchy:
    def test_builds_nested_forest_in_source_order(self) -> None:
        forest = build_hierarchy(sales_category_rows())

        assert [node.name for node in forest] == ["Prospecting", "Admin"]
        assert [c.name for c in forest[0].children] == ["Calls", "Email"]
        assert forest[1].is_leaf

    def test_child_listed_before_parent_is_attached(self) -> None:
        rows = [
            CategoryRow(id=2, name="Calls", parent_id=1),
            CategoryRow(id=1, name="Prospecting"),
        ]

        forest = build_hierarchy(rows)

        assert len(forest) == 1
        assert forest[0].children[0].name == "Calls"

    def test_unresolvable_parent_excludes_row_and_descendants(self) -> None:
        rows = [
            CategoryRow(id=1, name="Root"),
            CategoryRow(id=2, name="Orphan", parent_id=99),
            CategoryRow(id=3, name="Below orphan", parent_id=2),
        ]

        forest = build_hierarchy(rows)

        assert iter_paths(forest) == ["Root"]

    def test_parent_cycle_is_detected_and_unreachable(self) -> None:
        rows = [
            CategoryRow(id=1, name="Root"),
            CategoryRow(id=2, name="A", parent_id=3),
            CategoryRow(id=3, name="B", parent_id=2),
        ]

        assert find_parent_cycles(rows) == [2, 3]
        assert iter_paths(build_hierarchy(rows)) == ["Root"]

    def test_duplicate_id_keeps_first_row(self) -> None:
        rows = [
            CategoryRow(id=1, name="First"),
            CategoryRow(id=1, name="Second"),
        ]

        forest = build_hierarchy(rows)

        assert [node.name for node in forest] == ["First"]

    def test_names_are_trimmed(self) -> None:
        forest = build_hierarchy([CategoryRow(id=1, name="  Admin ")])

        assert forest[0].name == "Admin"

    def test_empty_rows_build_empty_forest(self) -> None:
        assert build_hierarchy([]) == []

    def test_iter_paths_joins_names(self) -> None:
        paths = iter_paths(build_hierarchy(sales_category_rows()))

        assert paths == [
            "Prospecting",
            "Prospecting / Calls",
            "Prospecting / Email",
            "Admin",
        ]

    @given(rows=category_rows())
    def test_each_resolvable_row_appears_exactly_once(self, rows) -> None:
        """A row with a parent chain ending at a root appears in exactly one
        tree position; every other row appears nowhere."""
        index = {row.id: row for row in rows}
        forest = build_hierarchy(rows)
        names = [path.split(" / ")[-1] for path in iter_paths(forest)]

        for row in rows:
            expected = 1 if _resolves_to_root(row, index) else 0
            assert names.count(row.name) == expected
