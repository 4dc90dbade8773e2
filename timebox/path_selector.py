"""
State machine for picking a category path, or freeform text, for a single
schedule slot.
"""

import logging
from typing import List, Optional, Sequence

from .domain import CategoryNode

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " / "
SELECT_OPTION = "Select"
OTHER_OPTION = "Other"


class HierarchicalPathSelector:
    """
    Tracks the chosen names at increasing depth of a category forest, or a
    freeform value when the user picked "Other".

    The committed value is either the chosen names joined with
    PATH_SEPARATOR or the raw freeform text.
    """

    def __init__(
        self,
        tree: Sequence[CategoryNode],
        value: Optional[str] = None,
        separator: str = PATH_SEPARATOR,
    ):
        self._tree = list(tree)
        self._separator = separator
        self.path: List[str] = []
        self.freeform = False
        self.freeform_text = ""
        if value:
            self.load(value)

    # --- Queries ---

    def _nodes_at(self, level: int) -> List[CategoryNode]:
        """Nodes offered at ``level`` given the current path."""
        nodes = self._tree
        for name in self.path[:level]:
            found = _find(nodes, name)
            if found is None:
                return []
            nodes = found.children
        return nodes

    def options(self, level: int) -> List[str]:
        """Choices at ``level``, framed by the Select and Other entries."""
        names = [node.name for node in self._nodes_at(level)]
        return [SELECT_OPTION, *names, OTHER_OPTION]

    def levels(self) -> List[List[str]]:
        """The option lists to display, one per visible dropdown.

        One list per chosen name plus the next level, stopping at a leaf or
        when freeform mode is active.
        """
        if self.freeform:
            return [self.options(level) for level in range(len(self.path) + 1)]
        levels = [self.options(0)]
        for level in range(len(self.path)):
            if not self._nodes_at(level + 1):
                break
            levels.append(self.options(level + 1))
        return levels

    @property
    def is_terminal(self) -> bool:
        """True when the selected path ends on a leaf node."""
        return bool(self.path) and not self.freeform and not self._nodes_at(
            len(self.path)
        )

    @property
    def value(self) -> str:
        if self.freeform:
            return self.freeform_text
        return self._separator.join(self.path)

    # --- Transitions ---

    def choose(self, level: int, option: str) -> str:
        """
        Pick ``option`` at depth ``level`` and return the committed value.

        Deeper selections are discarded. Raises ValueError for a name that is
        not offered at that depth.
        """
        if level < 0 or level > len(self.path):
            raise ValueError(f"Level {level} is not selectable")
        if level > 0 and level == len(self.path) and self.is_terminal:
            raise ValueError(
                f"Selection ended on a leaf, level {level} has no options"
            )

        if option == SELECT_OPTION:
            self.path = self.path[:level]
            self.freeform = False
            self.freeform_text = ""
            return ""

        if option == OTHER_OPTION:
            self.path = self.path[:level]
            self.freeform = True
            return self.value

        if option not in self.options(level):
            raise ValueError(
                f"'{option}' is not an option at level {level}"
            )
        self.path = self.path[:level] + [option]
        self.freeform = False
        self.freeform_text = ""
        return self.value

    def set_freeform_text(self, text: str) -> str:
        if not self.freeform:
            raise ValueError("Freeform text requires choosing Other first")
        self.freeform_text = text
        return self.value

    def load(self, value: str) -> None:
        """
        Re-derive state from a stored value by walking the tree name by
        name. A chain that does not fully match is kept as freeform text.
        """
        if not value or value == SELECT_OPTION:
            self.path = []
            self.freeform = False
            self.freeform_text = ""
            return

        chain = value.split(self._separator)
        nodes = self._tree
        matched: List[str] = []
        for part in chain:
            found = _find(nodes, part)
            if found is None:
                break
            matched.append(part)
            nodes = found.children

        if len(matched) == len(chain):
            self.path = matched
            self.freeform = False
            self.freeform_text = ""
        else:
            logger.debug(
                "Stored value does not match category tree, using freeform",
                extra={"value": value, "matched_depth": len(matched)},
            )
            self.path = []
            self.freeform = True
            self.freeform_text = value


def _find(
    nodes: Sequence[CategoryNode], name: str
) -> Optional[CategoryNode]:
    for node in nodes:
        if node.name == name:
            return node
    return None
