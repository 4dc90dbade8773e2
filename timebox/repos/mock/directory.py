"""
Mock directory repository with realistic sample scopes for demonstration.
"""

import logging
from typing import Dict, List

from timebox.domain import CategoryRow, DirectoryIdentity
from timebox.repositories import DirectoryRepository

logger = logging.getLogger(__name__)


class MockDirectoryRepository(DirectoryRepository):
    """
    Mock directory with two owner scopes and one supervisor per scope.
    """

    def __init__(self):
        self._identities: Dict[str, List[DirectoryIdentity]] = {
            "Sales": [
                DirectoryIdentity(
                    credential_secret="1001",
                    display_name="Ana Lopez",
                    scope_id="Sales",
                ),
                DirectoryIdentity(
                    credential_secret="1002",
                    display_name="Ben Ortiz",
                    scope_id="Sales",
                ),
                DirectoryIdentity(
                    credential_secret="9001",
                    display_name="Carla Diaz",
                    scope_id="Sales",
                ),
            ],
            "Support": [
                DirectoryIdentity(
                    credential_secret="2001",
                    display_name="Dan Reyes",
                    scope_id="Support",
                ),
                DirectoryIdentity(
                    credential_secret="9002",
                    display_name="Eva Cruz",
                    scope_id="Support",
                ),
            ],
        }
        self._categories: Dict[str, List[CategoryRow]] = {
            "Sales": [
                CategoryRow(id=1, name="Prospecting"),
                CategoryRow(id=2, name="Calls", parent_id=1),
                CategoryRow(id=3, name="Email", parent_id=1),
                CategoryRow(id=4, name="Meetings"),
                CategoryRow(id=5, name="Client", parent_id=4),
                CategoryRow(id=6, name="Internal", parent_id=4),
                CategoryRow(id=7, name="Admin"),
            ],
            "Support": [
                CategoryRow(id=1, name="Tickets"),
                CategoryRow(id=2, name="Tier 1", parent_id=1),
                CategoryRow(id=3, name="Tier 2", parent_id=1),
                CategoryRow(id=4, name="Training"),
            ],
        }
        self._supervisors = {"9001": ["Sales"], "9002": ["Sales", "Support"]}

    async def list_scopes(self) -> List[str]:
        return list(self._identities)

    async def get_identities(self, scope_id: str) -> List[DirectoryIdentity]:
        return list(self._identities.get(scope_id, []))

    async def get_category_rows(self, scope_id: str) -> List[CategoryRow]:
        return list(self._categories.get(scope_id, []))

    async def get_supervisor_scopes(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._supervisors.items()}
