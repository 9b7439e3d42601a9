from dataclasses import dataclass, field
from typing import Any, Dict, List

USERS_PAGE_SIZE = 5

@dataclass(slots=True)
class UsersPageDTO:
    """One page of the user listing, normalized from the backend envelope."""
    users: List[Dict[str, Any]] = field(default_factory=list)
    total_pages: int = 1
    is_first: bool = True
    is_last: bool = True
    page_number: int = 0
    size: int = USERS_PAGE_SIZE

    def row_number(self, index: int) -> int:
        """1-based position of the `index`-th row across all pages."""
        return self.page_number * self.size + index + 1
