from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True, slots=True)
class AddUserResult:
    """Outcome of a create-user submission; failures are captured, not raised."""
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Redirect:
    """Navigation the presentation layer must perform after an action."""
    location: str
