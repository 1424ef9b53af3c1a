from dataclasses import dataclass
from datetime import datetime


@dataclass
class Recipe:
    """Read-side view of a recipe, as far as the account features need it."""
    id: str
    title: str
    description: str
    created_at: datetime
    image: str | None = None
    user_id: str | None = None
    user_name: str = 'Anonymous'
