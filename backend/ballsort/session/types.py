"""
Pydantic models for the session layer.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LeaderboardEntryView(BaseModel):
    """Leaderboard row as broadcast to clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    session_id: str
    score: int
    level: int
    name: str
