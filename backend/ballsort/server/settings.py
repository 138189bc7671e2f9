"""Game server configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from ballsort.logic.settings import GameRules, MoveRule


class GameServerSettings(BaseSettings):
    model_config = {"env_prefix": "GAME_"}

    session_timeout_seconds: int = Field(default=24 * 60 * 60, ge=60)  # 24 hours default, min 60s
    sweep_interval_seconds: int = Field(default=60 * 60, ge=1)  # decoupled from the timeout

    max_message_size: int = Field(default=1024, ge=64)  # bytes per inbound frame
    rate_limit_window_seconds: float = Field(default=1.0, gt=0)
    rate_limit_max_messages: int = Field(default=20, ge=1)

    leaderboard_size: int = Field(default=5, ge=1, le=100)
    max_name_length: int = Field(default=20, ge=1, le=100)
    move_rule: MoveRule = MoveRule.ANY
    broadcast_send_timeout_seconds: float = Field(default=1.0, gt=0)

    # Directory holding the browser client bundle; served at "/" when set.
    static_dir: str | None = Field(default=None, min_length=1)
    log_dir: str | None = Field(default=None, min_length=1)

    @property
    def rules(self) -> GameRules:
        return GameRules(move_rule=self.move_rule)
