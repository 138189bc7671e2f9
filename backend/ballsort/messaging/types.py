from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter
from pydantic.alias_generators import to_camel

from ballsort.logic.types import BoardView, LevelCompletion
from ballsort.session.types import LeaderboardEntryView


class ClientMessageType(StrEnum):
    JOIN = "join"
    MOVE = "move"
    NEXT_LEVEL = "nextLevel"
    RESTART = "restart"
    UPDATE_NAME = "updateName"
    GET_STATE = "getState"
    SELECT_COLUMN = "selectColumn"


class ServerMessageType(StrEnum):
    GAME_STATE = "gameState"
    LEVEL_COMPLETE = "levelComplete"
    LEADERBOARD = "leaderboard"


class _ClientData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JoinData(_ClientData):
    # Left loose on purpose: a malformed id must close the connection
    # instead of being dropped as an invalid message.
    session_id: Any = None
    name: str | None = None


class MoveData(_ClientData):
    from_column: StrictInt
    to_column: StrictInt


class UpdateNameData(_ClientData):
    name: str


class SelectColumnData(_ClientData):
    column: StrictInt | None


class EmptyData(_ClientData):
    pass


class JoinMessage(BaseModel):
    type: Literal[ClientMessageType.JOIN] = ClientMessageType.JOIN
    data: JoinData = Field(default_factory=JoinData)


class MoveMessage(BaseModel):
    type: Literal[ClientMessageType.MOVE] = ClientMessageType.MOVE
    data: MoveData


class NextLevelMessage(BaseModel):
    type: Literal[ClientMessageType.NEXT_LEVEL] = ClientMessageType.NEXT_LEVEL
    data: EmptyData = Field(default_factory=EmptyData)


class RestartMessage(BaseModel):
    type: Literal[ClientMessageType.RESTART] = ClientMessageType.RESTART
    data: EmptyData = Field(default_factory=EmptyData)


class UpdateNameMessage(BaseModel):
    type: Literal[ClientMessageType.UPDATE_NAME] = ClientMessageType.UPDATE_NAME
    data: UpdateNameData


class GetStateMessage(BaseModel):
    type: Literal[ClientMessageType.GET_STATE] = ClientMessageType.GET_STATE
    data: EmptyData = Field(default_factory=EmptyData)


class SelectColumnMessage(BaseModel):
    type: Literal[ClientMessageType.SELECT_COLUMN] = ClientMessageType.SELECT_COLUMN
    data: SelectColumnData


ClientMessage = Annotated[
    JoinMessage
    | MoveMessage
    | NextLevelMessage
    | RestartMessage
    | UpdateNameMessage
    | GetStateMessage
    | SelectColumnMessage,
    Field(discriminator="type"),
]


class GameStateMessage(BaseModel):
    type: Literal[ServerMessageType.GAME_STATE] = ServerMessageType.GAME_STATE
    data: BoardView


class LevelCompleteMessage(BaseModel):
    type: Literal[ServerMessageType.LEVEL_COMPLETE] = ServerMessageType.LEVEL_COMPLETE
    data: LevelCompletion


class LeaderboardMessage(BaseModel):
    type: Literal[ServerMessageType.LEADERBOARD] = ServerMessageType.LEADERBOARD
    data: list[LeaderboardEntryView]


_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(data: dict[str, Any]) -> ClientMessage:
    """Parse a decoded envelope into a typed ClientMessage."""
    return _client_message_adapter.validate_python(data)


def to_wire(message: BaseModel) -> dict[str, Any]:
    """Dump an outbound message with camelCase field names."""
    return message.model_dump(mode="json", by_alias=True)
