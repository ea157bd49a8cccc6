"""Value objects shared by the status pipeline and the HTTP layer."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServerAddress(BaseModel):
    """Validated game server address. Build it through ``validate_address``."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)

    def cache_key(self) -> str:
        return f"server:{self.host}/{self.port}"

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class ServerStatus(BaseModel):
    """Normalized snapshot of a game server.

    ``player_count <= max_player_count`` is not enforced: servers report
    these independently and can briefly disagree.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    player_count: int = Field(ge=0, alias="playerCount")
    max_player_count: int = Field(ge=0, alias="maxPlayerCount")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ServerStatus":
        return cls.model_validate_json(raw)


class FieldErrorKind(str, Enum):
    INVALID_HOST = "InvalidHost"
    INVALID_PORT = "InvalidPort"
    INVALID_STEAM_ID = "InvalidSteamId"
    INVALID_LIMIT = "InvalidLimit"


class FieldError(BaseModel):
    kind: FieldErrorKind = Field(exclude=True)
    param: str
    msg: str
    value: Optional[Any] = None


class ErrorMessagesResponse(BaseModel):
    error_messages: list[FieldError] = Field(alias="errorMessages")


class SummaryResponse(BaseModel):
    unique_player: int
    total_record: int
    unique_country: int
