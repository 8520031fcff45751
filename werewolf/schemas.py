"""Ingress payloads for Socket.IO events.

Clients speak camelCase; fields are exposed in snake_case through aliases.
"""
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveInt, field_validator

from .models import GameSettings, Role


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class GameSettingsPayload(_Payload):
    roles: Dict[Role, NonNegativeInt] = Field(default_factory=dict)
    day_time: PositiveInt = Field(60, alias='dayTime')
    night_time: PositiveInt = Field(30, alias='nightTime')

    def to_settings(self) -> GameSettings:
        return GameSettings(roles=dict(self.roles), day_time=self.day_time, night_time=self.night_time)


class RoomCodePayload(_Payload):
    room_code: str = Field(..., alias='roomCode', min_length=1)

    @field_validator('room_code')
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class CreateRoomPayload(_Payload):
    user_name: str = Field(..., alias='userName', min_length=1)
    game_settings: GameSettingsPayload = Field(default_factory=GameSettingsPayload, alias='gameSettings')


class JoinRoomPayload(RoomCodePayload):
    user_name: str = Field(..., alias='userName', min_length=1)


class ReconnectPayload(JoinRoomPayload):
    pass


class SubmitVotePayload(RoomCodePayload):
    target_player_id: str = Field(..., alias='targetPlayerId', min_length=1)
    current_player_id: str = Field(..., alias='currentPlayerId', min_length=1)
    current_player_role: Role = Field(..., alias='currentPlayerRole')
