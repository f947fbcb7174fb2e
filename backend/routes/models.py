"""Pydantic request/response models for API endpoints."""

from pydantic import BaseModel, Field

from aura.models import GameSnapshot


class KeyBody(BaseModel):
    key: str = Field(min_length=1)
    pressed: bool = True


class CommandBody(BaseModel):
    message: str


class CommandResult(BaseModel):
    accepted: bool
    game: GameSnapshot
