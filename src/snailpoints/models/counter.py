"""Counter (point tally) models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Counter(BaseModel):
    """A named point tally owned by the backend.

    Position is the index in the server-maintained sequence and is not
    stored on the model.
    """
    model_config = {"frozen": True}

    id: int = Field(description="Server-assigned identifier")
    name: str = Field(default="", description="Display name, empty when unnamed")
    points: int = 0

    @property
    def is_unnamed(self) -> bool:
        return len(self.name) == 0


class CounterList(BaseModel):
    """Body of ``GET /points/list``."""

    points: list[Counter] = Field(default_factory=list)
