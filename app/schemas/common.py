"""Shared Pydantic schema base with camelCase aliases."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every request/response schema: camelCase on the wire, ORM rows in."""

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        from_attributes=True,
    )


class HealthResponse(CamelModel):
    """/health payload; `schedulerRunning` reflects the daily unresponsive-vendor scan."""

    status: str = "ok"
    app: str
    env: str
    version: str
    scheduler_running: bool = False
