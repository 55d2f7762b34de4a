"""Shared FastAPI dependencies for the v1 routers.

The external collaborators (email transport, message generator, clock,
monitor) each sit behind their own dependency so tests can swap them via
``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.db.base import get_db
from app.services.email import EmailService
from app.services.factory import Services, build_services
from app.services.message_generator import MessageGenerator, get_message_generator
from app.services.monitor import UnresponsiveVendorMonitor

DEFAULT_ACTOR = "procurement"


def get_actor(x_actor: str = Header(default=DEFAULT_ACTOR, alias="X-Actor")) -> str:
    """Acting user for audit fields and notifications. Authentication is out of scope."""
    return x_actor.strip() or DEFAULT_ACTOR


@lru_cache
def get_email_service() -> EmailService:
    return EmailService()


@lru_cache
def get_generator() -> MessageGenerator | None:
    return get_message_generator()


def get_clock() -> Clock:
    return system_clock


def get_services(
    session: AsyncSession = Depends(get_db),
    email: EmailService = Depends(get_email_service),
    generator: MessageGenerator | None = Depends(get_generator),
    clock: Clock = Depends(get_clock),
) -> Services:
    return build_services(session, email=email, generator=generator, clock=clock)


def get_monitor(
    email: EmailService = Depends(get_email_service),
    clock: Clock = Depends(get_clock),
) -> UnresponsiveVendorMonitor:
    return UnresponsiveVendorMonitor(clock=clock, email=email)
