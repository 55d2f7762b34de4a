"""Follow-up engine: create, dispatch, track and resolve vendor follow-ups.

Rule: No FastAPI here. Email goes out through the session outbox only after
the unit of work commits.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, system_clock
from app.core.exceptions import ConflictError, NotFoundError, parse_enum
from app.domain.enums import FollowUpStatus, FollowUpType
from app.domain.follow_up import FollowUp
from app.domain.onboarding import VendorOnboarding
from app.repositories.follow_up import FollowUpRepository
from app.repositories.onboarding import OnboardingRepository
from app.services.dispatch import enqueue
from app.services.email import EmailService

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "SYSTEM"
ALL = "ALL"


def _type_value(follow_up_type: FollowUpType | str) -> str:
    return getattr(follow_up_type, "value", follow_up_type)


class FollowUpService:
    def __init__(
        self,
        session: AsyncSession,
        email: EmailService | None = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._repo = FollowUpRepository(session)
        self._onboardings = OnboardingRepository(session)
        self._email = email or EmailService()
        self._clock = clock

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_onboarding(self, onboarding_id: str) -> VendorOnboarding:
        onboarding = await self._onboardings.get_by_id(onboarding_id)
        if onboarding is None:
            raise NotFoundError("Vendor onboarding", onboarding_id)
        return onboarding

    async def get_follow_up(self, follow_up_id: str) -> FollowUp:
        follow_up = await self._repo.get_by_id(follow_up_id)
        if follow_up is None:
            raise NotFoundError("Follow-up", follow_up_id)
        return follow_up

    async def list_for_onboarding(self, onboarding_id: str) -> list[FollowUp]:
        await self.get_onboarding(onboarding_id)
        return await self._repo.list_by_onboarding(onboarding_id)

    async def list_all(
        self, status: Optional[str] = None, follow_up_type: Optional[str] = None
    ) -> list[FollowUp]:
        """All follow-ups, newest first. ``None`` or ``"ALL"`` disables a filter."""
        logger.info("Fetching all follow-ups with filters - status: %s, type: %s", status, follow_up_type)
        status_value = None
        type_value = None
        if status and status.upper() != ALL:
            status_value = parse_enum(FollowUpStatus, status, "status").value
        if follow_up_type and follow_up_type.upper() != ALL:
            type_value = parse_enum(FollowUpType, follow_up_type, "follow-up type").value
        return await self._repo.list_filtered(status=status_value, follow_up_type=type_value)

    async def chain_level(self, onboarding_id: str, follow_up_type: FollowUpType | str) -> int:
        """Current escalation level of the (onboarding, type) chain; 0 when empty."""
        level = await self._repo.max_escalation_level(onboarding_id, _type_value(follow_up_type))
        return level or 0

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_manual_follow_up(
        self,
        onboarding_id: str,
        follow_up_type: FollowUpType,
        message: str,
        fields_concerned: Optional[str],
        actor: str,
    ) -> FollowUp:
        onboarding = await self.get_onboarding(onboarding_id)
        follow_up = await self._create(
            onboarding,
            follow_up_type,
            message,
            fields_concerned,
            initiated_by=actor,
            is_automatic=False,
        )
        self._dispatch(follow_up, onboarding)
        logger.info("Manual follow-up created for vendor onboarding: %s", onboarding.id)
        return follow_up

    async def create_automatic_follow_up(
        self,
        onboarding: VendorOnboarding,
        follow_up_type: FollowUpType | str,
        message: str,
        fields_concerned: Optional[str],
        escalation_level: Optional[int] = None,
    ) -> FollowUp:
        follow_up = await self._create(
            onboarding,
            follow_up_type,
            message,
            fields_concerned,
            initiated_by=SYSTEM_ACTOR,
            is_automatic=True,
            escalation_level=escalation_level,
        )
        self._dispatch(follow_up, onboarding)
        logger.info("Automatic follow-up created for vendor onboarding: %s", onboarding.id)
        return follow_up

    async def _create(
        self,
        onboarding: VendorOnboarding,
        follow_up_type: FollowUpType | str,
        message: str,
        fields_concerned: Optional[str],
        *,
        initiated_by: str,
        is_automatic: bool,
        status: FollowUpStatus = FollowUpStatus.SENT,
        escalation_level: Optional[int] = None,
        **extra,
    ) -> FollowUp:
        type_value = _type_value(follow_up_type)
        if escalation_level is None:
            # Stay on the chain's current level so levels never go backwards
            escalation_level = await self.chain_level(onboarding.id, type_value)
        now = self._clock.now()
        return await self._repo.create(
            onboarding=onboarding,
            follow_up_type=type_value,
            message=message,
            fields_concerned=fields_concerned,
            initiated_by=initiated_by,
            is_automatic=is_automatic,
            status=status.value,
            escalation_level=escalation_level,
            sent_at=now if status == FollowUpStatus.SENT else None,
            created_at=now,
            **extra,
        )

    async def create_pending(
        self,
        onboarding: VendorOnboarding,
        follow_up_type: FollowUpType,
        message: str,
        fields_concerned: Optional[str],
        *,
        actor: str,
        escalation_level: int,
        **extra,
    ) -> FollowUp:
        """Draft follow-up awaiting review; nothing is sent until ``send_follow_up``."""
        return await self._create(
            onboarding,
            follow_up_type,
            message,
            fields_concerned,
            initiated_by=actor,
            is_automatic=False,
            status=FollowUpStatus.PENDING,
            escalation_level=escalation_level,
            **extra,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def send_follow_up(self, follow_up_id: str) -> FollowUp:
        """Send a PENDING follow-up, or re-send a SENT one."""
        follow_up = await self.get_follow_up(follow_up_id)
        if follow_up.status == FollowUpStatus.RESOLVED.value:
            raise ConflictError(f"Follow-up '{follow_up_id}' is already resolved")
        follow_up.status = FollowUpStatus.SENT.value
        follow_up.sent_at = self._clock.now()
        await self._session.flush()
        self._dispatch(follow_up, follow_up.onboarding)
        logger.info("Follow-up sent: %s", follow_up_id)
        return follow_up

    async def update_message(self, follow_up_id: str, message: str) -> FollowUp:
        follow_up = await self.get_follow_up(follow_up_id)
        if follow_up.status == FollowUpStatus.RESOLVED.value:
            raise ConflictError(f"Follow-up '{follow_up_id}' is already resolved")
        if follow_up.message != message:
            follow_up.message = message
            follow_up.was_edited = True
            await self._session.flush()
        return follow_up

    async def resolve_follow_up(self, follow_up_id: str) -> FollowUp:
        follow_up = await self.get_follow_up(follow_up_id)
        follow_up.status = FollowUpStatus.RESOLVED.value
        follow_up.resolved_at = self._clock.now()
        await self._session.flush()
        logger.info("Follow-up resolved: %s", follow_up_id)
        return follow_up

    async def mark_read(self, follow_up_id: str) -> FollowUp:
        follow_up = await self.get_follow_up(follow_up_id)
        if follow_up.read_at is None:
            follow_up.read_at = self._clock.now()
            await self._session.flush()
        return follow_up

    async def mark_responded(self, onboarding_id: str) -> int:
        """Stamp responded_at on every unresolved follow-up that has none yet."""
        now = self._clock.now()
        stamped = 0
        for follow_up in await self._repo.list_unresolved(onboarding_id):
            if follow_up.responded_at is None:
                follow_up.responded_at = now
                stamped += 1
        if stamped:
            await self._session.flush()
        return stamped

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, follow_up: FollowUp, onboarding: VendorOnboarding) -> None:
        request = onboarding.vendor_request
        to_email = onboarding.vendor_contact_email
        vendor_name = request.vendor_name
        body = follow_up.message
        type_value = follow_up.follow_up_type
        token = request.invitation_token
        email = self._email

        async def _send() -> None:
            await email.send_follow_up(to_email, vendor_name, body, type_value, token)

        enqueue(self._session, _send, label=f"follow-up:{follow_up.id}")
