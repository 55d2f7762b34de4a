"""Follow-up lifecycle, AI generation fallback and escalation chains."""

import pytest
from sqlalchemy import select

from app.core.exceptions import ConflictError, NotFoundError, ValidationInputError
from app.domain.enums import FollowUpStatus, FollowUpType
from app.domain.follow_up import AIMessageHistory
from app.services.dispatch import pending_messages
from app.services.factory import build_services


@pytest.fixture
async def onboarding(services, submitted_onboarding):
    await services.templates.seed_defaults()
    return await submitted_onboarding()


class TestManualFollowUps:
    async def test_created_sent_and_queued(self, services, session, onboarding, clock):
        follow_up = await services.follow_ups.create_manual_follow_up(
            onboarding.id, FollowUpType.CLARIFICATION_NEEDED, "Please confirm your IBAN", "iban", "buyer1"
        )

        assert follow_up.status == FollowUpStatus.SENT.value
        assert follow_up.sent_at == clock.now()
        assert follow_up.escalation_level == 0
        assert follow_up.initiated_by == "buyer1"
        assert not follow_up.is_automatic
        assert f"follow-up:{follow_up.id}" in pending_messages(session)

    async def test_unknown_onboarding(self, services):
        with pytest.raises(NotFoundError):
            await services.follow_ups.create_manual_follow_up(
                "missing", FollowUpType.MANUAL, "hello", None, "buyer1"
            )

    async def test_edit_and_resolve(self, services, onboarding):
        follow_up = await services.follow_ups.create_manual_follow_up(
            onboarding.id, FollowUpType.MANUAL, "first draft", None, "buyer1"
        )
        edited = await services.follow_ups.update_message(follow_up.id, "second draft")
        assert edited.was_edited and edited.message == "second draft"

        resolved = await services.follow_ups.resolve_follow_up(follow_up.id)
        assert resolved.status == FollowUpStatus.RESOLVED.value

        with pytest.raises(ConflictError):
            await services.follow_ups.send_follow_up(follow_up.id)

    async def test_resolve_unknown_follow_up(self, services):
        with pytest.raises(NotFoundError):
            await services.follow_ups.resolve_follow_up("missing")

    async def test_mark_read_keeps_first_timestamp(self, services, onboarding, clock):
        follow_up = await services.follow_ups.create_manual_follow_up(
            onboarding.id, FollowUpType.MANUAL, "hello", None, "buyer1"
        )
        first = (await services.follow_ups.mark_read(follow_up.id)).read_at
        clock.advance(hours=2)
        assert (await services.follow_ups.mark_read(follow_up.id)).read_at == first

    async def test_list_all_filters(self, services, onboarding):
        a = await services.follow_ups.create_manual_follow_up(
            onboarding.id, FollowUpType.MANUAL, "a", None, "buyer1"
        )
        await services.follow_ups.create_manual_follow_up(
            onboarding.id, FollowUpType.CLARIFICATION_NEEDED, "b", None, "buyer1"
        )
        await services.follow_ups.resolve_follow_up(a.id)

        assert len(await services.follow_ups.list_all("ALL", "ALL")) == 2
        assert [f.id for f in await services.follow_ups.list_all("resolved", None)] == [a.id]
        assert len(await services.follow_ups.list_all(None, "CLARIFICATION_NEEDED")) == 1
        with pytest.raises(ValidationInputError):
            await services.follow_ups.list_all("LOST", None)


class TestMessageGeneration:
    async def test_generator_output_is_used(self, services, session, onboarding, generator):
        generated = await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA, 0)

        assert generated.ai_generated
        assert generated.message == generator.text
        assert generated.model == "fake-model"
        assert generated.tokens_used == 42
        assert "Name: Acme Ltd" in generator.calls[0][1]
        history = await session.get(AIMessageHistory, generated.history_id)
        assert history.ai_generated and history.follow_up_id is None

    async def test_generator_failure_falls_back_to_template(self, services, session, onboarding, generator):
        generator.fail = True

        generated = await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA, 0)

        assert not generated.ai_generated
        assert generated.message.startswith("Dear Jane Doe,")
        history = await session.get(AIMessageHistory, generated.history_id)
        assert history is not None and not history.ai_generated

    async def test_no_generator_renders_template(self, session, email, clock, onboarding):
        services = build_services(session, email=email, generator=None, clock=clock)
        generated = await services.ai.generate_message(onboarding.id, FollowUpType.DELAYED_RESPONSE, 0)
        assert not generated.ai_generated
        assert "have not received a response yet" in generated.message

    async def test_subject_is_rendered(self, services, onboarding):
        generated = await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA, 0)
        assert generated.subject == "Action needed: missing onboarding information for Acme Ltd"


class TestEscalation:
    async def test_ai_follow_up_is_pending_and_linked(self, services, session, onboarding):
        follow_up = await services.ai.create_ai_follow_up(
            onboarding.id, FollowUpType.MISSING_DATA, None, "buyer1"
        )

        assert follow_up.status == FollowUpStatus.PENDING.value
        assert follow_up.sent_at is None
        assert follow_up.ai_generated
        assert follow_up.ai_prompt_version == "1"
        assert f"follow-up:{follow_up.id}" not in pending_messages(session)
        rows = (await session.execute(
            select(AIMessageHistory).where(AIMessageHistory.follow_up_id == follow_up.id)
        )).scalars().all()
        assert len(rows) == 1

    async def test_escalate_opens_next_level(self, services, onboarding, clock):
        first = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 0, "buyer1")

        second = await services.ai.escalate_follow_up(first.id, "buyer1")

        assert second.escalation_level == 1
        assert second.follow_up_type == FollowUpType.MISSING_DATA.value
        assert first.escalated_to == second.id
        assert first.escalated_at == clock.now()

    async def test_levels_never_go_backwards(self, services, onboarding):
        first = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 0, "buyer1")
        await services.ai.escalate_follow_up(first.id, "buyer1")

        # Escalating the level-0 follow-up again continues above the chain's top
        third = await services.ai.escalate_follow_up(first.id, "buyer1")
        assert third.escalation_level == 2

        with pytest.raises(ValidationInputError):
            await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 1, "buyer1")

        continued = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, None, "buyer1")
        assert continued.escalation_level == 2

    async def test_chains_are_per_type(self, services, onboarding):
        await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 2, "buyer1")
        other = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.INCORRECT_DATA, None, "buyer1")
        assert other.escalation_level == 0

    async def test_automatic_follow_up_stays_on_chain_level(self, services, onboarding):
        await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 1, "buyer1")
        automatic = await services.follow_ups.create_automatic_follow_up(
            onboarding, FollowUpType.MISSING_DATA, "still missing", None
        )
        assert automatic.escalation_level == 1

    async def test_resolved_follow_up_cannot_escalate(self, services, onboarding):
        follow_up = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 0, "buyer1")
        await services.follow_ups.resolve_follow_up(follow_up.id)
        with pytest.raises(ConflictError):
            await services.ai.escalate_follow_up(follow_up.id, "buyer1")


class TestHistoryFeedback:
    async def test_edit_updates_follow_up(self, services, onboarding):
        follow_up = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 0, "buyer1")
        [history] = await services.ai.history_for_follow_up(follow_up.id)

        await services.ai.mark_message_edited(history.id, "Hand-written text")

        assert history.was_edited
        assert follow_up.message == "Hand-written text"
        assert follow_up.was_edited

    @pytest.mark.parametrize("rating", [0, 6])
    async def test_rating_out_of_range(self, services, onboarding, rating):
        generated = await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA)
        with pytest.raises(ValidationInputError):
            await services.ai.rate_message(generated.history_id, rating)

    async def test_rating_is_mirrored(self, services, onboarding):
        follow_up = await services.ai.create_ai_follow_up(onboarding.id, FollowUpType.MISSING_DATA, 0, "buyer1")
        [history] = await services.ai.history_for_follow_up(follow_up.id)
        await services.ai.rate_message(history.id, 4, "good tone")
        assert follow_up.rating == 4

    async def test_usage_stats(self, services, onboarding, generator):
        first = await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA)
        generator.fail = True
        await services.ai.generate_message(onboarding.id, FollowUpType.MISSING_DATA)
        await services.ai.mark_message_edited(first.history_id, "edited")
        await services.ai.rate_message(first.history_id, 5)

        stats = await services.ai.usage_stats()

        assert stats.total_messages_generated == 2
        assert stats.ai_generated_count == 1
        assert stats.average_tokens_used == 42
        assert stats.edited_messages_count == 1
        assert stats.average_rating == 5
        assert stats.edit_rate == 50
