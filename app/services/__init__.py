"""Services package — all business logic lives here, never in routers.

Files:
  factory.py            — builds the per-session service graph (composition root)
  vendor_request.py     — invitations and the status state machine
  onboarding.py         — submission: store, validate, follow up, move the status
  validation.py         — rule evaluator, business-rule pass, issue lifecycle
  follow_up.py          — follow-up lifecycle and dispatch
  ai_follow_up.py       — AI/template message generation and escalation chains
  templates.py          — template lookup, rendering, CRUD and defaults
  message_generator.py  — OpenAI-backed message generator
  notification.py       — in-app notifications (best effort)
  activity_log.py       — append-only activity log (best effort)
  email.py              — SMTP transport for invitations and follow-ups
  dispatch.py           — post-commit fire-and-forget outbox
  monitor.py            — unresponsive-vendor scan and daily scheduler
  analytics.py          — dashboard status counts and 7-day activity

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
