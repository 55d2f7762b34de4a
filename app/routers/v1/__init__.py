"""v1 router package — all /api/v1/* endpoints live here.

Files:
  vendors.py        — procurement: vendor requests, activity log, unresponsive-vendor scan
  validation.py     — procurement: validation issues
  follow_ups.py     — procurement: follow-ups, escalation, AI messages
  templates.py      — procurement: follow-up templates
  vendor_portal.py  — vendor: invitation token, onboarding submission
  notifications.py  — in-app notifications for the acting user

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
