"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  vendor.py        — vendor request, invitation, activity log and analytics DTOs
  onboarding.py    — onboarding submission (four detail aggregates) and result
  follow_up.py     — follow-ups, validation issues, templates, AI history
  notification.py  — notifications and the unresponsive-vendor scan summary
"""
