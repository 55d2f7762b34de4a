"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — shared dependencies (actor header, services bundle, collaborators)
  v1/      — Versioned API routes (/api/v1/*)
"""
