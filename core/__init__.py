"""Deterministic game-balance and narrative-progression engine (no UI, no LLM)."""

API_VERSION = "core-v1-founder-burnout"
