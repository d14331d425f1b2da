"""Content layer: scoring, prompts, model output parsing and heuristic fallbacks."""
