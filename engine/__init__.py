"""Round pipeline, config, logging and clients (UI-agnostic)."""
