"""LLM providers used by the content layer."""
