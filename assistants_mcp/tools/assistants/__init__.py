"""OpenAI Assistants API provider."""
