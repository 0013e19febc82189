"""
form-assist package.

Provides:
- Generation proxy (FastAPI) forwarding short prompts to the Anthropic Messages API
- Client controller driving the "AI magic button" around a form text field
"""
