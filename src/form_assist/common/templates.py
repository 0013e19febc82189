"""Prompt templating helpers."""
from __future__ import annotations
import os
from pathlib import Path

DEFAULT_TEMPLATE = """You are helping a user write a detailed automation workflow description for a contact form. The user has provided this brief idea: "{{input}}"

Generate a professional, detailed description (approximately 200 words) that explains:
1. What automation workflow they want to build
2. Key features and processes involved
3. Expected outcomes and benefits
4. Any technical requirements

Write in first person (use "I" and "we") as if the user is describing their needs. Be specific and professional. Do not use bullet points, write in paragraph form."""

def load_template(path: str | None = None) -> str:
    """
    Load the instruction template.

    Args:
        path: Optional template file. Falls back to $PROMPT_TEMPLATE_PATH,
            then to the built-in template.
    """
    path = path or os.getenv("PROMPT_TEMPLATE_PATH")
    if not path:
        return DEFAULT_TEMPLATE
    return Path(path).read_text(encoding="utf-8")

def render_prompt(template: str, user_input: str) -> str:
    """
    Render user input into the template.

    Args:
        template: Template content containing {{input}}.
        user_input: Input string.

    Returns:
        Rendered prompt.
    """
    return template.replace("{{input}}", user_input)
