"""Resolve agent instructions from inline text and/or a (Jinja2) file."""

from pathlib import Path
from typing import Any, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape


def _render_file(path: Path, template_vars: dict[str, Any] | None) -> str:
    if path.suffix == ".jinja2":
        env = Environment(
            loader=FileSystemLoader(path.parent),
            autoescape=select_autoescape(enabled_extensions=()),
        )
        template = env.get_template(path.name)
        return template.render(**(template_vars or {})).strip()
    return path.read_text(encoding="utf-8").strip()


def resolve_instructions(
    instructions: str = "",
    instructions_file: str = "",
    search_dirs: Sequence[Path] = (),
    template_vars: dict[str, Any] | None = None,
) -> str:
    """Combined instructions from an optional file and optional inline text.

    - instructions_file: path relative to the first of search_dirs that contains it.
      .jinja2 files are rendered with template_vars; other files are read as-is.
    - If both are set, file content comes first, then a blank line, then inline text.

    Returns combined string, stripped. Empty if neither source is provided.
    """
    parts: list[str] = []
    rel_path = (instructions_file or "").strip()
    if rel_path:
        for base in search_dirs:
            path = base / rel_path
            if path.is_file():
                content = _render_file(path, template_vars)
                if content:
                    parts.append(content)
                break
    if instructions and instructions.strip():
        parts.append(instructions.strip())
    return "\n\n".join(parts)
