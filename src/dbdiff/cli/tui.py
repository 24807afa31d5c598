"""Terminal UI utilities for picking schemas interactively."""

from __future__ import annotations

import questionary

from dbdiff.cli.common.tui_style import QUESTIONARY_STYLE_SELECT

_MAX_SCHEMA_NAME_WIDTH = 96


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def schema_choices(names: list[str]) -> list[questionary.Choice]:
    """Build one choice per schema name; the value is the untruncated name."""
    return [
        questionary.Choice(title=_truncate(name, _MAX_SCHEMA_NAME_WIDTH), value=name)
        for name in names
    ]


def select_schema(names: list[str], *, source: str) -> str | None:
    """Display a radio prompt to pick one schema of `source`.

    Args:
        names: Schema names (catalog.schema) to choose from.
        source: Source label shown in the question.

    Returns:
        The selected schema name, or None if cancelled.
    """
    if not names:
        return None
    return questionary.select(
        f"Select schema of {source}:",
        choices=schema_choices(names),
        style=QUESTIONARY_STYLE_SELECT,
    ).ask()
