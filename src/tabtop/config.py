"""Theme configuration for tabtop.

The theme is built once at startup and handed to the renderer. Values come
from the defaults below, optionally overridden by the ``[theme]`` table of
a TOML file (``--config PATH`` or ~/.config/tabtop/config.toml).
"""

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from tabtop.formatting import BAR_EMPTY, BAR_FILL

Column = tuple[str, int]

DEFAULT_PATH = Path.home() / ".config" / "tabtop" / "config.toml"


class ConfigError(Exception):
    """A config file that cannot be read or does not describe a valid theme."""


@dataclass(frozen=True)
class Theme:
    """Tab labels, colors, bar glyphs, spacing and table columns."""

    tab_labels: tuple[str, ...] = ("CPU", "Memory", "Disks", "Networks", "General Info")
    accent_color: str = "#7D56F4"
    inactive_color: str = "#874BFD"
    content_color: str = "#DEFCF9"
    bar_color: str = "#00ADB5"
    selected_color: str = "#00ADB5"
    bar_fill: str = BAR_FILL
    bar_empty: str = BAR_EMPTY
    tab_padding: int = 1
    cpu_columns: tuple[Column, ...] = (
        ("Thread ID", 20),
        ("Usage (%)", 20),
        ("Time (ms)", 50),
    )
    network_columns: tuple[Column, ...] = (
        ("Interface", 10),
        ("State", 10),
        ("Speed", 10),
        ("RxBytes", 15),
        ("TxBytes", 15),
        ("RxErrors", 10),
        ("TxErrors", 10),
    )


def _parse_columns(key: str, value: Any) -> tuple[Column, ...]:
    """Parse ``[["Title", width], ...]`` into column tuples."""
    try:
        return tuple((str(title), int(width)) for title, width in value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: expected a list of [title, width] pairs") from e


def _parse_labels(value: Any) -> tuple[str, ...]:
    """Parse the tab label list; one non-empty label per tab."""
    expected = len(Theme.tab_labels)
    if (
        not isinstance(value, list)
        or len(value) != expected
        or not all(isinstance(label, str) and label for label in value)
    ):
        raise ConfigError(f"tab_labels must be a list of {expected} non-empty strings")
    return tuple(value)


def theme_from_dict(overrides: dict[str, Any]) -> Theme:
    """Build a Theme from the defaults and a ``[theme]`` mapping."""
    known = {f.name for f in fields(Theme)}
    unknown = set(overrides) - known
    if unknown:
        raise ConfigError(f"unknown theme keys: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for key, value in overrides.items():
        if key.endswith("_columns"):
            values[key] = _parse_columns(key, value)
        elif key == "tab_labels":
            values[key] = _parse_labels(value)
        elif key in ("bar_fill", "bar_empty"):
            if not isinstance(value, str) or len(value) != 1:
                raise ConfigError(f"{key} must be a single character")
            values[key] = value
        elif key == "tab_padding":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError("tab_padding must be a non-negative integer")
            values[key] = value
        else:
            values[key] = str(value)
    return replace(Theme(), **values)


def load_theme(path: Path | None = None) -> Theme:
    """Load the theme, merging user TOML over defaults.

    Args:
        path: Explicit config file path (from --config). If None, tries the
              default location ~/.config/tabtop/config.toml.

    Raises:
        ConfigError: If an explicit path doesn't exist, or any file is invalid.
    """
    if path is None:
        if not DEFAULT_PATH.is_file():
            return Theme()
        path = DEFAULT_PATH
    elif not path.is_file():
        raise ConfigError(f"config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"invalid config {path}: {e}") from e

    theme = data.get("theme", {})
    if not isinstance(theme, dict):
        raise ConfigError(f"[theme] in {path} must be a table")
    return theme_from_dict(theme)


def dump_default_config() -> str:
    """Return the default theme as a TOML string."""
    theme = Theme()
    lines = [
        "# tabtop configuration",
        f"# Place this file at {DEFAULT_PATH}",
        "",
        "[theme]",
    ]
    for f in fields(Theme):
        value = getattr(theme, f.name)
        if f.name == "tab_labels":
            labels = ", ".join(f'"{label}"' for label in value)
            lines.append(f"{f.name} = [{labels}]")
        elif isinstance(value, tuple):
            pairs = ", ".join(f'["{title}", {width}]' for title, width in value)
            lines.append(f"{f.name} = [{pairs}]")
        elif isinstance(value, int):
            lines.append(f"{f.name} = {value}")
        else:
            lines.append(f'{f.name} = "{value}"')
    return "\n".join(lines) + "\n"
