"""Console output — startup banner and status lines.

Everything human-facing goes to stderr with a two-space indent. Colour is
used only when stderr is a terminal and ``NO_COLOR`` / ``TERM=dumb`` are not
set.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabby._types import TabbyMode
    from tabby.config import TabbyConfig


# ---------------------------------------------------------------------------
# ANSI palette — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


@dataclass(frozen=True, slots=True)
class _Palette:
    reset: str = ""
    bold: str = ""
    dim: str = ""
    red: str = ""
    green: str = ""
    yellow: str = ""
    cyan: str = ""
    orange: str = ""


_ANSI = _Palette(
    reset="\033[0m",
    bold="\033[1m",
    dim="\033[2m",
    red="\033[31m",
    green="\033[32m",
    yellow="\033[33m",
    cyan="\033[36m",
    orange="\033[38;5;214m",
)

_P = _ANSI if _supports_color() else _Palette()

_BADGES: dict[str, str] = {"dev": _P.green, "build": _P.yellow}

_MASCOT = "\u14DA\u1618\u14E2"


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------

def _emit(glyph: str, colour: str, message: str) -> None:
    print(f"  {colour}{glyph}{_P.reset} {message}", file=sys.stderr)


def notice(message: str) -> None:
    """Informational line (recompiles, removals, watch start)."""
    _emit("›", _P.cyan, message)


def warn(message: str) -> None:
    """Something the operator should act on; the watch keeps going."""
    _emit("!", _P.yellow, message)


def error(message: str) -> None:
    _emit("✗", _P.red, message)


def dim(message: str) -> None:
    """Low-priority progress line, e.g. render pass timings."""
    print(f"  {_P.dim}{message}{_P.reset}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------

def _tree(rows: list[str]) -> list[str]:
    """Prefix *rows* with box-drawing branches, the last one closing the tree."""
    return [
        f"  {_P.dim}{'└─' if i == len(rows) - 1 else '├─'}{_P.reset} {row}"
        for i, row in enumerate(rows)
    ]


def print_banner(
    config: TabbyConfig,
    page_count: int,
    mode: TabbyMode,
    *,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the startup banner to stderr.

    Args:
        config: Resolved TabbyConfig.
        page_count: Content files found (dev) or pages parsed (build).
        mode: ``"dev"`` or ``"build"``.
        load_ms: Parse time in milliseconds; omitted when zero.
        warnings: Extra lines shown under the tree.

    """
    from tabby import __version__

    badge = f"{_BADGES.get(mode, _P.dim)}[{mode}]{_P.reset}"
    out = [
        "",
        f"  {_P.orange}{_P.bold}{_MASCOT}{_P.reset}  Tabby {_P.dim}v{__version__}{_P.reset}  {badge}",
        f"  {_P.dim}{'─' * 43}{_P.reset}",
    ]

    noun = "page" if page_count == 1 else "pages"
    timing = f" {_P.dim}in {load_ms:.0f}ms{_P.reset}" if load_ms > 0 else ""
    rows = [
        f"{page_count} {noun} loaded{timing}",
        f"content: {_P.dim}{config.content_path}{_P.reset}",
        f"template: {_P.dim}{config.template_path}{_P.reset}",
    ]
    if mode == "dev":
        waiting = "" if config.bundle_path.is_file() else f" {_P.yellow}(waiting){_P.reset}"
        rows.append(f"bundle: {_P.dim}{config.bundle_path}{_P.reset}{waiting}")
    if not config.drafts:
        rows.append("drafts excluded")
    rows.append(f"output: {_P.dim}{config.output_path}{_P.reset}")
    out.extend(_tree(rows))

    if mode == "dev":
        out += ["", f"  {_P.dim}Watching for changes...{_P.reset}"]
    if warnings:
        out.append("")
        out.extend(f"  {_P.yellow}!{_P.reset} {w}" for w in warnings)
    out.append("")

    print("\n".join(out), file=sys.stderr)
