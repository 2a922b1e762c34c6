"""Theme colours and CSS for the web dashboard."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class _Colors:
    bg_primary: str = "#1b1f24"
    bg_secondary: str = "#242a31"
    border: str = "#39424c"
    text_primary: str = "#eef1f4"
    text_secondary: str = "#a3adb8"
    text_muted: str = "#5d6873"
    green: str = "#4caf50"
    red: str = "#e5534b"
    gold: str = "#e3b341"
    purple: str = "#a371f7"


COLORS = _Colors()

GLOBAL_CSS = """
body {
    background-color: #1b1f24 !important;
    color: #eef1f4 !important;
}
.q-card {
    background-color: #242a31 !important;
    border: 1px solid #39424c !important;
}
.q-header {
    background-color: #242a31 !important;
    border-bottom: 1px solid #39424c !important;
}
.q-btn {
    text-transform: none !important;
}
.points-value {
    font-size: 2.5rem;
    font-weight: 700;
    cursor: pointer;
}
"""
