"""Audible feedback cues for point changes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class Cue(StrEnum):
    LEVEL_UP = "level_up"
    LEVEL_UP_MILESTONE = "level_up_milestone"
    LEVEL_DOWN = "level_down"
    REDEEM = "redeem"


@dataclass(frozen=True)
class CueSpec:
    """How a cue is played.

    Attributes:
        sound: Sound file name under the static ``sounds`` directory.
        start: Offset into the clip, in seconds.
        duration: Seconds to play before pausing, ``None`` plays to the end.
        volume: Playback volume in ``[0, 1]``.
    """
    sound: str
    start: float
    duration: float | None
    volume: float


CUE_SPECS: dict[Cue, CueSpec] = {
    Cue.LEVEL_UP: CueSpec("xp.mp3", start=0.05, duration=0.9, volume=0.7),
    Cue.LEVEL_UP_MILESTONE: CueSpec("xp.mp3", start=0.7, duration=4.0, volume=0.7),
    Cue.LEVEL_DOWN: CueSpec("no.mp3", start=0.15, duration=None, volume=1.0),
    Cue.REDEEM: CueSpec("enchant.mp3", start=0.0, duration=1.2, volume=1.0),
}


def level_up_cue(new_points: int) -> Cue:
    """Pick the increment cue; every tenth point gets the long one."""
    return Cue.LEVEL_UP_MILESTONE if new_points % 10 == 0 else Cue.LEVEL_UP


class FeedbackSink(Protocol):
    def play(self, cue: Cue) -> None: ...


class NullFeedback:
    """Sink that drops every cue."""

    def play(self, cue: Cue) -> None:
        return None


class RecordingFeedback:
    """Sink that keeps cues in order, for headless use and tests."""

    def __init__(self) -> None:
        self.cues: list[Cue] = []

    def play(self, cue: Cue) -> None:
        self.cues.append(cue)
