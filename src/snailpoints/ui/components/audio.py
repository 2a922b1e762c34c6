"""Browser audio playback for point-change cues."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.feedback import CUE_SPECS, Cue

SOUNDS_URL = "/static/sounds"


class AudioFeedback:
    """FeedbackSink that plays cues through hidden ``ui.audio`` elements.

    Must be constructed inside a page so the elements attach to it.
    """

    def __init__(self) -> None:
        self._players: dict[str, ui.audio] = {}
        for spec in CUE_SPECS.values():
            if spec.sound not in self._players:
                player = ui.audio(f"{SOUNDS_URL}/{spec.sound}", controls=False)
                player.set_visibility(False)
                self._players[spec.sound] = player

    def play(self, cue: Cue) -> None:
        spec = CUE_SPECS[cue]
        player = self._players[spec.sound]
        player.pause()
        ui.run_javascript(f"getHtmlElement({player.id}).volume = {spec.volume}")
        player.seek(spec.start)
        player.play()
        if spec.duration is not None:
            ui.timer(spec.duration, player.pause, once=True)
