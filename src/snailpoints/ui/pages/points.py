"""Points board: the grid of counter cards."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.counters import CounterSynchronizer
from snailpoints.ui.components.counter_card import counter_card
from snailpoints.ui.theme import COLORS


def points_page(counters: CounterSynchronizer) -> None:
    """Render the board and load the counters."""
    state = {"delete_mode": False}

    def toggle_delete() -> None:
        state["delete_mode"] = not state["delete_mode"]
        buttons.refresh()
        grid.refresh()

    @ui.refreshable
    def buttons() -> None:
        with ui.row().classes("gap-2"):
            if state["delete_mode"]:
                ui.button("Cancel", on_click=toggle_delete).props("outline")
            else:
                ui.button("+", on_click=counters.create).props("color=positive")
                ui.button("-", on_click=toggle_delete).props("color=negative outline")

    @ui.refreshable
    def grid() -> None:
        items = counters.counters
        if not items:
            ui.label("No counters yet.").style(f"color: {COLORS.text_muted}")
            return
        with ui.row().classes("w-full justify-center gap-4"):
            for idx, counter in enumerate(items):
                counter_card(
                    counters,
                    counter,
                    first=idx == 0,
                    last=idx == len(items) - 1,
                    delete_mode=state["delete_mode"],
                )

    buttons()
    grid()
    unsubscribe = counters.subscribe(grid.refresh)
    ui.context.client.on_disconnect(unsubscribe)
    ui.timer(0.05, counters.refresh, once=True)
