"""Card for a single counter: name, points, arithmetic and ordering buttons."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.counters import CounterSynchronizer
from snailpoints.models.counter import Counter
from snailpoints.ui.theme import COLORS


def counter_card(
    counters: CounterSynchronizer,
    counter: Counter,
    first: bool,
    last: bool,
    delete_mode: bool,
) -> None:
    """Render one counter card.

    Move buttons at the ends of the sequence are disabled.
    """
    cid = counter.id
    editing = {"name": counter.is_unnamed, "points": False}

    with ui.card().classes("items-center p-3").style("min-width: 220px"):
        with ui.row().classes("w-full items-center no-wrap justify-between"):
            ui.button("<", on_click=lambda: counters.move(cid, True)).props(
                "flat dense"
            ).set_enabled(not first)

            with ui.column().classes("items-center gap-1"):
                _name_editor(counters, counter, editing)
                _points_editor(counters, counter, editing)

            ui.button(">", on_click=lambda: counters.move(cid, False)).props(
                "flat dense"
            ).set_enabled(not last)

        if delete_mode:
            ui.button("DELETE FOREVER", on_click=lambda: counters.delete(cid)).props(
                "color=negative"
            )
            return

        with ui.row().classes("gap-2"):
            ui.button("👍", on_click=lambda: counters.increment(cid)).props("color=positive")
            ui.button("👎", on_click=lambda: counters.decrement(cid)).props(
                "color=negative"
            ).set_enabled(counters.can_decrement(cid))
        cost = counters.policy.redeem_cost
        ui.button(f"Redeem! (-{cost})", on_click=lambda: counters.redeem(cid)).style(
            f"background: {COLORS.purple} !important"
        ).set_enabled(counters.can_redeem(cid))


def _name_editor(counters: CounterSynchronizer, counter: Counter, editing: dict) -> None:
    @ui.refreshable
    def name() -> None:
        if editing["name"]:
            field = ui.input(value=counter.name, placeholder="Name").props("dense autofocus")

            def submit() -> None:
                if not editing["name"]:
                    return
                editing["name"] = False
                counters.set_name(counter.id, field.value or "")
                name.refresh()

            field.on("keydown.enter", submit)
            field.on("blur", submit)
        else:
            ui.label(counter.name).classes("text-h6 cursor-pointer").on(
                "click", lambda: _start(editing, "name", name)
            )

    name()


def _points_editor(counters: CounterSynchronizer, counter: Counter, editing: dict) -> None:
    @ui.refreshable
    def points() -> None:
        if editing["points"]:
            field = ui.input(value=str(counter.points)).props("dense autofocus")

            def submit() -> None:
                if not editing["points"]:
                    return
                try:
                    value = int(str(field.value).strip())
                except ValueError:
                    value = None
                editing["points"] = False
                if value is not None and value != counter.points:
                    counters.set_points(counter.id, value)
                points.refresh()

            field.on("keydown.enter", submit)
            field.on("blur", submit)
        else:
            ui.label(str(counter.points)).classes("points-value").on(
                "click", lambda: _start(editing, "points", points)
            )

    points()


def _start(editing: dict, field: str, view) -> None:
    editing[field] = True
    view.refresh()
