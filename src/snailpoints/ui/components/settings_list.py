"""Settings editor shown in the header menu."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.settings import SettingsSynchronizer, digits_only, edit_value
from snailpoints.models.settings import ConfigurationEntry, SettingKind
from snailpoints.ui.theme import COLORS


class SettingsList:
    """One editor per configuration entry.

    Editors are built once; later changes only push values and error text
    into them so typing is never interrupted by a rebuild.
    """

    def __init__(self, settings: SettingsSynchronizer) -> None:
        self._settings = settings
        self._editors: dict[str, ui.element] = {}
        self._errors: dict[str, ui.label] = {}
        self._syncing = False
        self._built_loaded = False

        self._container = ui.column().classes("gap-1")
        self._build()
        unsubscribe = settings.subscribe(self._sync)
        ui.context.client.on_disconnect(unsubscribe)

    def _build(self) -> None:
        self._container.clear()
        self._editors.clear()
        self._errors.clear()
        self._built_loaded = not self._settings.loading
        with self._container:
            if self._settings.loading:
                ui.label("Loading...").style(f"color: {COLORS.text_secondary}")
                return
            for key, entry in self._settings.entries.items():
                self._build_entry(key, entry)

    def _build_entry(self, key: str, entry: ConfigurationEntry) -> None:
        shown = self._settings.display_value(key)
        with ui.row().classes("items-center gap-2 no-wrap"):
            ui.label(f"{entry.formatted}:").style(f"color: {COLORS.text_secondary}")
            if entry.kind is SettingKind.BOOL:
                editor = ui.checkbox(value=bool(shown), on_change=lambda e, k=key: self._edit(k, e))
            elif entry.kind is SettingKind.INT:
                editor = ui.input(value=str(shown), on_change=lambda e, k=key: self._edit(k, e))
                editor.props("dense").classes("w-20")
            else:
                editor = ui.input(value=str(shown), on_change=lambda e, k=key: self._edit(k, e))
                editor.props("dense")
        self._editors[key] = editor
        label = ui.label("").style(f"color: {COLORS.red}; font-size: 0.8rem;")
        label.set_visibility(False)
        self._errors[key] = label

    def _edit(self, key: str, event) -> None:
        if self._syncing:
            return
        entry = self._settings.get(key)
        raw = event.value
        if entry.kind is SettingKind.INT:
            cleaned = digits_only(str(raw or ""))
            if cleaned != str(raw or ""):
                self._push(key, cleaned)
            raw = cleaned
        self._settings.update(key, edit_value(entry, raw))

    def _push(self, key: str, value) -> None:
        self._syncing = True
        try:
            self._editors[key].set_value(value)
        finally:
            self._syncing = False

    def _sync(self) -> None:
        if self._built_loaded == self._settings.loading:
            self._build()
            return
        for key, editor in self._editors.items():
            shown = self._settings.display_value(key)
            entry = self._settings.get(key)
            target = bool(shown) if entry.kind is SettingKind.BOOL else str(shown)
            if editor.value != target and key not in self._settings.pending:
                self._push(key, target)
            error = self._settings.error_for(key)
            self._errors[key].set_text(error or "")
            self._errors[key].set_visibility(bool(error))
