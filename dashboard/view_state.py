from dataclasses import dataclass, replace
from typing import Any, Mapping

TABS = ("dashboard", "devices", "logs")


@dataclass(frozen=True)
class ViewState:
    """Everything the dashboard remembers between reruns.

    Render functions receive this and hand back a new instance; nothing else
    is kept in module globals.
    """

    tab: str = "dashboard"
    selected_device_id: str | None = None
    show_device_form: bool = False
    show_command_form: bool = False
    device_errors: tuple[tuple[str, str], ...] = ()

    def error_for(self, device_id: str) -> str | None:
        return dict(self.device_errors).get(device_id)


def select_tab(state: ViewState, tab: str) -> ViewState:
    if tab not in TABS:
        raise ValueError(f"unknown tab: {tab}")
    if tab == state.tab:
        return state
    return replace(state, tab=tab, show_device_form=False, show_command_form=False)


def select_device(state: ViewState, device_id: str | None) -> ViewState:
    return replace(state, selected_device_id=device_id, show_command_form=False)


def toggle_device_form(state: ViewState) -> ViewState:
    return replace(state, show_device_form=not state.show_device_form)


def toggle_command_form(state: ViewState) -> ViewState:
    if state.selected_device_id is None:
        return state
    return replace(state, show_command_form=not state.show_command_form)


def _without_error(errors: tuple[tuple[str, str], ...], device_id: str) -> tuple[tuple[str, str], ...]:
    return tuple((key, message) for key, message in errors if key != device_id)


def record_execution(state: ViewState, device_id: str, result: Mapping[str, Any]) -> ViewState:
    errors = _without_error(state.device_errors, device_id)
    message = result.get("error_message") or result.get("persistence_error")
    if not result.get("success") or result.get("persistence_error"):
        errors += ((device_id, message or "Failed to execute command"),)
    return replace(state, device_errors=errors)


def device_removed(state: ViewState, device_id: str) -> ViewState:
    selected = None if state.selected_device_id == device_id else state.selected_device_id
    return replace(
        state,
        selected_device_id=selected,
        show_command_form=state.show_command_form and selected is not None,
        device_errors=_without_error(state.device_errors, device_id),
    )
