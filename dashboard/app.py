import os
from typing import Any

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

from view_state import (
    ViewState,
    device_removed,
    record_execution,
    select_device,
    select_tab,
    toggle_command_form,
    toggle_device_form,
)

DEFAULT_BACKEND_URL = os.getenv("BACKEND_API_URL", "http://localhost:8000/api")
DEFAULT_USER_ID = os.getenv("DASHBOARD_USER_ID", "")
ACTOR_HEADER = os.getenv("ACTOR_HEADER", "X-User-Id")
REQUEST_TIMEOUT = 15

TAB_LABELS = {"dashboard": "Dashboard", "devices": "Devices", "logs": "Logs"}


st.set_page_config(page_title="Device Control", layout="wide")


def api_request(
    method: str, base_url: str, user_id: str, path: str, payload: dict[str, Any] | None = None
) -> tuple[Any, str | None]:
    try:
        response = requests.request(
            method,
            f"{base_url}{path}",
            json=payload,
            headers={ACTOR_HEADER: user_id},
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = None
            return None, str(detail or f"HTTP {response.status_code}")
        if response.content:
            return response.json(), None
        return {}, None
    except requests.RequestException as exc:
        return None, str(exc)


def api_get(base_url: str, user_id: str, path: str) -> tuple[Any, str | None]:
    return api_request("GET", base_url, user_id, path)


def api_post(base_url: str, user_id: str, path: str, payload: dict[str, Any] | None = None) -> tuple[Any, str | None]:
    return api_request("POST", base_url, user_id, path, payload or {})


def api_delete(base_url: str, user_id: str, path: str) -> tuple[Any, str | None]:
    return api_request("DELETE", base_url, user_id, path)


def render_overview(state: ViewState, base_url: str, user_id: str) -> ViewState:
    devices, error = api_get(base_url, user_id, "/devices")
    if error:
        st.error(f"Devices unavailable: {error}")
        return state
    if not devices:
        st.info("No devices registered yet. Add one in the Devices tab.")
        return state

    columns = st.columns(3)
    for index, device in enumerate(devices):
        with columns[index % 3].container(border=True):
            badge = "Active" if device["status"] else "Inactive"
            st.markdown(f"**{device['name']}** - {badge}")
            st.caption(f"Pin {device['pin']} - {device['type']} - `{device['ref_id']}`")
            if device["description"]:
                st.write(device["description"])

            device_error = state.error_for(device["id"])
            if device_error:
                st.error(device_error)

            commands, commands_error = api_get(base_url, user_id, f"/devices/{device['id']}/commands")
            if commands_error:
                st.warning(commands_error)
                continue
            if not commands:
                st.caption("No commands configured")
            for command in commands:
                if st.button(f"{command['label']} ({command['ref_id']})", key=f"exec-{command['id']}"):
                    path = f"/devices/{device['id']}/commands/{command['id']}/execute"
                    result, exec_error = api_post(base_url, user_id, path)
                    if exec_error:
                        result = {"success": False, "error_message": exec_error}
                    state = record_execution(state, device["id"], result)
                    st.session_state["view"] = state
                    st.rerun()
    return state


def render_device_manager(state: ViewState, base_url: str, user_id: str) -> ViewState:
    devices, error = api_get(base_url, user_id, "/devices")
    if error:
        st.error(f"Devices unavailable: {error}")
        return state

    left, right = st.columns(2)
    with left:
        st.subheader("Devices")
        if st.button("Cancel" if state.show_device_form else "New device"):
            state = toggle_device_form(state)
        if state.show_device_form:
            with st.form("device-form", clear_on_submit=True):
                name = st.text_input("Name", placeholder="Living room LED")
                pin = st.number_input("Pin", min_value=0, max_value=255, step=1)
                device_type = st.selectbox("Type", ["output", "sensor", "servo", "pwm"])
                ref_id = st.text_input("Ref ID (unique)", placeholder="DEV_LED_01")
                description = st.text_area("Description")
                if st.form_submit_button("Save device"):
                    payload = {
                        "name": name,
                        "pin": int(pin),
                        "type": device_type,
                        "ref_id": ref_id,
                        "description": description,
                    }
                    _, save_error = api_post(base_url, user_id, "/devices", payload)
                    if save_error:
                        st.error(save_error)
                    else:
                        state = toggle_device_form(state)

        for device in devices:
            row_left, row_right = st.columns([4, 1])
            label = f"{device['name']} - pin {device['pin']} - {device['ref_id']}"
            if row_left.button(label, key=f"select-{device['id']}", use_container_width=True):
                state = select_device(state, device["id"])
            if row_right.button("Delete", key=f"delete-{device['id']}"):
                _, delete_error = api_delete(base_url, user_id, f"/devices/{device['id']}")
                if delete_error:
                    st.error(delete_error)
                else:
                    state = device_removed(state, device["id"])

    with right:
        st.subheader("Commands")
        if state.selected_device_id is None:
            st.info("Select a device to manage its commands")
            return state

        base_path = f"/devices/{state.selected_device_id}/commands"
        if st.button("Cancel" if state.show_command_form else "New command"):
            state = toggle_command_form(state)
        if state.show_command_form:
            with st.form("command-form", clear_on_submit=True):
                label = st.text_input("Label", placeholder="Turn LED on")
                ref_id = st.text_input("Ref ID (unique)", placeholder="CMD_ON_01")
                action = st.selectbox("Action", ["HIGH", "LOW", "ANALOG", "PWM"])
                value = st.number_input("Value", min_value=0, max_value=255, step=1)
                if st.form_submit_button("Save command"):
                    payload = {"label": label, "ref_id": ref_id, "action": action, "value": int(value)}
                    _, save_error = api_post(base_url, user_id, base_path, payload)
                    if save_error:
                        st.error(save_error)
                    else:
                        state = toggle_command_form(state)

        commands, commands_error = api_get(base_url, user_id, base_path)
        if commands_error:
            st.warning(commands_error)
            return state
        if not commands:
            st.caption("No commands configured")
        for command in commands:
            row_left, row_right = st.columns([4, 1])
            suffix = f" ({command['value']})" if command["value"] > 0 else ""
            row_left.write(f"**{command['label']}** - {command['ref_id']} - {command['action']}{suffix}")
            if row_right.button("Delete", key=f"delete-cmd-{command['id']}"):
                _, delete_error = api_delete(base_url, user_id, f"{base_path}/{command['id']}")
                if delete_error:
                    st.error(delete_error)
    return state


def render_logs(state: ViewState, base_url: str, user_id: str) -> ViewState:
    payload, error = api_get(base_url, user_id, "/logs?limit=50")
    if error:
        st.warning(f"Logs unavailable: {error}")
        return state

    items = payload.get("items", [])
    if not items:
        st.info("No executions recorded yet")
        return state

    df = pd.DataFrame(
        [
            {
                "timestamp": item["timestamp"],
                "result": "success" if item["success"] else "failure",
                "device": item["device"]["name"] if item["device"] else "(deleted)",
                "command": item["command"]["label"] if item["command"] else "(deleted)",
                "error": item["error_message"],
            }
            for item in items
        ]
    )
    df["timestamp"] = pd.to_datetime(df["timestamp"])

    per_hour = (
        df.assign(hour=df["timestamp"].dt.floor("h"))
        .groupby(["hour", "result"])
        .size()
        .reset_index(name="executions")
    )
    fig = px.bar(per_hour, x="hour", y="executions", color="result", title="Executions per hour")
    st.plotly_chart(fig, use_container_width=True)
    st.dataframe(df, use_container_width=True, hide_index=True)
    return state


st.title("Device Control")
st.caption("Microcontroller devices, their commands, and the execution audit trail")

with st.sidebar:
    st.header("Settings")
    backend_url = st.text_input("Backend API URL", value=DEFAULT_BACKEND_URL)
    user_id = st.text_input("User ID", value=DEFAULT_USER_ID)

if not user_id:
    st.warning("Enter a user id in the sidebar to continue.")
    st.stop()

view = st.session_state.get("view", ViewState())

selected_tab = st.radio(
    "View",
    list(TAB_LABELS),
    index=list(TAB_LABELS).index(view.tab),
    format_func=TAB_LABELS.get,
    horizontal=True,
    label_visibility="collapsed",
)
view = select_tab(view, selected_tab)

if view.tab == "dashboard":
    view = render_overview(view, backend_url, user_id)
elif view.tab == "devices":
    view = render_device_manager(view, backend_url, user_id)
else:
    view = render_logs(view, backend_url, user_id)

st.session_state["view"] = view
