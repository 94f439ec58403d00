from __future__ import annotations

import json
from datetime import datetime

import requests
import streamlit as st


st.set_page_config(page_title="Demo Requests Admin", page_icon="📋", layout="wide")

STATUS_OPTIONS = ["pending", "contacted", "completed"]


def _call_api(method: str, path: str, payload: dict | None = None) -> tuple[int, object]:
    base_url = st.session_state.get("api_base_url", "http://localhost:5001")
    url = base_url.rstrip("/") + path
    try:
        response = requests.request(method, url, json=payload, timeout=15)
    except requests.RequestException as exc:
        return 0, {"message": "API unreachable", "error": str(exc)}
    data: object = {}
    try:
        data = response.json()
    except json.JSONDecodeError:
        pass
    return response.status_code, data


def _format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")
    except (TypeError, ValueError):
        return value or ""


def _request_list() -> None:
    st.header("Demo Requests")
    status, data = _call_api("GET", "/api/demo-requests")
    if status != 200:
        st.error(f"Could not load demo requests ({status}). Response: {data or 'No payload'}")
        return
    if not data:
        st.info("No demo requests yet.")
        return

    status_filter = st.multiselect("Show statuses", STATUS_OPTIONS, default=STATUS_OPTIONS)
    for request in data:
        if request.get("status") not in status_filter:
            continue
        title = f"{request['name']} · {request['company']} · {_format_timestamp(request.get('createdAt'))}"
        with st.expander(f"[{request['status']}] {title}"):
            st.markdown(f"**Email:** {request['email']}  \n**Phone:** {request['phone']}")
            st.markdown(request["message"])
            current = request["status"]
            new_status = st.selectbox(
                "Status",
                STATUS_OPTIONS,
                index=STATUS_OPTIONS.index(current) if current in STATUS_OPTIONS else 0,
                key=f"status-{request['id']}",
            )
            if st.button("Update status", key=f"update-{request['id']}", disabled=new_status == current):
                code, body = _call_api("PATCH", f"/api/demo-requests/{request['id']}", {"status": new_status})
                if code == 200:
                    st.success(f"Marked as {body.get('status')}")
                    st.rerun()
                else:
                    st.error(f"Update failed ({code}). Response: {body}")


def _request_form() -> None:
    st.header("Submit a Demo Request")
    with st.form("request-demo"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
        company = st.text_input("Company")
        message = st.text_area("Message", height=120)
        submitted = st.form_submit_button("Request demo")

    if not submitted:
        return

    payload = {"name": name, "email": email, "phone": phone, "company": company, "message": message}
    status, data = _call_api("POST", "/api/request-demo", payload)
    if status != 200:
        st.error(f"Request failed ({status}). Response: {data or 'No payload'}")
        return
    if data.get("error"):
        st.warning(f"{data['message']}: {data['error']}")
    else:
        st.success(data.get("message", "Demo request sent"))


def _sidebar_controls() -> None:
    st.sidebar.title("Settings")
    st.session_state["api_base_url"] = st.sidebar.text_input(
        "API base URL",
        st.session_state.get("api_base_url", "http://localhost:5001"),
    )
    if st.sidebar.button("Refresh"):
        st.rerun()


def main() -> None:
    _sidebar_controls()
    tab_requests, tab_form = st.tabs(["Requests", "New request"])
    with tab_requests:
        _request_list()
    with tab_form:
        _request_form()


if __name__ == "__main__":
    main()
