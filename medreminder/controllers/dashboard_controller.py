# medreminder/controllers/dashboard_controller.py
"""
Dashboard data: summary counts, the upcoming-doses list and mark-taken.

Lists come from the user's live ``DashboardSession``; the upcoming list is
recomputed from that snapshot on every request and every stream tick.
"""
import json
import queue

from flask import Response, current_app, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from medreminder.errors import NotFoundError, StoreError
from medreminder.helpers import api_response, get_sessions, get_store
from medreminder.messages import message
from medreminder.schedule import (
    dashboard_summary,
    is_valid_time,
    local_now,
    today_string,
    upcoming_slots,
)
from medreminder.services import dose_service, medication_service


def _load_snapshot(user_id, today):
    session = get_sessions().get_or_open(user_id, today)
    if session.wait_ready(current_app.config["SNAPSHOT_WAIT_SECONDS"]):
        return session, session.snapshot()
    # first notification is late; read the collections directly this once
    current_app.logger.warning(f"Snapshot for {user_id} not ready, reading store directly")
    store = get_store()
    return session, (
        medication_service.list_medications(store, user_id),
        dose_service.today_doses(store, user_id, today),
    )


def build_dashboard(medications, doses, now):
    today = today_string(now)
    upcoming = upcoming_slots(medications, doses, today, now)
    return {
        "date": today,
        "summary": dashboard_summary(medications, doses, today),
        "upcoming": [u.to_dict() for u in upcoming],
        "medications": [m.to_dict() for m in sorted(medications, key=lambda m: (m.name.casefold(), m.id))],
    }


@jwt_required()
def get_dashboard():
    user_id = get_jwt_identity()
    now = local_now()
    try:
        _, (medications, doses) = _load_snapshot(user_id, today_string(now))
    except StoreError:
        current_app.logger.exception(f"Error loading dashboard for {user_id}")
        return api_response(False, message("medication/load-failed"), status_code=500)

    payload = build_dashboard(medications, doses, now)
    text = message("dashboard/ok") if payload["upcoming"] else message("dashboard/no-upcoming")
    return api_response(True, text, payload)


@jwt_required()
def mark_dose_taken():
    user_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}
    medication_id = (data.get("medicationId") or "").strip()
    scheduled_time = (data.get("scheduledTime") or "").strip()

    if not medication_id or not scheduled_time:
        return api_response(False, message("dose/fields-required"), status_code=422)
    if not is_valid_time(scheduled_time):
        return api_response(False, message("medication/time-format"), status_code=422)

    today = today_string()
    store = get_store()
    try:
        medication_service.get_medication(store, user_id, medication_id)
        dose_id = dose_service.mark_taken(store, user_id, medication_id, scheduled_time, today)
    except NotFoundError:
        return api_response(False, message("medication/not-found"), status_code=404)
    except StoreError:
        current_app.logger.exception("Error marking dose as taken")
        return api_response(False, message("dose/mark-failed"), status_code=500)

    return api_response(True, message("dose/marked"), {
        "id": dose_id,
        "medicationId": medication_id,
        "scheduledTime": scheduled_time,
        "date": today,
    })


def _sse(payload):
    return f"event: dashboard\ndata: {json.dumps(payload)}\n\n"


@jwt_required()
def stream_dashboard():
    """Server-sent events: the full dashboard now, on every change, and every refresh tick."""
    user_id = get_jwt_identity()
    try:
        session, _ = _load_snapshot(user_id, today_string())
    except StoreError:
        current_app.logger.exception(f"Error opening dashboard stream for {user_id}")
        return api_response(False, message("medication/load-failed"), status_code=500)

    refresh = current_app.config["STREAM_REFRESH_SECONDS"]
    changes = queue.Queue()

    def listener(_session):
        changes.put(True)

    session.add_listener(listener)

    def current_payload():
        now = local_now()
        session.ensure_day(today_string(now))
        medications, doses = session.snapshot()
        return build_dashboard(medications, doses, now)

    def events():
        try:
            yield _sse(current_payload())
            while session.active:
                try:
                    changes.get(timeout=refresh)
                except queue.Empty:
                    pass
                if not session.active:
                    break
                yield _sse(current_payload())
        finally:
            session.remove_listener(listener)

    return Response(events(), mimetype="text/event-stream", headers={
        "Cache-Control": "no-cache",
        "X-Accel-Buffering": "no",
    })
