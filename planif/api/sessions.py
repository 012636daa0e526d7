"""Session creation, status changes and completion."""
from __future__ import annotations

from typing import Any

from flask_restx import Namespace, Resource, fields

from ..progression import complete_session
from ..sessions import SessionDraft, change_status, create_session
from .helpers import current_actor, json_body, parse_date, parse_int, repository, require_text


ns = Namespace("sessions", description="Teaching sessions")

session_input = ns.model(
    "SessionInput",
    {
        "moduleId": fields.Integer(required=True),
        "instructorId": fields.Integer(required=True),
        "date": fields.String(required=True, description="YYYY-MM-DD"),
        "heureDebut": fields.String(required=True, description="HH:MM"),
        "heureFin": fields.String(required=True, description="HH:MM"),
        "category": fields.String(required=True, enum=["CM", "TD", "TP", "EXAM", "MAKEUP"]),
        "room": fields.String,
        "building": fields.String,
        "status": fields.String(default="PLANNED"),
        "notes": fields.String,
    },
)

completion_input = ns.model(
    "SessionCompletion",
    {
        "notes": fields.String,
        "realDuration": fields.Integer(description="Effective duration in minutes"),
    },
)

status_input = ns.model(
    "SessionStatus",
    {"status": fields.String(required=True)},
)


@ns.route("")
class SessionList(Resource):
    @ns.expect(session_input)
    def post(self) -> tuple[dict[str, Any], int]:
        payload = json_body()
        draft = SessionDraft(
            module_id=parse_int(payload.get("moduleId"), "moduleId", required=True),
            instructor_id=parse_int(payload.get("instructorId"), "instructorId", required=True),
            date=parse_date(payload.get("date"), "date", required=True),
            start=require_text(payload, "heureDebut"),
            end=require_text(payload, "heureFin"),
            category=require_text(payload, "category").upper(),
            room=payload.get("room") or None,
            building=payload.get("building") or None,
            status=(payload.get("status") or "PLANNED").upper(),
            notes=payload.get("notes") or None,
        )
        session = create_session(repository(), draft, current_actor())
        return session.as_dict(), 201


@ns.route("/<int:session_id>/complete")
class SessionCompletion(Resource):
    @ns.expect(completion_input)
    def post(self, session_id: int) -> dict[str, Any]:
        payload = json_body()
        result = complete_session(
            repository(),
            session_id,
            current_actor(),
            notes=payload.get("notes") or None,
            real_duration=parse_int(payload.get("realDuration"), "realDuration"),
        )
        return result.as_dict()


@ns.route("/<int:session_id>/status")
class SessionStatus(Resource):
    @ns.expect(status_input)
    def post(self, session_id: int) -> dict[str, Any]:
        payload = json_body()
        status = require_text(payload, "status").upper()
        session = change_status(repository(), session_id, status, current_actor())
        return session.as_dict()
