"""Slot suggestions and automatic planning of a module."""
from __future__ import annotations

from typing import Any

from flask import request
from flask_restx import Namespace, Resource, fields

from ..advisor import SuggestionQuery, suggest_slots
from ..errors import SchedulingError
from ..planner import PlanRequest, plan_module
from .helpers import current_actor, json_body, parse_date, parse_int, repository


ns = Namespace("planning", description="Suggest free slots and generate module plans")

suggestion_model = ns.model(
    "Suggestion",
    {
        "date": fields.String(description="YYYY-MM-DD"),
        "weekday": fields.String,
        "start": fields.String(description="HH:MM"),
        "end": fields.String(description="HH:MM"),
        "duration": fields.Integer(description="Minutes"),
        "period": fields.String(enum=["morning", "afternoon"]),
        "disponibilite": fields.String(default="LIBRE"),
        "score": fields.Integer(min=0, max=100),
        "recommendation": fields.String,
    },
)

preferences_model = ns.model(
    "PlanningPreferences",
    {
        "sessionDuration": fields.Integer(description="Minutes, 120 by default"),
        "room": fields.String,
        "strategy": fields.String(default="sequential"),
    },
)

generate_model = ns.model(
    "PlanGeneration",
    {
        "moduleId": fields.Integer(required=True),
        "instructorId": fields.Integer(required=True),
        "startDate": fields.String(required=True, description="YYYY-MM-DD"),
        "endDate": fields.String(description="YYYY-MM-DD, start + 90 days by default"),
        "preferences": fields.Nested(preferences_model),
        "dryRun": fields.Boolean(default=False),
    },
)


@ns.route("/suggestions")
class SuggestionList(Resource):
    @ns.doc(
        params={
            "moduleId": "Module identifier",
            "instructorId": "Instructor identifier",
            "category": "CM, TD, TP, EXAM or MAKEUP",
            "duration": "Minutes",
            "startDate": "YYYY-MM-DD",
            "endDate": "YYYY-MM-DD",
            "room": "Room name",
            "limit": "Maximum number of suggestions",
        }
    )
    def get(self) -> dict[str, Any]:
        args = request.args
        query = SuggestionQuery(
            module_id=parse_int(args.get("moduleId"), "moduleId", required=True),
            instructor_id=parse_int(args.get("instructorId"), "instructorId", required=True),
            category=(args.get("category") or "CM").upper(),
            duration=parse_int(args.get("duration"), "duration"),
            start_date=parse_date(args.get("startDate"), "startDate"),
            end_date=parse_date(args.get("endDate"), "endDate"),
            room=args.get("room") or None,
            limit=parse_int(args.get("limit"), "limit"),
        )
        result = suggest_slots(repository(), query, current_actor())
        return result.as_dict()


@ns.route("/generate")
class PlanGeneration(Resource):
    @ns.expect(generate_model)
    def post(self) -> dict[str, Any]:
        payload = json_body()
        preferences = payload.get("preferences") or {}
        if not isinstance(preferences, dict):
            raise SchedulingError("Préférences invalides", field="preferences")
        plan_request = PlanRequest(
            module_id=parse_int(payload.get("moduleId"), "moduleId", required=True),
            instructor_id=parse_int(payload.get("instructorId"), "instructorId", required=True),
            start_date=parse_date(payload.get("startDate"), "startDate", required=True),
            end_date=parse_date(payload.get("endDate"), "endDate"),
            session_duration=parse_int(preferences.get("sessionDuration"), "sessionDuration"),
            room=preferences.get("room") or None,
            strategy=preferences.get("strategy") or "sequential",
            dry_run=bool(payload.get("dryRun", False)),
        )
        outcome = plan_module(repository(), plan_request, current_actor())
        return outcome.as_dict()
