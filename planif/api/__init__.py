"""REST API definition using Flask-RESTX."""
from __future__ import annotations

from flask import Blueprint
from flask_restx import Api

from ..errors import SchedulingError
from .health import ns as health_ns
from .planning import ns as planning_ns
from .sessions import ns as sessions_ns


bp = Blueprint("api", __name__)
api = Api(bp, version="0.1.0", title="Planif API", doc="/docs")


@api.errorhandler(SchedulingError)
def handle_scheduling_error(error: SchedulingError):
    return error.to_payload(), error.status_code


def register_namespaces(target: Api) -> None:
    """Register all API namespaces."""
    target.add_namespace(health_ns, path="/health")
    target.add_namespace(planning_ns, path="/planning")
    target.add_namespace(sessions_ns, path="/sessions")


register_namespaces(api)
