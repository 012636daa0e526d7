from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from flask import request

from .. import db
from ..actors import ROLES, Actor, INSTRUCTOR
from ..errors import SchedulingError
from ..repository import SqlAlchemyRepository


DATE_FORMAT = "%Y-%m-%d"


def current_actor() -> Actor:
    """Identity forwarded by the authentication gateway."""

    role = (request.headers.get("X-User-Role") or INSTRUCTOR).strip().upper()
    if role not in ROLES:
        raise SchedulingError(f"Rôle inconnu : {role}", field="X-User-Role")
    return Actor(
        user_id=request.headers.get("X-User-Id") or None,
        role=role,
        email=request.headers.get("X-User-Email") or None,
    )


def repository() -> SqlAlchemyRepository:
    return SqlAlchemyRepository(db.session)


def parse_date(value: Any, field: str, *, required: bool = False) -> date | None:
    if value in (None, ""):
        if required:
            raise SchedulingError(f"Le champ {field} est requis", field=field)
        return None
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise SchedulingError(f"Date invalide pour {field} (format AAAA-MM-JJ)", field=field) from None


def parse_int(value: Any, field: str, *, required: bool = False) -> int | None:
    if value in (None, ""):
        if required:
            raise SchedulingError(f"Le champ {field} est requis", field=field)
        return None
    if isinstance(value, bool):
        raise SchedulingError(f"Entier attendu pour {field}", field=field)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SchedulingError(f"Entier attendu pour {field}", field=field) from None


def require_text(payload: Mapping[str, Any], field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise SchedulingError(f"Le champ {field} est requis", field=field)
    return value.strip()


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise SchedulingError("Corps JSON invalide")
    return payload
