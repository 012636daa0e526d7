from __future__ import annotations

from flask_restx import Namespace, Resource
from sqlalchemy import text

from .. import db


ns = Namespace("health", description="Service liveness")


@ns.route("")
class Health(Resource):
    def get(self) -> dict[str, str]:
        db.session.execute(text("SELECT 1"))
        return {"status": "ok"}
