"""Error kinds raised by the scheduling engine.

Each error carries the HTTP status the API answers with and, for validation
problems, the name of the offending field so the caller can correct its input.
"""
from __future__ import annotations

from typing import Iterable


class SchedulingError(Exception):
    status_code = 400
    default_message = "Requête invalide"

    def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"error": self.message}
        if self.field:
            payload["field"] = self.field
        return payload


class NotFound(SchedulingError):
    status_code = 404
    default_message = "Ressource introuvable"


class Unavailable(SchedulingError):
    default_message = "Intervenant non disponible"


class InvalidTimeFormat(SchedulingError):
    default_message = "Heure invalide, format attendu HH:MM"


class TimeOutOfRange(InvalidTimeFormat):
    default_message = "L'horaire dépasse la fin de journée (24:00)"


class InvalidDuration(SchedulingError):
    default_message = "La durée doit être strictement positive"


class InvalidDateRange(SchedulingError):
    default_message = "La date de fin doit être postérieure à la date de début"


class NothingToPlan(SchedulingError):
    default_message = "Aucune heure à planifier pour ce module"


class AlreadyComplete(SchedulingError):
    default_message = "Cette séance est déjà marquée comme terminée"


class InvalidTransition(SchedulingError):
    status_code = 409
    default_message = "Changement de statut non autorisé"


class Forbidden(SchedulingError):
    status_code = 403
    default_message = "Non autorisé"


class BookingConflict(SchedulingError):
    status_code = 409
    default_message = "Conflit d'horaires détecté"

    def __init__(self, conflicts: Iterable[str], message: str | None = None) -> None:
        self.conflicts = list(conflicts)
        super().__init__(message)

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        payload["conflits"] = list(self.conflicts)
        return payload
