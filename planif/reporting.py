from __future__ import annotations

import logging
from datetime import date

from flask import current_app, has_app_context

from .timeutils import format_time


class PlanningReporter:
    """Collect the messages of a planning run and forward them to the app logger."""

    MAX_ENTRIES = 120
    LEVELS = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(self, label: str) -> None:
        self.label = label
        self.entries: list[dict[str, str]] = []
        self.status = "success"
        self._dropped = 0

    def set_window(self, start: date, end: date) -> None:
        self.info(f"Fenêtre de planification : {start} → {end}")

    def info(self, message: str) -> None:
        self._add_entry("info", message)

    def warning(self, message: str) -> None:
        self._add_entry("warning", message)
        if self.status != "error":
            self.status = "warning"

    def error(self, message: str) -> None:
        self._add_entry("error", message)
        self.status = "error"

    def session_planned(self, category: str, day: date, start, end) -> None:
        self.info(
            f"Séance {category} planifiée le {day.strftime('%d/%m/%Y')}"
            f" de {format_time(start)} à {format_time(end)}"
        )

    def summary(self, created_count: int) -> str:
        if created_count:
            if self.status == "success":
                return f"{created_count} séance(s) générée(s)"
            return f"{created_count} séance(s) générée(s) avec avertissements"
        if self.status == "success":
            return "Aucune séance générée"
        return "Aucune séance générée, vérifier les avertissements"

    def messages(self) -> list[dict[str, str]]:
        entries = [dict(entry) for entry in self.entries]
        if self._dropped:
            entries.append(
                {"level": "info", "message": f"{self._dropped} message(s) supplémentaire(s) non affiché(s)"}
            )
        return entries

    def _add_entry(self, level: str, message: str) -> None:
        text = message.strip()
        if not text:
            return
        if len(self.entries) < self.MAX_ENTRIES:
            self.entries.append({"level": level, "message": text})
        else:
            self._dropped += 1
        if has_app_context():
            current_app.logger.log(self.LEVELS.get(level, logging.INFO), "[%s] %s", self.label, text)
