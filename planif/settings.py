from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from flask import current_app, has_app_context

from .workdays import DEFAULT_WORKING_WEEKDAYS


@dataclass(frozen=True)
class SchedulingSettings:
    working_weekdays: tuple[int, ...] = DEFAULT_WORKING_WEEKDAYS
    default_session_minutes: int = 120
    max_session_minutes: int = 240
    suggestion_window_days: int = 30
    planning_window_days: int = 90
    suggestion_limit: int = 10

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "SchedulingSettings":
        defaults = cls()
        return cls(
            working_weekdays=tuple(config.get("WORKING_WEEKDAYS", defaults.working_weekdays)),
            default_session_minutes=int(
                config.get("DEFAULT_SESSION_MINUTES", defaults.default_session_minutes)
            ),
            max_session_minutes=int(config.get("MAX_SESSION_MINUTES", defaults.max_session_minutes)),
            suggestion_window_days=int(
                config.get("SUGGESTION_WINDOW_DAYS", defaults.suggestion_window_days)
            ),
            planning_window_days=int(config.get("PLANNING_WINDOW_DAYS", defaults.planning_window_days)),
            suggestion_limit=int(config.get("SUGGESTION_LIMIT", defaults.suggestion_limit)),
        )


def current_settings() -> SchedulingSettings:
    if has_app_context():
        return SchedulingSettings.from_config(current_app.config)
    return SchedulingSettings()
