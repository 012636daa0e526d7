from datetime import date, time, timedelta

from . import db
from .models import (
    COMPLETE,
    IN_PROGRESS,
    PLANNED,
    AcademicPeriod,
    Instructor,
    Module,
    Program,
    Room,
    Session,
)


def seed_data() -> bool:
    if Instructor.query.count():
        return False

    today = date.today()
    year_start = date(today.year if today.month >= 9 else today.year - 1, 10, 1)

    period = AcademicPeriod(
        name=f"Année {year_start.year}-{year_start.year + 1}",
        year=f"{year_start.year}-{year_start.year + 1}",
        winter_break_start=date(year_start.year, 12, 20),
        winter_break_end=date(year_start.year + 1, 1, 5),
        spring_break_start=date(year_start.year + 1, 4, 15),
        spring_break_end=date(year_start.year + 1, 4, 25),
    )
    db.session.add(period)
    db.session.flush()
    period.activate()

    diop = Instructor(
        civility="Pr",
        first_name="Amadou",
        last_name="Diop",
        email="amadou.diop@example.com",
        max_hours_week=20,
        max_hours_day=6,
    )
    ndiaye = Instructor(
        civility="Dr",
        first_name="Fatou",
        last_name="Ndiaye",
        email="fatou.ndiaye@example.com",
        max_hours_week=18,
        max_hours_day=5,
    )
    sall = Instructor(
        civility="M.",
        first_name="Moussa",
        last_name="Sall",
        email="moussa.sall@example.com",
        max_hours_week=15,
        max_hours_day=4,
        available=False,
    )

    rooms = [
        Room(name="Amphi A", capacity=120, building="Bâtiment principal"),
        Room(name="Salle 101", capacity=35, building="Bâtiment principal"),
        Room(name="Labo Info 1", capacity=24, building="Annexe"),
    ]

    licence = Program(
        code="L3-INFO",
        name="Licence 3 Informatique",
        owner_id="coordinateur",
        start_date=year_start,
        end_date=year_start + timedelta(days=122),
        progression=2,
        status=IN_PROGRESS,
    )
    master = Program(
        code="M1-IA",
        name="Master 1 Intelligence Artificielle",
        owner_id="coordinateur",
        start_date=year_start + timedelta(days=14),
        end_date=year_start + timedelta(days=137),
        status=PLANNED,
    )

    web = Module(
        code="INF301",
        name="Développement Web Avancé",
        cm=20,
        td=15,
        tp=25,
        program=licence,
        instructor=ndiaye,
        owner_id="coordinateur",
        start_date=year_start,
        progression=3,
        status=IN_PROGRESS,
    )
    bdd = Module(
        code="INF302",
        name="Bases de données",
        cm=15,
        td=10,
        tp=15,
        program=licence,
        instructor=sall,
        owner_id="coordinateur",
    )
    ml = Module(
        code="IA101",
        name="Apprentissage automatique",
        cm=24,
        td=12,
        tp=24,
        program=master,
        instructor=diop,
        owner_id="coordinateur",
        start_date=year_start + timedelta(days=14),
    )

    first_monday = year_start + timedelta(days=(7 - year_start.weekday()) % 7)
    sessions = [
        Session(
            module=web,
            instructor=ndiaye,
            date=first_monday,
            start_time=time(8, 0),
            end_time=time(10, 0),
            duration=120,
            category="CM",
            status=COMPLETE,
            room="Amphi A",
        ),
        Session(
            module=web,
            instructor=ndiaye,
            date=first_monday + timedelta(days=1),
            start_time=time(14, 0),
            end_time=time(16, 0),
            duration=120,
            category="TD",
            status=PLANNED,
            room="Salle 101",
        ),
        Session(
            module=ml,
            instructor=diop,
            date=first_monday + timedelta(days=14),
            start_time=time(10, 0),
            end_time=time(12, 0),
            duration=120,
            category="CM",
            status=PLANNED,
            room="Amphi A",
        ),
    ]

    db.session.add_all([diop, ndiaye, sall, *rooms, licence, master, web, bdd, ml, *sessions])
    db.session.commit()
    return True
