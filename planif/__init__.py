import logging

import click
from flask import Flask
from flask.cli import with_appcontext
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import Config, _normalise_prefix


db = SQLAlchemy()
migrate = Migrate()


def _configure_logging(app: Flask) -> None:
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    url_prefix = _normalise_prefix(app.config.get("URL_PREFIX", ""))
    app.config["URL_PREFIX"] = url_prefix

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)

    from . import models  # noqa: F401  # Ensure models registered for migrations

    with app.app_context():
        db.create_all()

    from .api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix=f"{url_prefix}/api")

    @app.cli.command("seed")
    @with_appcontext
    def seed() -> None:
        """Seed initial data for development."""
        from .seed import seed_data

        created = seed_data()
        if created:
            click.echo("Base de données initialisée avec des données d'exemple.")
        else:
            click.echo("Données déjà présentes, rien à faire.")

    @app.cli.command("activate-period")
    @click.argument("period_id", type=int)
    @with_appcontext
    def activate_period(period_id: int) -> None:
        """Make PERIOD_ID the only active academic period."""
        period = db.session.get(models.AcademicPeriod, period_id)
        if period is None:
            raise click.ClickException(f"Période {period_id} introuvable.")
        period.activate()
        db.session.commit()
        click.echo(f"Période « {period.name} » activée.")

    return app
