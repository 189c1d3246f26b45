import os
from flask import Flask
from doc_converter.config import Config, load_environment
from doc_converter.errors import EngineStartError
from doc_converter.extensions import db, migrate, office_engine
from doc_converter.routes import main
from doc_converter.services.engine import install_shutdown_hooks
from doc_converter.services.history_store import history_store
from doc_converter.utils.logger import configure_logging


def init_extensions(app: Flask) -> None:
    """Initialize Flask extensions and the history store."""
    db.init_app(app)
    migrate.init_app(app, db)
    office_engine.init_app(app)
    history_store.init_app(app)


def register_blueprints(app: Flask) -> None:
    """Register application blueprints."""
    app.register_blueprint(main.bp)


def start_office_engine(app: Flask) -> None:
    """Start LibreOffice eagerly; a failure is logged and retried on the first document upload."""
    if not app.testing:
        install_shutdown_hooks(office_engine)
    if not app.config.get('OFFICE_ENGINE_AUTOSTART'):
        return
    try:
        office_engine.ensure_started()
    except EngineStartError as e:
        app.logger.error(f"LibreOffice engine failed to start: {e}")


def create_app(config_class: type[Config] = Config) -> Flask:
    """Flask application factory."""
    load_environment()
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Refresh DB URI from environment after load_environment, since Config is evaluated at import time
    db_uri = os.environ.get('DATABASE_URL')
    if db_uri and not app.testing:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_uri

    if not app.config.get('SQLALCHEMY_DATABASE_URI'):
        raise RuntimeError("SQLALCHEMY_DATABASE_URI is not set. Ensure DATABASE_URL is defined in the environment/.env.")

    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    configure_logging(app)
    init_extensions(app)
    register_blueprints(app)
    start_office_engine(app)

    app.logger.info('Application startup')
    return app
