import logging

from flask import Flask
from config import config
from cleancity.extensions import db, cors
from flask_migrate import Migrate

migrate = Migrate()

def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('cleancity').setLevel(level)
    app.logger.setLevel(level)

def init_storage(app, storage=None):
    from cleancity.storage import build_storage
    from cleancity.services.lifecycle import ReportLifecycle
    from cleancity.services.notification_service import report_completed_listener
    from cleancity.services.onboarding import seed_admin_codes

    if storage is None:
        storage = build_storage(app.config.get('STORAGE_BACKEND', 'database'))
    lifecycle = ReportLifecycle(storage)
    lifecycle.subscribe_completed(report_completed_listener(storage))

    app.extensions['cleancity.storage'] = storage
    app.extensions['cleancity.lifecycle'] = lifecycle

    with app.app_context():
        db.create_all()
        if app.config.get('SEED_ADMIN_CODES'):
            seed_admin_codes(storage, app.config.get('ADMIN_CODES', []))

    app.logger.info('Storage backend: %s', type(storage).__name__)
    return storage

def create_app(config_name='default', storage=None):
    app = Flask(__name__)
    # Instantiate so property-based settings (production SECRET_KEY) resolve
    app.config.from_object(config[config_name]())
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Configure CORS
    cors_origins = app.config.get('CORS_ORIGINS', '*')
    if cors_origins == '*' or cors_origins.strip() == '':
        cors.init_app(app)
    else:
        cors.init_app(app, origins=[o.strip() for o in cors_origins.split(',')])

    init_storage(app, storage)

    # Register Blueprints
    from cleancity.routes import register_routes
    register_routes(app)

    return app
