from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def register_error_handlers(app):
    """Traduce los errores de dominio a respuestas JSON con su status HTTP."""
    from moldtrack.exceptions import MoldTrackError
    from moldtrack.utils.logger import get_api_logger

    log = get_api_logger()

    @app.errorhandler(MoldTrackError)
    def handle_domain_error(error):
        if error.status_code >= 500:
            log.error(f"❌ {error.code}: {error.message}")
        else:
            log.warning(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code


def create_app(config_object='moldtrack.config.Config'):
    app = Flask(__name__)

    # Load config
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    CORS(app)

    # Register blueprints
    from moldtrack.routes.molds import molds_bp
    from moldtrack.routes.components import components_bp
    from moldtrack.routes.machines import machines_bp
    from moldtrack.routes.events import events_bp
    from moldtrack.routes.production import production_bp
    from moldtrack.routes.maintenance_requests import maintenance_requests_bp
    from moldtrack.routes.users import users_bp
    from moldtrack.routes.analytics import analytics_bp

    app.register_blueprint(molds_bp, url_prefix='/api/molds')
    app.register_blueprint(components_bp, url_prefix='/api/components')
    app.register_blueprint(machines_bp, url_prefix='/api/machines')
    app.register_blueprint(events_bp, url_prefix='/api/events')
    app.register_blueprint(production_bp, url_prefix='/api/production')
    app.register_blueprint(maintenance_requests_bp, url_prefix='/api/maintenance-requests')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')

    register_error_handlers(app)

    # Create tables
    with app.app_context():
        db.create_all()

    return app
