"""QR Attendance - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from werkzeug.middleware.proxy_fix import ProxyFix
from qrattend.utils.helpers import rate_limit_key

__version__ = '1.0.0'

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=rate_limit_key)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Only trust X-Forwarded-For for the configured number of proxy hops
    proxy_hops = app.config.get('PROXY_FIX_X_FOR', 0)
    if proxy_hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_hops)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'QR Attendance',
            'version': __version__
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from qrattend.api.sessions import sessions_bp
    from qrattend.api.attendance import attendance_bp
    from qrattend.api.profile import profile_bp

    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from sqlalchemy.exc import SQLAlchemyError
    from werkzeug.exceptions import HTTPException
    from qrattend.errors import AttendanceError
    from qrattend.utils.helpers import handle_error, error_response

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(e):
        db.session.rollback()
        details = e.to_dict()
        details.pop('message')
        return error_response(e.message, e.http_status, **details)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        db.session.rollback()
        app.logger.exception('Database failure')
        return error_response('Internal server error', 500, code='INTERNAL_ERROR')

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception('Unhandled error')
        return error_response('Internal server error', 500, code='INTERNAL_ERROR')

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return error_response('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return error_response('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return error_response('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL') or 'INFO', logging.INFO)
    logging.getLogger('qrattend').setLevel(level)

    log_file = app.config.get('LOG_FILE')
    if not app.debug and not app.testing and log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('qrattend').addHandler(file_handler)

        app.logger.setLevel(level)
        app.logger.info('QR Attendance startup')

def setup_database(app: Flask) -> None:
    """Import models so their tables are registered on the metadata."""
    with app.app_context():
        from qrattend import models  # noqa: F401

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')
