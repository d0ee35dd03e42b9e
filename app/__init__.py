# app/__init__.py

import logging
import time
from flask import Flask, g, request, send_from_directory
from flask_cors import CORS
from .config import Config
from db.extensions import db, migrate, mail, jwt, check_db_health
from controllers.booking_controller import booking_bp
from controllers.user_controller import user_bp
from controllers.enquiry_controller import enquiry_bp
from services.exceptions import ServiceError
from services.image_storage import ImageStorageService


def configure_logging(app):
    log_level = logging.DEBUG if app.config['DEBUG_MODE'] else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app.logger.setLevel(log_level)


def register_request_timing(app):
    """Log requests slower than SLOW_REQUEST_MS, and every request in debug mode."""

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_timing(response):
        started = g.pop('request_started', None)
        if started is None:
            return response
        elapsed = (time.perf_counter() - started) * 1000
        if elapsed > app.config['SLOW_REQUEST_MS']:
            app.logger.warning(
                f"⚠️  SLOW REQUEST: {request.method} {request.path} "
                f"took {elapsed:.2f}ms - Status: {response.status_code}"
            )
        elif app.config['DEBUG_MODE']:
            app.logger.debug(f"{request.method} {request.path} {response.status_code} in {elapsed:.2f}ms")
        return response


def create_app(config_class=Config):
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)

    CORS(app,
         origins=app.config['CORS_ORIGINS'],
         methods=['GET', 'HEAD', 'PUT', 'PATCH', 'POST', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization'],
         supports_credentials=True,
         max_age=3600
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    jwt.init_app(app)

    # Register blueprints
    app.register_blueprint(booking_bp, url_prefix='/api')
    app.register_blueprint(user_bp, url_prefix='/user')
    app.register_blueprint(enquiry_bp)

    with app.app_context():
        ImageStorageService.ensure_dirs()

    configure_logging(app)
    register_request_timing(app)

    # Known service failures carry their own status and message
    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        if e.status_code >= 500:
            app.logger.error(f"❌ {e.kind}: {e.message}")
        else:
            app.logger.info(f"{request.method} {request.path} rejected: {e.kind} - {e.message}")
        return e.to_dict(), e.status_code

    # Global error handler
    @app.errorhandler(Exception)
    def handle_exception(e):
        # Let routing errors (404, 405, bad JSON) keep their HTTP status
        if hasattr(e, 'code') and isinstance(e.code, int) and e.code < 500:
            return {'success': False, 'message': getattr(e, 'description', str(e))}, e.code
        app.logger.error(f"❌ Unhandled exception: {str(e)}", exc_info=True)
        return {
            'success': False,
            'message': 'Internal server error. Please try again.'
        }, 500

    @app.route('/Images/<path:filename>', methods=['GET'])
    def uploaded_image(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    # Health check endpoint
    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint for monitoring"""
        if check_db_health():
            return {
                'ok': True,
                'status': 'ok',
                'database': 'connected',
                'timestamp': time.time()
            }, 200
        return {
            'ok': False,
            'status': 'error',
            'database': 'unreachable',
            'timestamp': time.time()
        }, 500

    return app
