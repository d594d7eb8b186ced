from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from supplier_forecast.config import config
from supplier_forecast.db import db
from supplier_forecast.exceptions import SupplierForecastError
from supplier_forecast.logging_setup import get_logger, log_exception


def create_app(database_url=None, secret_key=None, testing=False):
    """Create the Flask application.

    Args:
        database_url: Optional database URL overriding the configured one
        secret_key: Optional portal token signing key
        testing: Enable Flask testing mode

    Returns:
        Flask application
    """
    from supplier_forecast.api.routes import forecast_bp, portal_bp, health_bp

    app = Flask(__name__)

    portal = config.portal_config
    app.config['TESTING'] = testing
    app.config['PORTAL_SECRET_KEY'] = secret_key or portal['secret_key']
    app.config['PORTAL_TOKEN_MAX_AGE'] = portal['token_max_age_hours'] * 3600

    if database_url:
        db.configure(database_url)

    app.register_blueprint(forecast_bp)
    app.register_blueprint(portal_bp)
    app.register_blueprint(health_bp)

    log = get_logger('api')

    @app.errorhandler(SupplierForecastError)
    def handle_service_error(error):
        if error.http_status >= 500:
            log.error(f"Request failed: {error}")
        else:
            log.warning(f"Request rejected: {error}")
        return jsonify(error.to_dict()), error.http_status

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        log_exception('api', error, "Unhandled exception")
        return jsonify({
            'success': False,
            'error': 'Internal server error occurred'
        }), 500

    return app

__all__ = ['create_app']
