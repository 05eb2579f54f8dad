"""
Health check and API documentation endpoints.
"""
from datetime import datetime
from flask import Blueprint, current_app, jsonify, redirect
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from ..extensions import db
from ..utils.logging_utils import get_logger

bp = Blueprint('health', __name__)
logger = get_logger('health')


@bp.route('/api/health', methods=['GET'])
def health_check():
    """Report database connectivity; 503 when the database is unreachable."""
    start_time = datetime.utcnow()

    try:
        db.session.execute(text('SELECT 1'))
        database_status = 'healthy'
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database health check failed: {e}")
        database_status = 'unhealthy'

    response_time = (datetime.utcnow() - start_time).total_seconds() * 1000
    healthy = database_status == 'healthy'

    health_status = {
        'status': 'healthy' if healthy else 'unhealthy',
        'timestamp': datetime.utcnow().isoformat(),
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'services': {
            'database': database_status,
            'application': 'healthy'
        },
        'response_time_ms': round(response_time, 2)
    }
    return jsonify(health_status), 200 if healthy else 503


@bp.route('/api/docs')
def docs_index():
    # flasgger serves the UI
    return redirect('/apidocs')
