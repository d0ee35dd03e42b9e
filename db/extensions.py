# db/extensions.py

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_mail import Mail
from flask_jwt_extended import JWTManager
from sqlalchemy import text
import logging

db = SQLAlchemy()
migrate = Migrate()
mail = Mail()
jwt = JWTManager()

logger = logging.getLogger(__name__)


def check_db_health():
    """Check database connection health"""
    try:
        db.session.execute(text('SELECT 1'))
        return True
    except Exception as e:
        logger.error(f"❌ Database health check failed: {str(e)}")
        return False
