# app/config.py

import os
from datetime import timedelta

class Config:
    # Flask Secret Key
    SECRET_KEY = os.getenv('SECRET_KEY', 'your_secret_key')

    # Logging
    DEBUG_MODE = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
    SLOW_REQUEST_MS = int(os.getenv('SLOW_REQUEST_MS', 500))

    # Database Configuration
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URI',
        'postgresql://postgres:postgres@db:5432/rentals_db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Database connection pool configuration
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,       # Validate connections before using
        "pool_recycle": 1800,        # Recycle every 30 minutes
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "connect_args": {
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000"  # 30s query timeout
        }
    }

    # CORS
    CORS_ORIGINS = [
        origin.strip() for origin in os.getenv(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,'
            'https://rapspowerplay.com,https://www.rapspowerplay.com'
        ).split(',') if origin.strip()
    ]

    # File Upload Configuration
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'Images'))
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16 MB upload limit

    # Mail Configuration
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", 465))
    MAIL_USE_TLS = os.getenv("MAIL_USE_TLS", "false").lower() in ("true", "1", "t")
    MAIL_USE_SSL = os.getenv("MAIL_USE_SSL", "true").lower() in ("true", "1", "t")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "no-reply@raps.com")
    MAIL_MAX_EMAILS = None
    MAIL_ASCII_ATTACHMENTS = False
    # Send mail on a background thread so requests return immediately
    MAIL_ASYNC = os.getenv("MAIL_ASYNC", "true").lower() in ("true", "1", "t")

    # Session tokens
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', os.getenv('JWT_SECRET', 'change-me'))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_EXPIRES_DAYS', 7)))

    # Passed straight to werkzeug.security.generate_password_hash
    PASSWORD_HASH_METHOD = os.getenv('PASSWORD_HASH_METHOD', 'scrypt')

    # Google Sheets (enquiry form)
    GOOGLE_APPLICATION_CREDENTIALS = os.getenv('GOOGLE_APPLICATION_CREDENTIALS', 'creds.json')
    ENQUIRY_SPREADSHEET_ID = os.getenv('ENQUIRY_SPREADSHEET_ID')
    ENQUIRY_SHEET_NAME = os.getenv('ENQUIRY_SHEET_NAME', 'Raps_Enquiries')

    # Cloudinary Configuration (optional, local disk storage otherwise)
    CLOUDINARY_CLOUD_NAME = os.getenv('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.getenv('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.getenv('CLOUDINARY_API_SECRET')
