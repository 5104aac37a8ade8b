import os

DEFAULT_ADMIN_CODES = [
    ('ADMIN123', 'New York'),
    ('ADMIN456', 'Los Angeles'),
    ('ADMIN789', 'Chicago'),
    ('ADMIN101', 'Houston'),
    ('ADMIN202', 'Phoenix'),
    ('CLEAN_DELHI', 'Delhi'),
    ('CLEAN_AMRAVATI', 'Amravati'),
    ('CLEAN_MUMBAI', 'Mumbai'),
    ('CLEAN_BANGALORE', 'Bangalore'),
    ('CLEAN_LONDON', 'London'),
    ('CLEAN_TOKYO', 'Tokyo'),
]

def _optional_int(name):
    value = os.environ.get(name, '').strip()
    return int(value) if value else None

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('CLEANCITY_SECRET') or 'dev-secret-key'
    DEBUG = os.environ.get('CLEANCITY_DEBUG', 'true').lower() in ('1', 'true', 'yes')
    PORT = int(os.environ.get('CLEANCITY_PORT', '5000'))
    CORS_ORIGINS = os.environ.get('CLEANCITY_CORS', '*')
    LOG_LEVEL = os.environ.get('CLEANCITY_LOG_LEVEL', 'INFO')
    TOKEN_EXPIRY_HOURS = int(os.environ.get('CLEANCITY_TOKEN_EXPIRY_HOURS', '8'))

    # Storage: 'database' (SQLAlchemy) or 'memory' (single-process only)
    STORAGE_BACKEND = os.environ.get('CLEANCITY_STORAGE', 'database')
    SEED_ADMIN_CODES = os.environ.get('CLEANCITY_SEED_CODES', 'true').lower() in ('1', 'true', 'yes')
    ADMIN_CODES = DEFAULT_ADMIN_CODES
    MAX_ADMINS_PER_CITY = _optional_int('CLEANCITY_MAX_ADMINS_PER_CITY')

    # Database
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    DB_NAME = 'cleancity.db'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f"sqlite:///{os.path.join(BASE_DIR, DB_NAME)}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('CLEANCITY_LOG_LEVEL', 'DEBUG')

class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    # Ensure SECRET_KEY is set in production
    @property
    def SECRET_KEY(self):
        key = os.environ.get('CLEANCITY_SECRET')
        if not key:
            raise ValueError("CLEANCITY_SECRET environment variable is required in production")
        return key

class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SEED_ADMIN_CODES = False
    MAX_ADMINS_PER_CITY = None
    LOG_LEVEL = 'WARNING'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
