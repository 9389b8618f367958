"""
Configuración de OneReserve Comercial
"""
import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    """Configuración base"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-2024'

    # JWT para la app móvil
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_EXPIRATION_HOURS = int(os.environ.get('JWT_EXPIRATION_HOURS', 72))

    # Base de datos (SQLite por defecto, MySQL/PostgreSQL vía DATABASE_URL)
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'comercial.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Fotos y notas de voz viajan en base64 dentro del JSON
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50MB max

    # Caché
    CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = 300

    # Gemini (búsqueda de negocios y direcciones)
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY') or os.environ.get('API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')
    GEMINI_API_URL = os.environ.get(
        'GEMINI_API_URL',
        'https://generativelanguage.googleapis.com/v1beta/models'
    )
    GEMINI_TIMEOUT = int(os.environ.get('GEMINI_TIMEOUT', 30))

    # Frontend compilado (SPA)
    FRONTEND_DIST = os.environ.get('FRONTEND_DIST') or os.path.join(basedir, 'dist')

    # Logs
    LOGS_DIR = os.environ.get('LOGS_DIR') or os.path.join(basedir, 'logs')

    # Timezone
    TIMEZONE = os.environ.get('TIMEZONE', 'Europe/Madrid')

    # Actividad reciente en el panel directivo
    RECENT_ACTIVITY_LIMIT = 10


class DevelopmentConfig(Config):
    """Configuración de desarrollo"""
    DEBUG = True
    SQLALCHEMY_ECHO = False


class ProductionConfig(Config):
    """Configuración de producción"""
    DEBUG = False
    SQLALCHEMY_ECHO = False

    # En producción, estas deben venir de variables de entorno
    def __init__(self):
        if not os.environ.get('SECRET_KEY'):
            raise ValueError("No SECRET_KEY set for Flask application in production")


class TestingConfig(Config):
    """Configuración para testing"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    CACHE_TYPE = 'NullCache'
    GEMINI_API_KEY = 'test-key'
    FRONTEND_DIST = os.path.join(basedir, 'tests', 'missing_dist')


# Diccionario de configuraciones
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
