from os import getenv
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default='true'):
    return getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration class."""

    SECRET_KEY = getenv('FLASK_SECRET_KEY')
    LMS_STORAGE_BACKEND = getenv('LMS_STORAGE_BACKEND', 'memory')
    LMS_SEED_DEMO_DATA = _flag('LMS_SEED_DEMO_DATA')

    SUPABASE_URL = getenv('SUPABASE_URL')
    SUPABASE_SERVICE_KEY = getenv('SUPABASE_SERVICE_KEY')
    SUPABASE_JWT_SECRET = getenv('SUPABASE_JWT_SECRET')
    SUPABASE_JWKS_URL = getenv('SUPABASE_JWKS_URL')
    JWT_AUDIENCE = getenv('JWT_AUDIENCE', 'authenticated')

    LOG_FILE = getenv('LOG_FILE', 'app.log')
    LOG_LEVEL = getenv('LOG_LEVEL', 'DEBUG')

    @classmethod
    def validate(cls):
        if cls.LMS_STORAGE_BACKEND not in ('memory', 'supabase'):
            raise ValueError(f"Unknown LMS_STORAGE_BACKEND: {cls.LMS_STORAGE_BACKEND}")
        # Ensure all required Supabase variables are set
        if cls.LMS_STORAGE_BACKEND == 'supabase' and not all([cls.SUPABASE_URL, cls.SUPABASE_SERVICE_KEY]):
            raise ValueError("One or more Supabase environment variables are not set.")
        if not (cls.SUPABASE_JWT_SECRET or cls.SUPABASE_JWKS_URL):
            raise ValueError("Set SUPABASE_JWT_SECRET or SUPABASE_JWKS_URL to verify access tokens.")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    LMS_STORAGE_BACKEND = 'memory'
    LMS_SEED_DEMO_DATA = True
    SUPABASE_JWT_SECRET = 'test-jwt-secret-with-enough-length-for-hs256'
    SUPABASE_JWKS_URL = None
    LOG_FILE = ''
