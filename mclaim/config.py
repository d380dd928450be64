import os

from dotenv import load_dotenv

load_dotenv()


def resolve_database_uri() -> str:
    """Ensure SQLAlchemy gets a usable connection string without hard-coded credentials."""
    default_uri = "sqlite:///mclaim.db"
    raw_uri = os.getenv("DATABASE_URL", default_uri)
    if raw_uri.startswith("postgresql://"):
        return raw_uri.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_uri


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class BaseConfig:
    SQLALCHEMY_DATABASE_URI = resolve_database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    API_TITLE = os.getenv("API_TITLE", "mClaim INA-CBG API")
    API_VERSION = os.getenv("API_VERSION", "1.0.0")
    SECRET_KEY = os.getenv("SECRET_KEY", "development-secret-key")
    SEED_REFERENCE_CATALOG = _env_flag("SEED_REFERENCE_CATALOG")
    OPENAI_API_KEY = os.getenv("OPEN_AI_API_KEY") or os.getenv("OPENAI_API_KEY")
    RESOLVER_LLM_PROVIDER = os.getenv("RESOLVER_LLM_PROVIDER", "openai")
    RESOLVER_LLM_MODEL = os.getenv("RESOLVER_LLM_MODEL", "gpt-4o-mini")
    RESOLVER_LLM_TEMPERATURE = float(os.getenv("RESOLVER_LLM_TEMPERATURE", "0.1"))
    RESOLVER_LLM_MAX_TOKENS = int(os.getenv("RESOLVER_LLM_MAX_TOKENS", "600"))
    RESOLVER_LLM_TIMEOUT_SECONDS = float(os.getenv("RESOLVER_LLM_TIMEOUT_SECONDS", "30"))
    RESOLVER_CACHE_DIR = os.getenv("RESOLVER_CACHE_DIR", os.path.join("instance", "cache", "resolver"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    OPENAI_API_KEY = None
    RESOLVER_CACHE_DIR = None


config_by_name = {
    "default": BaseConfig,
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
