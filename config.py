# config.py — configuración explícita del backend de contacto
# Se construye una vez (Settings.from_env) y se pasa a los componentes.
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_DB = f"sqlite:///{(BASE_DIR / 'contact.db').as_posix()}"

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
DEFAULT_BYPASS_TOKENS = ("development_token", "fallback_token", "test_token")
DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
)


def get_env_list(key: str, default: str = "") -> Tuple[str, ...]:
    value = os.environ.get(key, default)
    return tuple(item.strip() for item in value.split(",") if item.strip())


def get_env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def get_env_int(key: str, default: int = 0) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def normalize_db_url(raw: Optional[str]) -> str:
    """postgres:// -> postgresql+psycopg2:// y sslmode=require por defecto."""
    if not raw:
        return DEFAULT_DB
    if raw.startswith("postgres://"):
        raw = raw.replace("postgres://", "postgresql+psycopg2://", 1)
    elif raw.startswith("postgresql://"):
        raw = raw.replace("postgresql://", "postgresql+psycopg2://", 1)
    if "sslmode=" not in raw and "+psycopg2://" in raw:
        raw += ("&" if "?" in raw else "?") + "sslmode=require"
    return raw


@dataclass(frozen=True)
class Settings:
    environment: str = "production"
    database_url: str = DEFAULT_DB

    recaptcha_secret: str = ""
    recaptcha_verify_url: str = RECAPTCHA_VERIFY_URL
    recaptcha_skip: bool = False
    recaptcha_bypass_tokens: Tuple[str, ...] = DEFAULT_BYPASS_TOKENS
    recaptcha_timeout: float = 5.0

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    mail_from: str = ""
    admin_email: str = "admin@example.com"
    company_name: str = "Our Team"
    phone_country_code: str = "91"

    contact_rate_limit: str = ""
    admin_api_token: str = ""
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS
    log_dir: Path = field(default_factory=lambda: BASE_DIR / "logs")
    port: int = 5000

    @property
    def permissive(self) -> bool:
        return self.environment == "development"

    @property
    def submission_rate_limit(self) -> str:
        if self.contact_rate_limit:
            return self.contact_rate_limit
        return "20 per 15 minutes" if self.permissive else "5 per 15 minutes"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass)

    @classmethod
    def from_env(cls) -> "Settings":
        environment = (os.getenv("APP_ENV") or "production").strip().lower()
        permissive = environment == "development"
        smtp_user = os.getenv("SMTP_USER", "").strip()
        frontend = os.getenv("FRONTEND_URL", "").strip()
        origins = get_env_list("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS
        if frontend and frontend not in origins:
            origins = (frontend,) + origins
        return cls(
            environment=environment,
            database_url=normalize_db_url(os.getenv("DATABASE_URL")),
            recaptcha_secret=os.getenv("RECAPTCHA_SECRET_KEY", "").strip(),
            recaptcha_verify_url=os.getenv("RECAPTCHA_VERIFY_URL", RECAPTCHA_VERIFY_URL).strip(),
            recaptcha_skip=get_env_bool("RECAPTCHA_SKIP", permissive),
            recaptcha_bypass_tokens=get_env_list("RECAPTCHA_BYPASS_TOKENS", ",".join(DEFAULT_BYPASS_TOKENS)),
            smtp_host=os.getenv("SMTP_HOST", "").strip(),
            smtp_port=get_env_int("SMTP_PORT", 587),
            smtp_user=smtp_user,
            smtp_pass=os.getenv("SMTP_PASS", ""),
            mail_from=os.getenv("MAIL_FROM", smtp_user).strip(),
            admin_email=os.getenv("ADMIN_EMAIL", "admin@example.com").strip(),
            company_name=os.getenv("COMPANY_NAME", "Our Team").strip(),
            phone_country_code=os.getenv("PHONE_COUNTRY_CODE", "91").strip().lstrip("+"),
            contact_rate_limit=os.getenv("CONTACT_RATE_LIMIT", "").strip(),
            admin_api_token=os.getenv("ADMIN_API_TOKEN", "").strip(),
            cors_origins=origins,
            log_dir=Path(os.getenv("LOG_DIR") or (BASE_DIR / "logs")),
            port=get_env_int("PORT", 5000),
        )
