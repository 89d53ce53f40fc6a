import os
import logging
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "google/gemini-2.0-flash-001"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.7
    max_history_messages: int = 10


def _default_allotment(leave_type: str, fallback: float) -> float:
    return float(os.getenv(f"LEAVE_DEFAULT_{leave_type.upper()}", fallback))


class LeaveSettings(BaseModel):
    # Yearly allotment per leave type used when a balance row is first created
    default_allotments: Dict[str, float] = Field(
        default_factory=lambda: {
            "casual": _default_allotment("casual", 12),
            "sick": _default_allotment("sick", 12),
            "earned": _default_allotment("earned", 21),
            "unpaid": _default_allotment("unpaid", 365),
            "maternity": _default_allotment("maternity", 180),
            "paternity": _default_allotment("paternity", 15),
        }
    )
    page_size: int = 50


class Config(BaseModel):
    app_name: str = "HR Portal"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hr_portal.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    otp_expire_minutes: int = 10
    reset_otp_expire_minutes: int = 20
    # Static bearer token accepted as a synthetic admin; disabled when unset
    admin_placeholder_token: Optional[str] = os.getenv("ADMIN_PLACEHOLDER_TOKEN") or None

    # First-run admin account, created at startup when both are set
    bootstrap_admin_email: Optional[str] = os.getenv("BOOTSTRAP_ADMIN_EMAIL") or None
    bootstrap_admin_password: Optional[str] = os.getenv("BOOTSTRAP_ADMIN_PASSWORD") or None

    # AI Components
    ai: AISettings = AISettings()
    ai_fallback_model: str = os.getenv("AI_FALLBACK_MODEL", "google/gemini-2.0-flash-lite-preview-02-05:free")

    # Leave ledger
    leave: LeaveSettings = LeaveSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173,"
                "http://127.0.0.1:3000,http://127.0.0.1:5173",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    login_rate_limit: str = os.getenv("LOGIN_RATE_LIMIT", "10/minute")

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    _critical_missing = []
    if "dev-only" in settings.secret_key:
        _critical_missing.append("SECRET_KEY")
    if _critical_missing:
        raise RuntimeError(
            f"FATAL: The following secrets must be set for non-development environments: "
            f"{', '.join(_critical_missing)}. Set them as environment variables."
        )
    if settings.admin_placeholder_token:
        _logger.warning("ADMIN_PLACEHOLDER_TOKEN is set outside development; any holder acts as admin.")
else:
    if "dev-only" in settings.secret_key:
        _logger.warning("⚠ Using insecure default SECRET_KEY; only acceptable in development.")
