from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # "production" disables any secret echo regardless of the flag below
    app_env: str = "development"
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    # Redis (empty -> in-process cache and challenge store)
    redis_url: str = ""
    # Email / SendGrid (empty api key -> mock sender)
    sendgrid_api_key: str = ""
    email_from: str = "BUNGU SQUAD <noreply@bungu-squad-arena.vercel.app>"
    frontend_url: str = "http://localhost:5173"
    # Base of the links put in verification emails; empty -> the request's own base URL
    api_base_url: str = ""
    # Verification codes: 5 minutes, 4 digits
    code_ttl_seconds: int = 300
    verification_code_length: int = 4
    # Verification links: 24 hours
    link_ttl_seconds: int = 86400
    verification_max_attempts: int = 3
    # Background sweep of expired challenges
    verification_sweep_interval_seconds: int = 300
    # Redis keeps records this long past expires_at so verify can report "expired"
    verification_expired_grace_seconds: int = 300
    # Echo issued codes/tokens in send responses (local development only)
    expose_verification_secrets: bool = False
    # Per-IP rate limit on the send endpoints
    rate_limit_calls: int = 5
    rate_limit_period: int = 60

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() in ("prod", "production")
