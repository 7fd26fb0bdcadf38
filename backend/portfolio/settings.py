from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Runtime
    environment: str = Field(default="development", validation_alias="NODE_ENV")
    port: int = Field(default=8080, validation_alias="PORT")

    # CORS / Frontend
    frontend_base_url: str = Field(
        default="http://localhost:3000", validation_alias="FRONTEND_BASE_URL"
    )
    frontend_url: str | None = Field(default=None, validation_alias="FRONTEND_URL")
    frontend_urls: str | None = Field(default=None, validation_alias="FRONTEND_URLS")

    # Storage backend selection: "mongodb" or "postgres"
    storage_backend: str = Field(default="mongodb", validation_alias="STORAGE_BACKEND")

    # MongoDB
    mongodb_uri: str | None = Field(default=None, validation_alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="portfolio", validation_alias="MONGODB_DB_NAME")

    # PostgreSQL / Aurora DSQL
    pg_host: str | None = Field(default=None, validation_alias="PGHOST")
    pg_port: int = Field(default=5432, validation_alias="PGPORT")
    pg_user: str | None = Field(default=None, validation_alias="PGUSER")
    pg_password: str | None = Field(default=None, validation_alias="PGPASSWORD")
    pg_database: str | None = Field(default=None, validation_alias="PGDATABASE")
    pg_sslmode: str | None = Field(default=None, validation_alias="PGSSLMODE")
    pg_pool_max: int = Field(default=10, validation_alias="PG_POOL_MAX")
    aws_region: str = Field(default="us-east-1", validation_alias="AWS_REGION")

    # Admin auth
    jwt_secret: str | None = Field(default=None, validation_alias="JWT_SECRET")
    jwt_expires_hours: int = Field(default=24, validation_alias="JWT_EXPIRES_HOURS")
    admin_email: str | None = Field(default=None, validation_alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")
    admin_name: str = Field(default="Admin", validation_alias="ADMIN_NAME")
    bcrypt_rounds: int = Field(default=12, validation_alias="BCRYPT_ROUNDS")
    seed_secret: str | None = Field(default=None, validation_alias="SEED_SECRET")

    # Cloudinary (admin media uploads)
    cloudinary_cloud_name: str | None = Field(
        default=None, validation_alias="CLOUDINARY_CLOUD_NAME"
    )
    cloudinary_api_key: str | None = Field(default=None, validation_alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str | None = Field(
        default=None, validation_alias="CLOUDINARY_API_SECRET"
    )

    # Local files
    data_file_path: str = Field(default="data.json", validation_alias="DATA_FILE_PATH")
    upload_dir: str = Field(default="public/static/images", validation_alias="UPLOAD_DIR")

    # Public read cache (seconds)
    public_cache_short_ttl: int = Field(default=30, validation_alias="PUBLIC_CACHE_SHORT_TTL")
    public_cache_medium_ttl: int = Field(
        default=300, validation_alias="PUBLIC_CACHE_MEDIUM_TTL"
    )

    # Public review submissions
    review_submit_rate_limit_rpm: int = Field(
        default=5, validation_alias="REVIEW_SUBMIT_RATE_LIMIT_RPM"
    )

    # Observability (OpenTelemetry)
    otel_enabled: bool = Field(default=False, validation_alias="OTEL_ENABLED")
    otel_service_name: str | None = Field(
        default="portfolio-cms", validation_alias="OTEL_SERVICE_NAME"
    )
    otel_exporter_otlp_endpoint: str | None = Field(
        default=None, validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )

    # ---- helpers / derived flags ----
    @property
    def normalized_environment(self) -> str:
        v = (self.environment or "").strip().lower()
        if v in ("prod", "production"):
            return "production"
        if v in ("stage", "staging"):
            return "staging"
        if v in ("dev", "development"):
            return "development"
        return v or "development"

    @property
    def is_production(self) -> bool:
        return self.normalized_environment == "production"

    @property
    def is_development(self) -> bool:
        return self.normalized_environment == "development"

    @property
    def normalized_storage_backend(self) -> str:
        v = (self.storage_backend or "").strip().lower()
        if v in ("postgres", "postgresql", "aurora", "pg"):
            return "postgres"
        return "mongodb"

    @property
    def is_dsql(self) -> bool:
        return "dsql" in str(self.pg_host or "").lower()

    def storage_configured(self) -> bool:
        if self.normalized_storage_backend == "postgres":
            return bool(self.pg_host and self.pg_user and self.pg_database)
        return bool(self.mongodb_uri and str(self.mongodb_uri).strip())

    def require_in_production(self) -> None:
        """
        Enforce required settings in production.

        Development/staging may run with partial config for local work.
        """
        if not self.is_production:
            return

        missing: list[str] = []

        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if not self.admin_email:
            missing.append("ADMIN_EMAIL")
        if not self.admin_password:
            missing.append("ADMIN_PASSWORD")

        if self.normalized_storage_backend == "postgres":
            for name, value in (
                ("PGHOST", self.pg_host),
                ("PGUSER", self.pg_user),
                ("PGDATABASE", self.pg_database),
            ):
                if not value:
                    missing.append(name)
            if not self.is_dsql and not self.pg_password:
                missing.append("PGPASSWORD")
        elif not self.mongodb_uri:
            missing.append("MONGODB_URI")

        if missing:
            raise RuntimeError(
                "Missing required production environment variables: "
                + ", ".join(missing)
            )

    def to_log_safe_dict(self) -> dict[str, object]:
        def _has(v: object) -> bool:
            return bool(v and str(v).strip())

        return {
            "environment": self.normalized_environment,
            "port": self.port,
            "frontend_base_url": self.frontend_base_url,
            "storage": {
                "backend": self.normalized_storage_backend,
                "configured": self.storage_configured(),
                "mongodb_db_name": self.mongodb_db_name,
                "pg_host": self.pg_host if _has(self.pg_host) else None,
                "pg_database": self.pg_database if _has(self.pg_database) else None,
                "dsql": self.is_dsql,
            },
            "auth": {
                "jwt_secret_configured": _has(self.jwt_secret),
                "admin_email_configured": _has(self.admin_email),
                "seed_secret_configured": _has(self.seed_secret),
            },
            "uploads": {
                "cloudinary_configured": _has(self.cloudinary_cloud_name)
                and _has(self.cloudinary_api_key)
                and _has(self.cloudinary_api_secret),
                "upload_dir": self.upload_dir,
                "data_file_path": self.data_file_path,
            },
            "otel_enabled": bool(self.otel_enabled),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings()
    s.require_in_production()
    return s


# Backwards-compatible module-level singleton.
settings = get_settings()
