"""
Process configuration, read from the environment (.env is loaded by app.main).
Secrets are not validated here; a missing key fails on first use.
"""
import os
from functools import lru_cache
from typing import List, Optional


class Settings:
    def __init__(
        self,
        port: int = 5000,
        database_url: str = "sqlite:///./interior_designer.db",
        frontend_url: str = "http://localhost:3000",
        jwt_secret: Optional[str] = None,
        environment: str = "development",
        huggingface_api_key: Optional[str] = None,
        imgbb_api_key: Optional[str] = None,
        stripe_secret_key: Optional[str] = None,
        stripe_webhook_secret: Optional[str] = None,
        stripe_price_yearly: Optional[str] = None,
        public_dir: str = "public",
    ):
        self.port = port
        self.database_url = database_url
        self.frontend_url = frontend_url.rstrip("/")
        self.jwt_secret = jwt_secret
        self.environment = environment
        self.huggingface_api_key = huggingface_api_key
        self.imgbb_api_key = imgbb_api_key
        self.stripe_secret_key = stripe_secret_key
        self.stripe_webhook_secret = stripe_webhook_secret
        self.stripe_price_yearly = stripe_price_yearly
        self.public_dir = public_dir

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            port=int(os.getenv("PORT", "5000")),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./interior_designer.db"),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000"),
            jwt_secret=os.getenv("JWT_SECRET"),
            environment=os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV") or "development",
            huggingface_api_key=os.getenv("HUGGINGFACE_API_KEY"),
            imgbb_api_key=os.getenv("IMGBB_API_KEY"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY"),
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET"),
            stripe_price_yearly=os.getenv("STRIPE_PRICE_YEARLY"),
            public_dir=os.getenv("PUBLIC_DIR", "public"),
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origins(self) -> List[str]:
        origins = [self.frontend_url, "http://localhost:3000", "http://localhost:5000"]
        return list(dict.fromkeys(origins))


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
