"""
Process configuration, read once at startup.

Every collaborator (gateway, database, mail) has its own section so a missing
credential only disables the endpoints that need it. `Settings.missing()`
names the absent variables; `Settings.require()` turns that into a
ConfigurationError.
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from shared.errors import ConfigurationError

GATEWAY = "gateway"
DATABASE = "database"
MAIL = "mail"

SNAP_SANDBOX_URL = "https://app.sandbox.midtrans.com/snap/v1"
SNAP_PRODUCTION_URL = "https://app.midtrans.com/snap/v1"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class GatewaySettings:
    server_key: str = ""
    client_key: str = ""
    is_production: bool = False

    @property
    def base_url(self) -> str:
        return SNAP_PRODUCTION_URL if self.is_production else SNAP_SANDBOX_URL


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = ""
    user: str = ""
    password: str = ""
    host: str = "localhost"  # In Docker, this will be 'postgres'
    port: str = "5433"
    name: str = "ecommerce"
    echo: bool = False

    @property
    def database_url(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


@dataclass(frozen=True)
class MailSettings:
    user: str = ""
    password: str = ""
    host: str = "smtp.gmail.com"
    port: int = 587
    use_tls: bool = True


@dataclass(frozen=True)
class Settings:
    gateway: GatewaySettings = field(default_factory=GatewaySettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    mail: MailSettings = field(default_factory=MailSettings)
    shipping_item_id: str = "SHIPPING_COST"
    cors_origins: tuple = ("*",)
    port: int = 3001
    tracing_enabled: bool = True
    metrics_enabled: bool = True
    otlp_endpoint: str = "http://localhost:4317"
    contact_rate_limit: str = "5/minute"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, load_env_file: bool = True) -> "Settings":
        if environ is None:
            if load_env_file:
                load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ
        get = environ.get

        origins = tuple(o.strip() for o in get("CORS_ORIGINS", "*").split(",") if o.strip())

        return cls(
            gateway=GatewaySettings(
                server_key=get("MIDTRANS_SERVER_KEY", ""),
                client_key=get("MIDTRANS_CLIENT_KEY", ""),
                is_production=_flag(get("MIDTRANS_IS_PRODUCTION"), False),
            ),
            database=DatabaseSettings(
                url=get("DATABASE_URL", ""),
                user=get("POSTGRES_USER", ""),
                password=get("POSTGRES_PASSWORD", ""),
                host=get("POSTGRES_HOST", "localhost"),
                port=get("POSTGRES_PORT", "5433"),
                name=get("POSTGRES_DB", "ecommerce"),
                echo=_flag(get("DATABASE_ECHO"), False),
            ),
            mail=MailSettings(
                user=get("EMAIL_USER", ""),
                password=get("EMAIL_PASS", ""),
                host=get("SMTP_HOST", "smtp.gmail.com"),
                port=int(get("SMTP_PORT", "587")),
                use_tls=_flag(get("SMTP_USE_TLS"), True),
            ),
            shipping_item_id=get("SHIPPING_ITEM_ID", "SHIPPING_COST"),
            cors_origins=origins or ("*",),
            port=int(get("PORT", "3001")),
            tracing_enabled=_flag(get("TRACING_ENABLED"), True),
            metrics_enabled=_flag(get("METRICS_ENABLED"), True),
            otlp_endpoint=get("OTLP_ENDPOINT", "http://localhost:4317"),
            contact_rate_limit=get("CONTACT_RATE_LIMIT", "5/minute"),
        )

    def missing(self, capability: str) -> list[str]:
        """Names of the environment variables a capability still needs."""
        if capability == GATEWAY:
            absent = []
            if not self.gateway.server_key:
                absent.append("MIDTRANS_SERVER_KEY")
            if not self.gateway.client_key:
                absent.append("MIDTRANS_CLIENT_KEY")
            return absent
        if capability == DATABASE:
            if self.database.url:
                return []
            absent = []
            if not self.database.user:
                absent.append("POSTGRES_USER")
            if not self.database.password:
                absent.append("POSTGRES_PASSWORD")
            # Either a full URL or the credential pair works
            return ["DATABASE_URL"] + absent if absent else []
        if capability == MAIL:
            absent = []
            if not self.mail.user:
                absent.append("EMAIL_USER")
            if not self.mail.password:
                absent.append("EMAIL_PASS")
            return absent
        raise ValueError(f"Unknown capability: {capability}")

    def require(self, capability: str) -> None:
        absent = self.missing(capability)
        if absent:
            raise ConfigurationError(capability, absent)
