import json
import logging
import os

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


class ApiConfig(BaseModel):
    title: str = Field(default="TikTok Resolver API", description="API title")
    description: str = Field(default="Resolve share links and proxy media downloads", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class UpstreamConfig(BaseModel):
    platform_domain: str = Field(default="www.tiktok.com", description="Public web host")
    api_host: str = Field(default="api16-normal-c-useast1a.tiktokv.com", description="Internal API host")
    api_user_agent: str = Field(default="okhttp/3.14.9", description="User-Agent sent to the internal API")
    browser_user_agent: str = Field(default=CHROME_UA, description="User-Agent for page and media fetches")
    timeout_seconds: float = Field(default=15.0, gt=0, description="Timeout for API and page requests")

    @property
    def platform_origin(self) -> str:
        return f"https://{self.platform_domain}"


class ProxyConfig(BaseModel):
    max_attempts: int = Field(default=3, ge=1, le=10, description="Download attempts before giving up")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Per-attempt timeout")
    max_redirects: int = Field(default=10, ge=0, description="Redirect hops followed per attempt")
    backoff_base_ms: int = Field(default=1000, ge=0, description="Backoff base delay in milliseconds")
    cookie_attempt: int = Field(default=3, ge=1, description="First attempt that sends synthetic cookies")
    default_filename: str = Field(default="tiktok-video.mp4", description="Filename used when none is given")


class SecurityConfig(BaseModel):
    enable_ssrf_protection: bool = Field(default=True, description="Enable SSRF protection for proxied downloads")
    allow_private_ips: bool = Field(default=False, description="Allow private IP ranges")
    allow_localhost: bool = Field(default=False, description="Allow localhost access")


class Config(BaseSettings):
    """Main configuration model"""
    model_config = SettingsConfigDict(env_prefix="TTRESOLVE_", env_nested_delimiter="__")

    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @classmethod
    def load_from_file(cls, config_path: str = "config.json") -> "Config":
        """Load configuration from JSON file"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            logger.info(f"Configuration loaded from {config_path}")
            return cls(**config_data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using environment/default configuration")
            return cls()


def load_config() -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    if os.path.exists(CONFIG_PATH):
        return Config.load_from_file(CONFIG_PATH)
    return Config()


config = load_config()
