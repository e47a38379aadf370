"""
Configuration Management Module
Loads and manages application configuration from config.yaml
"""

from pathlib import Path
from typing import List
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    """Database configuration"""
    path: str = "./accountech.db"
    timeout: float = 30.0


class ApiConfig(BaseModel):
    """API configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = ["http://localhost:5173"]


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    file: str = "./logs/app.log"
    max_size: int = 10
    backup_count: int = 5
    console: bool = True
    colorize: bool = True


class VoucherConfig(BaseModel):
    """Voucher entry and numbering configuration"""
    number_width: int = Field(4, ge=1)
    prefix_length: int = Field(2, ge=1)
    recent_limit: int = Field(10, ge=1)
    balance_tolerance: float = Field(0.01, gt=0)
    max_number_retries: int = Field(3, ge=0)


class TaxConfig(BaseModel):
    """Flat-rate tax estimate shown on stock invoices"""
    rate: float = Field(18.0, ge=0)
    components: List[str] = Field(default_factory=lambda: ["CGST", "SGST"], min_length=1)


class SessionConfig(BaseModel):
    """Draft session housekeeping"""
    idle_timeout: int = Field(1800, ge=1)
    max_sessions: int = Field(500, ge=1)


class RetryConfig(BaseModel):
    """Retry configuration for transient database errors"""
    max_attempts: int = 3
    initial_delay: float = 0.1
    backoff_multiplier: float = 2.0
    max_delay: float = 2.0


class HealthConfig(BaseModel):
    """Health check configuration"""
    database_timeout: int = 2


class AppConfig(BaseSettings):
    """Main application configuration"""
    model_config = SettingsConfigDict(env_prefix="ACCOUNTECH_", env_nested_delimiter="__")

    database: DatabaseConfig = DatabaseConfig()
    api: ApiConfig = ApiConfig()
    logging: LoggingConfig = LoggingConfig()
    voucher: VoucherConfig = VoucherConfig()
    tax: TaxConfig = TaxConfig()
    sessions: SessionConfig = SessionConfig()
    retry: RetryConfig = RetryConfig()
    health: HealthConfig = HealthConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings
    ):
        # Environment variables win over values read from config.yaml
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load configuration from YAML file"""
    config_file = Path(config_path)
    
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
            return AppConfig(**config_data)
    
    return AppConfig()


def save_config(config: AppConfig, config_path: str = "config.yaml") -> None:
    """Save configuration to YAML file"""
    config_file = Path(config_path)
    
    with open(config_file, "w", encoding="utf-8") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, allow_unicode=True)


# Global configuration instance
config = load_config()
