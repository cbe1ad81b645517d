from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings.
    """
    model_config = SettingsConfigDict(env_prefix="HTTP_PROBE_", env_file=".env", extra="ignore")

    # Service Info
    service_name: str = "http-probe"
    environment: str = "local"
    log_level: str = "INFO"
    
    # API 
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    
    # Probe defaults
    expected_status: int = 200
    sla_threshold_ms: float = 1000.0
    request_timeout_s: Optional[float] = None  # None: no timeout
    
    # Report output
    console_sink_enabled: bool = True
    console_verbose: bool = True

settings = Settings()
