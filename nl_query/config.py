"""
Configuration for the natural-language query service.

Values come from environment variables, optionally loaded from a .env file
next to the package or in the current directory.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from parent directory or current directory
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv()


@dataclass
class BackendConfig:
    """PostgREST-compatible backend configuration."""

    url: str = "http://localhost:3000"
    api_key: Optional[str] = None
    rest_path: str = "/rest/v1"
    timeout_ms: int = 10000

    def __post_init__(self):
        """Auto-detect from environment."""
        env_url = os.environ.get("SUPABASE_URL")
        if env_url:
            self.url = env_url

        if self.api_key is None:
            self.api_key = os.environ.get("SUPABASE_ANON_KEY")

        env_timeout = os.environ.get("BACKEND_TIMEOUT_MS")
        if env_timeout:
            self.timeout_ms = int(env_timeout)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def table_url(self, table: str) -> str:
        """Construct the REST URL for a table."""
        base = self.url.rstrip('/')
        rest_path = '/' + self.rest_path.strip('/')
        return f"{base}{rest_path}/{table}"

    def get_headers(self) -> dict:
        """Get HTTP headers for backend requests."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 5002
    debug: bool = False

    def __post_init__(self):
        """Auto-detect from environment."""
        self.host = os.environ.get("NL_QUERY_HOST", self.host)
        self.port = int(os.environ.get("NL_QUERY_PORT", self.port))
        self.debug = os.environ.get("DEBUG", str(self.debug)).lower() == "true"


@dataclass
class NLQueryConfig:
    """Complete configuration for the query service."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    vocabulary_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "NLQueryConfig":
        """Create configuration from environment variables."""
        return cls(
            backend=BackendConfig(),
            server=ServerConfig(),
            vocabulary_path=os.environ.get("NL_QUERY_VOCABULARY") or None,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.backend.url:
            issues.append("Backend URL not configured (set SUPABASE_URL)")

        if not self.backend.api_key:
            issues.append("Backend API key not configured (set SUPABASE_ANON_KEY)")

        if self.backend.timeout_ms <= 0:
            issues.append("Backend timeout must be positive (BACKEND_TIMEOUT_MS)")

        if self.vocabulary_path and not Path(self.vocabulary_path).exists():
            issues.append(f"Vocabulary file not found: {self.vocabulary_path}")

        return issues


# Singleton instance
_config: Optional[NLQueryConfig] = None


def get_config() -> NLQueryConfig:
    """Get singleton configuration instance."""
    global _config
    if _config is None:
        _config = NLQueryConfig.from_env()
    return _config
