"""Configuration management for the browser interaction driver."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class BrowserConfig:
    """Configuration for the browser."""

    browser_type: str = "local"  # "local" or "cdp"
    headless: bool = True
    width: int = 1024
    height: int = 720
    slow_mo: int = 0  # ms between engine operations, useful when headed
    cdp_endpoint: Optional[str] = None


@dataclass
class ServerConfig:
    """Configuration for the HTTP transport."""

    host: str = "0.0.0.0"
    port: int = 8270
    log_level: str = "INFO"


@dataclass
class Config:
    """Main configuration container."""

    browser: BrowserConfig
    server: ServerConfig

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables with fallbacks."""
        # Detect container environment
        is_container = os.path.exists("/.dockerenv") or os.getenv("CONTAINER") == "true"

        headless = is_container or os.getenv("BROWSER_DRIVER_HEADLESS", "true").lower() == "true"
        browser_config = BrowserConfig(
            browser_type=os.getenv("BROWSER_DRIVER_TYPE", "local").lower(),
            headless=headless,
            width=int(os.getenv("BROWSER_DRIVER_WIDTH", "1024")),
            height=int(os.getenv("BROWSER_DRIVER_HEIGHT", "720")),
            slow_mo=int(os.getenv("BROWSER_DRIVER_SLOW_MO", "0" if headless else "100")),
            cdp_endpoint=os.getenv("BROWSER_DRIVER_CDP_ENDPOINT"),
        )

        server_config = ServerConfig(
            host=os.getenv("BROWSER_DRIVER_HOST", "0.0.0.0"),
            port=int(os.getenv("BROWSER_DRIVER_PORT", "8270")),
            log_level=os.getenv("BROWSER_DRIVER_LOG_LEVEL", "INFO").upper(),
        )

        return cls(browser=browser_config, server=server_config)


# Global configuration instance
config = Config.from_env()
