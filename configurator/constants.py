"""Infrastructure and technical constants."""

from typing import Final

# Technical configuration constants
DEFAULT_PORT: Final = 3000
DEFAULT_DATABASE_URL: Final = "sqlite:///./configurator.db"
API_PREFIX: Final = "/api"
