"""Configuration management for the legislative graph explorer."""

import os
from functools import lru_cache
from pydantic import BaseModel
from dotenv import load_dotenv


class Settings(BaseModel):
    """Explorer settings loaded from environment variables."""

    # Remote services
    graph_api_url: str = "http://localhost:4000/api/explore"
    search_api_url: str = "http://localhost:4000/api/search"
    explorations_api_url: str = "http://localhost:4000/api/explorations"
    share_base_url: str = "http://localhost:4000"
    api_key: str | None = None
    request_timeout: float | None = None  # None = wait indefinitely

    # Viewport used to seed new node positions
    viewport_width: float = 800.0
    viewport_height: float = 500.0

    # Visual radius range for degree weighting
    min_node_radius: float = 6.0
    max_node_radius: float = 24.0

    # Cluster flow defaults
    cluster_limit: int = 50
    cluster_min_similarity: float = 0.3

    # Drop results that resolve after a destructive reset
    discard_stale_results: bool = True

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "text"  # "json" or "text"
    log_module_levels: dict[str, str] = {}  # Module-specific log levels


def _parse_pair(raw: str, sep: str) -> tuple[float, float] | None:
    """Parse "a<sep>b" into two floats, None when malformed."""
    parts = [p.strip() for p in raw.split(sep)]
    if len(parts) != 2:
        return None
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        return None


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment, cached for performance."""
    load_dotenv()

    defaults = Settings()

    # Parse module-specific log levels from env var (format: "module1:DEBUG,module2:INFO")
    module_levels = {}
    module_levels_str = os.getenv("LOG_MODULE_LEVELS", "")
    if module_levels_str:
        for item in module_levels_str.split(","):
            if ":" in item:
                module, level = item.split(":", 1)
                module_levels[module.strip()] = level.strip()

    viewport = _parse_pair(os.getenv("EXPLORER_VIEWPORT", ""), "x") or (
        defaults.viewport_width, defaults.viewport_height
    )
    radius = _parse_pair(os.getenv("EXPLORER_NODE_RADIUS", ""), ",") or (
        defaults.min_node_radius, defaults.max_node_radius
    )

    timeout_str = os.getenv("EXPLORER_REQUEST_TIMEOUT", "")

    return Settings(
        graph_api_url=os.getenv("EXPLORER_GRAPH_API_URL", defaults.graph_api_url),
        search_api_url=os.getenv("EXPLORER_SEARCH_API_URL", defaults.search_api_url),
        explorations_api_url=os.getenv("EXPLORER_EXPLORATIONS_API_URL", defaults.explorations_api_url),
        share_base_url=os.getenv("EXPLORER_SHARE_BASE_URL", defaults.share_base_url),
        api_key=os.getenv("EXPLORER_API_KEY") or None,
        request_timeout=float(timeout_str) if timeout_str else None,
        viewport_width=viewport[0],
        viewport_height=viewport[1],
        min_node_radius=radius[0],
        max_node_radius=radius[1],
        cluster_limit=int(os.getenv("EXPLORER_CLUSTER_LIMIT", str(defaults.cluster_limit))),
        cluster_min_similarity=float(
            os.getenv("EXPLORER_CLUSTER_MIN_SIMILARITY", str(defaults.cluster_min_similarity))
        ),
        discard_stale_results=os.getenv("EXPLORER_DISCARD_STALE_RESULTS", "true").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
        log_module_levels=module_levels,
    )
