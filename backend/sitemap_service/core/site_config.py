"""
Loading of the site configuration file
"""

from pydantic import ValidationError
from pathlib import Path
import logging

from sitemap_service.core.exceptions import ConfigurationError
from sitemap_service.schemas.site import SiteConfig

logger = logging.getLogger(__name__)


def load_site_config(path) -> SiteConfig:
    """
    Load and validate a site configuration JSON file

    Args:
        path: Path to the JSON file

    Returns:
        Validated SiteConfig

    Raises:
        ConfigurationError: if the file is missing or invalid
    """
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read site config {config_path}: {e}") from e

    try:
        config = SiteConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid site config {config_path}: {e}") from e

    logger.info(
        f"Loaded site config {config_path}: {len(config.locales)} locales, "
        f"{len(config.static_routes)} static routes"
    )
    return config
