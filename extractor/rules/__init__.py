"""Bundled rule tables (site selectors, marker phrases, normalization patterns).

The tables are YAML data so that a site redesign means editing data, not code.
A directory configured as ``strategies.rules_path`` may provide replacement
copies of either file; files it does not provide fall back to the bundled ones.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from extractor.config.exceptions import ConfigurationError

RULES_DIR = Path(__file__).parent

SITES_FILE = "sites.yaml"
NORMALIZATION_FILE = "normalization.yaml"


def read_rules_file(name: str, override_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read one rule table, preferring an override directory.

    Args:
        name: File name inside the rules directory
        override_dir: Optional directory with replacement tables

    Returns:
        Parsed YAML mapping

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping
    """
    path = RULES_DIR / name
    if override_dir is not None and (Path(override_dir) / name).exists():
        path = Path(override_dir) / name

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to load rule table {path}: {e}",
            suggestions=["Check strategies.rules_path and the YAML syntax of the table"],
            source=path,
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Rule table must contain a mapping", source=path)

    return data
