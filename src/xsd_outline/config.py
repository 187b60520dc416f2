"""Runtime configuration for the outline engine.

Values can be set programmatically or pulled from the environment:

    XSD_OUTLINE_CONFIG     Comma separated ``key=value`` overrides, e.g.
                           ``autorefresh=false,search_max_results=5``
    XSD_OUTLINE_WORKSPACE  Directory searched for imports that cannot be
                           resolved relative to the importing document.

Example:
        from xsd_outline.config import OutlineConfig

        config = OutlineConfig.from_env()
        if not config.autorefresh:
                print("Outline rebuilds only on explicit refresh")
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class OutlineConfig:
    """Configuration for document loading and recompute behavior.

    Args:
        autorefresh: Rebuild the outline when the source text changes. When
            False only a change of active document or an explicit refresh
            triggers a rebuild.
        cache_imports: Reuse parsed imported documents while their
            modification time is unchanged.
        search_max_results: Upper bound on workspace filename search hits.
        search_timeout: Seconds a workspace filename search may run.
        workspace_root: Root directory for workspace filename search.
    """

    autorefresh: bool = True
    cache_imports: bool = True
    search_max_results: int = 20
    search_timeout: float = 2.0
    workspace_root: Optional[str] = None

    @classmethod
    def from_env(cls) -> "OutlineConfig":
        """Build a config from ``XSD_OUTLINE_CONFIG`` / ``XSD_OUTLINE_WORKSPACE``."""
        config = cls(workspace_root=os.getenv("XSD_OUTLINE_WORKSPACE") or None)
        config_str = os.getenv("XSD_OUTLINE_CONFIG", "")
        if config_str:
            config.apply(_parse_pairs(config_str))
        return config

    def apply(self, overrides: Dict[str, Any]) -> None:
        """Apply overrides, coercing string values to the field's type.

        Unknown keys are ignored with a warning.
        """
        known = {f.name: f for f in fields(self)}
        for key, value in overrides.items():
            if key not in known:
                logger.warning(f"Ignoring unknown outline config key: {key}")
                continue
            if value is None:
                setattr(self, key, None)
                continue
            current = getattr(type(self), key, None)
            if isinstance(current, bool):
                if isinstance(value, str):
                    value = value.strip().lower() == "true"
                setattr(self, key, bool(value))
            elif isinstance(current, int):
                setattr(self, key, int(value))
            elif isinstance(current, float):
                setattr(self, key, float(value))
            else:
                setattr(self, key, value)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_pairs(config_str: str) -> Dict[str, str]:
    pairs: Dict[str, str] = {}
    for pair in config_str.split(","):
        if "=" in pair:
            key, value = pair.split("=", 1)
            pairs[key.strip()] = value.strip()
    return pairs
