"""
Marketing platform registry - single source of truth for Metricool endpoints.

This module provides:
- YAML-based configuration loading and validation
- PlatformDefinition / TimelineMetric dataclasses
- Read-only lookup of platforms and their timeline metrics

YAML access is encapsulated here - no other module should read
marketing_metrics.yaml directly.

Usage:
    from core.marketing_registry import get_platform, list_platforms

    facebook = get_platform("facebook")
    followers = facebook.get_timeline("followers")   # metric="pageFollows"
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

logger = logging.getLogger(__name__)

HEX_COLOR_PATTERN = re.compile(r'^#[0-9A-Fa-f]{6}$')


# =============================================================================
# DEFINITIONS
# =============================================================================

@dataclass(frozen=True)
class TimelineMetric:
    """
    A Metricool timeline series for one platform.

    Attributes:
        key: Stable identifier used in portal URLs (e.g. "followers")
        metric: Metricool metric id sent as the `metric` query parameter
        display_name: Human-readable label
        color: Hex color for charts
    """
    key: str
    metric: str
    display_name: str
    color: str


@dataclass(frozen=True)
class PlatformDefinition:
    """
    A social/web platform tracked through Metricool.

    `params` holds extra query parameters for the platform request as
    (name, value) pairs.
    """
    name: str
    display_name: str
    color: str
    network: str
    endpoint: str
    params: Tuple[Tuple[str, str], ...]
    timelines: Tuple[TimelineMetric, ...]

    def get_timeline(self, key: str) -> TimelineMetric:
        """
        Raises:
            KeyError: If the platform has no timeline with this key.
        """
        for timeline in self.timelines:
            if timeline.key == key:
                return timeline
        raise KeyError(f"Unknown timeline '{key}' for platform '{self.name}'")


# =============================================================================
# YAML CONFIGURATION LOADING & VALIDATION
# =============================================================================

def _get_config_path() -> Path:
    """Get the path to the marketing configuration file."""
    return Path(__file__).parent / 'marketing_metrics.yaml'


def _load_yaml_config() -> Dict[str, Any]:
    config_path = _get_config_path()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Marketing config file not found", extra={'path': str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse marketing config", extra={'path': str(config_path), 'error': str(e)})
        raise


def _validate_color(owner: str, color: str) -> None:
    if not HEX_COLOR_PATTERN.match(color or ''):
        raise ValueError(f"'{owner}' has invalid color format: '{color}'")


def _parse_platform(raw: Dict[str, Any], index: int) -> PlatformDefinition:
    """
    Validate and parse one platform entry.

    Raises:
        ValueError: If required fields are missing or invalid
    """
    for field in ('name', 'endpoint', 'color'):
        if field not in raw:
            raise ValueError(f"Platform at index {index} is missing required field: '{field}'")
    _validate_color(raw['name'], raw['color'])

    timelines: List[TimelineMetric] = []
    for timeline_raw in raw.get('timelines') or []:
        if 'key' not in timeline_raw or 'metric' not in timeline_raw:
            raise ValueError(f"Timeline in platform '{raw['name']}' needs 'key' and 'metric'")
        color = timeline_raw.get('color', raw['color'])
        _validate_color(f"{raw['name']}.{timeline_raw['key']}", color)
        timelines.append(TimelineMetric(
            key=timeline_raw['key'],
            metric=timeline_raw['metric'],
            display_name=timeline_raw.get('display_name', timeline_raw['key'].title()),
            color=color,
        ))

    params = raw.get('params') or {}
    return PlatformDefinition(
        name=raw['name'],
        display_name=raw.get('display_name', raw['name'].title()),
        color=raw['color'],
        network=raw.get('network', raw['name']),
        endpoint=raw['endpoint'],
        params=tuple((str(k), str(v)) for k, v in params.items()),
        timelines=tuple(timelines),
    )


@lru_cache(maxsize=1)
def _load_registry() -> Tuple[Tuple[PlatformDefinition, ...], str]:
    """
    Load and cache the platform registry from YAML.

    Returns (platform definitions, timeline endpoint). Cached so the file is
    read once per process.
    """
    config = _load_yaml_config()
    platforms = tuple(
        _parse_platform(raw, i) for i, raw in enumerate(config.get('platforms', []))
    )
    timeline_endpoint = config.get('timeline_endpoint', '/v2/analytics/timelines')
    return platforms, timeline_endpoint


# =============================================================================
# PUBLIC API
# =============================================================================

def list_platforms() -> Dict[str, PlatformDefinition]:
    """All platforms keyed by name, in configuration order."""
    platforms, _ = _load_registry()
    return {p.name: p for p in platforms}


def get_platform(name: str) -> PlatformDefinition:
    """
    Look up a platform by name (case-insensitive).

    Raises:
        KeyError: If the platform is not configured
    """
    platform = list_platforms().get((name or '').strip().lower())
    if platform is None:
        raise KeyError(f"Unknown platform: '{name}'")
    return platform


def get_timeline_endpoint() -> str:
    _, timeline_endpoint = _load_registry()
    return timeline_endpoint


PLATFORM_NAMES: Tuple[str, ...] = tuple(list_platforms().keys())
