"""
Source configuration loader for the job board adapters.

This module centralizes reading and validating source settings from
`config/sources.yml`. The CLI, the aggregator wiring and the tests all use
this helper to keep configuration handling consistent.

The file has two sections:

    providers:
      workable:
        adapter: workable
        enabled: true
        params: {location: United Kingdom}
    aggregator:
      per_source_total_cap: 1000
      max_workers: 3

Provider order in the file is the order results are concatenated in.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .adapters import HiringCafeAdapter, MockAdapter, SmartRecruitersAdapter, WorkableAdapter
from .base import SourceAdapter

logger = logging.getLogger(__name__)

DEFAULT_PER_SOURCE_TOTAL_CAP = 1000

ADAPTER_REGISTRY: Mapping[str, type[SourceAdapter]] = MappingProxyType({
    "workable": WorkableAdapter,
    "smartrecruiters": SmartRecruitersAdapter,
    "hiringcafe": HiringCafeAdapter,
    "mock": MockAdapter,
})


@dataclass
class ProviderConfig:
    """Configuration for a single source provider."""

    adapter: str
    enabled: bool = True
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class AggregatorConfig:
    """Fan-out settings shared by all providers."""

    per_source_total_cap: int = DEFAULT_PER_SOURCE_TOTAL_CAP
    max_workers: int | None = None


@dataclass
class SourcesConfig:
    """Everything `config/sources.yml` describes."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    aggregator: AggregatorConfig = field(default_factory=AggregatorConfig)


def _project_root() -> Path:
    """Return the project root path based on this file's location."""
    return Path(__file__).resolve().parent.parent.parent


def load_sources_config(config_path: str | None = None) -> SourcesConfig:
    """
    Load provider and aggregator configuration from YAML file.

    Args:
        config_path: Optional override for the config file path. When omitted,
            the function reads `config/sources.yml` relative to the project root.

    Returns:
        SourcesConfig with providers keyed by name, in file order.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If the YAML file cannot be parsed or has invalid structure.
    """
    path = Path(config_path) if config_path else _project_root() / "config" / "sources.yml"
    if not path.exists():
        logger.error("Sources configuration file not found: %s", path)
        raise FileNotFoundError(f"Sources configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            raw_config: Mapping[str, Any] | None = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse sources configuration: %s", exc)
        raise ValueError(f"Invalid YAML in sources configuration: {exc}") from exc

    if not raw_config:
        logger.warning("Sources configuration file is empty: %s", path)
        return SourcesConfig()

    providers_section = raw_config.get("providers")
    if not isinstance(providers_section, Mapping):
        raise ValueError("`providers` section is missing or invalid in sources configuration")

    providers: dict[str, ProviderConfig] = {}
    for provider_name, provider_data in providers_section.items():
        if not isinstance(provider_data, Mapping):
            raise ValueError(f"Invalid provider configuration for '{provider_name}'")

        adapter = provider_data.get("adapter")
        if not isinstance(adapter, str) or not adapter.strip():
            raise ValueError(f"Provider '{provider_name}' must define a non-empty `adapter` string")
        if adapter not in ADAPTER_REGISTRY:
            raise ValueError(
                f"Provider '{provider_name}' uses unknown adapter '{adapter}' "
                f"(known: {', '.join(sorted(ADAPTER_REGISTRY))})"
            )

        enabled = bool(provider_data.get("enabled", True))
        params = provider_data.get("params") or {}
        if not isinstance(params, Mapping):
            raise ValueError(f"`params` for provider '{provider_name}' must be a mapping")

        providers[provider_name] = ProviderConfig(
            adapter=adapter,
            enabled=enabled,
            params=dict(params),
        )

    aggregator = _parse_aggregator_section(raw_config.get("aggregator"))

    logger.info(
        "Loaded sources configuration",
        extra={
            "sources_count": len(providers),
            "enabled_sources": [name for name, cfg in providers.items() if cfg.enabled],
            "per_source_total_cap": aggregator.per_source_total_cap,
        },
    )
    return SourcesConfig(providers=providers, aggregator=aggregator)


def _parse_aggregator_section(section: Any) -> AggregatorConfig:
    if section is None:
        return AggregatorConfig()
    if not isinstance(section, Mapping):
        raise ValueError("`aggregator` section must be a mapping")

    cap = section.get("per_source_total_cap", DEFAULT_PER_SOURCE_TOTAL_CAP)
    if isinstance(cap, bool) or not isinstance(cap, int) or cap < 0:
        raise ValueError("`per_source_total_cap` must be a non-negative integer")

    max_workers = section.get("max_workers")
    if max_workers is not None and (
        isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
    ):
        raise ValueError("`max_workers` must be a positive integer")

    return AggregatorConfig(per_source_total_cap=cap, max_workers=max_workers)


def build_adapters(config: SourcesConfig) -> list[SourceAdapter]:
    """
    Instantiate every enabled provider, in configuration order.

    ``params`` are passed to the adapter constructor as keyword arguments.

    Raises:
        ValueError: If a provider's params are not accepted by its adapter.
    """
    adapters: list[SourceAdapter] = []
    for name, provider in config.providers.items():
        if not provider.enabled:
            logger.debug("Skipping disabled provider", extra={"provider": name})
            continue

        adapter_cls = ADAPTER_REGISTRY[provider.adapter]
        try:
            adapters.append(adapter_cls(**provider.params))
        except TypeError as exc:
            raise ValueError(f"Invalid params for provider '{name}': {exc}") from exc

    return adapters


__all__ = [
    "ADAPTER_REGISTRY",
    "AggregatorConfig",
    "ProviderConfig",
    "SourcesConfig",
    "build_adapters",
    "load_sources_config",
]
