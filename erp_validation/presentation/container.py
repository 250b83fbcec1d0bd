"""Dependency Injection Container.

This module implements a simple DI container using dataclasses. The
container holds all dependencies of one form's validation engine and
provides factory functions for creating the full dependency graph.

Pattern: Service Locator + Factory
- Single place to wire all dependencies
- Easy to test (can inject fakes)
- One container per form instance, nothing shared between forms
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from ..config_loader import EngineSettings, load_form_config, parse_form_config
from ..engine import SummaryCallback, ValidationEngine
from ..validation.rule_registry import RuleRegistry, Today


@dataclass
class EngineContainer:
    """Dependency Injection Container for one form.

    Attributes:
        config: Validated form configuration
        settings: Engine settings from the config plus overrides

        # Validation layer
        registry: Rule registry built from the configuration

        # Application layer
        classifier: Error classifier
        cache: Result cache
        tracker: Performance tracker

        # Presentation layer
        engine: Validation engine facade

    Example:
        >>> container = create_container("holiday")
        >>> engine = container.engine
        >>> # All dependencies automatically wired
    """

    config: dict[str, Any]
    settings: EngineSettings

    # Validation layer
    registry: Optional[RuleRegistry] = None

    # Application layer
    classifier: Optional[Any] = None  # ErrorClassifier
    cache: Optional[Any] = None  # ResultCache
    tracker: Optional[Any] = None  # PerformanceTracker

    # Presentation layer
    engine: Optional[ValidationEngine] = None


def create_container(
    form: Union[str, Path, dict[str, Any]],
    *,
    today: Today = None,
    clock: Callable[[], float] = time.time,
    timer: Callable[[], float] = time.perf_counter,
    cache_clock: Callable[[], float] = time.monotonic,
    on_summary_change: Optional[SummaryCallback] = None,
    **settings_overrides: Any,
) -> EngineContainer:
    """Factory function to create a fully-wired container.

    Dependencies are created in order:
    1. Configuration and rule registry
    2. Application services (depend on the registry)
    3. The engine (depends on everything)

    Args:
        form: Shipped form name ("holiday", "daily_work"), a YAML path, or
            an already parsed configuration dict
        today: Clock for date-relative rules (defaults to date.today)
        clock: Wall clock for result timestamps
        timer: High resolution timer for durations
        cache_clock: Monotonic clock for cache expiry
        on_summary_change: Called with every newly published summary
        **settings_overrides: EngineSettings fields overriding the file

    Returns:
        Fully-wired EngineContainer

    Raises:
        FileNotFoundError: If the configuration file does not exist
        RuleConfigError: If the configuration is invalid
    """
    # Importing the forms package registers the shipped rule types
    from .. import forms  # noqa: F401

    if isinstance(form, dict):
        config = parse_form_config(form)
    else:
        config = load_form_config(form)

    settings = EngineSettings.from_config(config, **settings_overrides)
    container = EngineContainer(config=config, settings=settings)

    container.registry = _create_registry(config, today)
    container.classifier = _create_classifier(container.registry)
    container.cache = _create_cache(settings, container.registry, cache_clock)
    container.tracker = _create_tracker(settings, timer)

    container.engine = ValidationEngine(
        container.registry,
        settings,
        classifier=container.classifier,
        cache=container.cache,
        tracker=container.tracker,
        clock=clock,
        timer=timer,
        today=today,
        on_summary_change=on_summary_change,
    )
    return container


def create_engine(
    form: Union[str, Path, dict[str, Any]], **kwargs: Any
) -> ValidationEngine:
    """Create an independent validation engine for one form instance.

    Accepts the same arguments as create_container.

    Example:
        >>> engine = create_engine("holiday", debounce_delay=0.1)
        >>> summary = await engine.validate_form(record, existing_holidays)
    """
    return create_container(form, **kwargs).engine


def _create_registry(config: dict[str, Any], today: Today) -> RuleRegistry:
    """Create rule registry.

    Returns:
        RuleRegistry with the form's immutable rule set
    """
    return RuleRegistry.from_config(config, today=today)


def _create_classifier(registry: RuleRegistry) -> Any:
    """Create error classifier.

    Returns:
        ErrorClassifier loaded with the registry's classification table
    """
    from ..application.services import ErrorClassifier

    return ErrorClassifier.from_registry(registry)


def _create_cache(
    settings: EngineSettings, registry: RuleRegistry, clock: Callable[[], float]
) -> Any:
    """Create result cache.

    Returns:
        ResultCache keyed on each field's declared dependencies
    """
    from ..application.services import ResultCache

    return ResultCache(
        ttl=settings.cache_ttl,
        max_entries=settings.cache_max_entries,
        dependencies=registry.dependency_map(),
        clock=clock,
    )


def _create_tracker(settings: EngineSettings, timer: Callable[[], float]) -> Any:
    """Create performance tracker.

    Returns:
        PerformanceTracker, disabled when track_performance is off
    """
    from ..application.services import PerformanceTracker

    return PerformanceTracker(
        history_size=settings.history_size,
        clock=timer,
        enabled=settings.track_performance,
    )
