"""Application composition root.

This module wires together configuration, the operator registry and the pipeline components. The
registry and settings are built once here and shared by every component.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.config.settings import Settings
from src.nl.builder import QueryBuilder
from src.nl.mapper import ConceptMapper
from src.nl.parser import NaturalLanguageParser
from src.validation.registry import OperatorRegistry, default_registry
from src.validation.validator import QueryValidator


@dataclass(frozen=True)
class App:
    """Shared application dependencies."""

    settings: Settings
    registry: OperatorRegistry
    parser: NaturalLanguageParser
    mapper: ConceptMapper
    validator: QueryValidator
    builder: QueryBuilder


def create_app(settings: Settings, registry: OperatorRegistry | None = None) -> App:
    """Create the application container."""

    registry = registry or default_registry()
    mapper = ConceptMapper(registry)
    validator = QueryValidator(registry, settings)
    return App(
        settings=settings,
        registry=registry,
        parser=NaturalLanguageParser(),
        mapper=mapper,
        validator=validator,
        builder=QueryBuilder(mapper, validator),
    )
