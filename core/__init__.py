"""Core modules for KGP configuration."""

from .conventions import PreconditionError, plan_root_conventions, read_gradle_version
from .formatters import FormatterFactory
from .models import (
    ComposeDependencies,
    ConventionPlan,
    KgpConfig,
    ProjectLayout,
    PropertyCatalog,
    PropertySpec,
    PropertyType,
    PublishingRepository,
)
from .properties_loader import load_default_properties, load_properties
from .resolver import (
    InvalidPropertyValueError,
    PropertyResolver,
    PropertySource,
    UnknownPropertyError,
    build_config,
    resolve_config,
)

__all__ = [
    # Conventions
    "PreconditionError",
    "plan_root_conventions",
    "read_gradle_version",
    # Formatters
    "FormatterFactory",
    # Models
    "ComposeDependencies",
    "ConventionPlan",
    "KgpConfig",
    "ProjectLayout",
    "PropertyCatalog",
    "PropertySpec",
    "PropertyType",
    "PublishingRepository",
    # Loaders
    "load_default_properties",
    "load_properties",
    # Resolver
    "InvalidPropertyValueError",
    "PropertyResolver",
    "PropertySource",
    "UnknownPropertyError",
    "build_config",
    "resolve_config",
]
