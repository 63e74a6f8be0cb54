"""
KGP - Core Data Models
Estruturas de dados da configuração e do plano de convenções.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Type
import re


# =============================================================================
# Enums
# =============================================================================

class PropertyType(str, Enum):
    """Tipos de propriedade suportados pelo resolver."""
    STRING = "string"
    BOOLEAN = "boolean"
    ENUM = "enum"


class ComposeDependencies(str, Enum):
    """Bundle de dependências Compose adicionado aos projetos Android."""
    NONE = "none"
    MATERIAL = "material"
    MATERIAL3 = "material3"
    BUNDLE = "bundle"


# Enums que podem ser referenciados em config/properties.yaml
ENUM_TYPES: Dict[str, Type[Enum]] = {
    "ComposeDependencies": ComposeDependencies,
}


def enum_label(enum_type: Type[Enum]) -> str:
    """ComposeDependencies -> 'compose dependencies'."""
    words = re.findall(r"[A-Z][a-z0-9]*", enum_type.__name__)
    return " ".join(word.lower() for word in words)


# =============================================================================
# Property Catalog
# =============================================================================

@dataclass
class PropertySpec:
    """Definição de uma propriedade ``kgp.*`` reconhecida."""
    key: str
    field_name: str
    type: PropertyType
    description: str
    default: Any = None
    enum_type: Optional[Type[Enum]] = None

    def __post_init__(self):
        """Valida combinação de tipo e default."""
        if self.type == PropertyType.ENUM:
            if self.enum_type is None:
                raise ValueError(f"Propriedade {self.key}: type='enum' requer 'enum'")
            if not isinstance(self.default, self.enum_type):
                raise ValueError(
                    f"Propriedade {self.key}: default deve ser membro de {self.enum_type.__name__}"
                )
        elif self.type == PropertyType.BOOLEAN:
            if not isinstance(self.default, bool):
                raise ValueError(f"Propriedade {self.key}: default deve ser booleano")
        elif self.default is not None and not isinstance(self.default, str):
            raise ValueError(f"Propriedade {self.key}: default deve ser string")

    @property
    def default_display(self) -> str:
        """Default como aparece em gradle.properties."""
        if self.default is None:
            return "-"
        if isinstance(self.default, bool):
            return "true" if self.default else "false"
        if isinstance(self.default, Enum):
            return self.default.name.lower()
        return str(self.default)


@dataclass
class PropertyCatalog:
    """Enumeração explícita de todas as propriedades conhecidas."""
    version: str
    properties: List[PropertySpec]
    metadata: Dict[str, Any] = field(default_factory=dict)

    PREFIX = "kgp."

    def get(self, key: str) -> Optional[PropertySpec]:
        """Busca uma propriedade pela chave."""
        for spec in self.properties:
            if spec.key == key:
                return spec
        return None

    @property
    def keys(self) -> List[str]:
        return [spec.key for spec in self.properties]

    def unknown_keys(self, keys) -> List[str]:
        """Chaves com prefixo ``kgp.`` que não estão no catálogo."""
        known = set(self.keys)
        return sorted(k for k in keys if k.startswith(self.PREFIX) and k not in known)


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class KgpConfig:
    """Configuração tipada, resolvida uma única vez por invocação."""
    auto_apply_dependency_management: bool = True
    auto_apply_dokka: bool = True
    auto_apply_kotlinter: bool = True
    auto_apply_kover: bool = True
    auto_configure_compose: bool = True
    compose_dependencies: ComposeDependencies = ComposeDependencies.NONE
    auto_configure_core_library_desugaring: bool = False
    auto_configure_publishing_properties: bool = True
    auto_configure_hilt_application: bool = True
    auto_configure_hilt_library: bool = False
    repository_password_env: str = "ARTIFACTORY_PASSWORD"
    repository_username_env: str = "ARTIFACTORY_USERNAME"
    repository_name: str = "Artifactory"
    repository_url: Optional[str] = None
    version_catalog_name: str = "libs"

    def to_dict(self) -> Dict[str, Any]:
        """Serializa KgpConfig para dict."""
        result: Dict[str, Any] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            result[name] = value.value if isinstance(value, Enum) else value
        return result


# =============================================================================
# Project / Conventions
# =============================================================================

@dataclass
class ProjectLayout:
    """Localização de um projeto dentro do build."""
    root_dir: Path
    project_dir: Path

    @property
    def is_root(self) -> bool:
        return self.project_dir.resolve() == self.root_dir.resolve()

    @property
    def root_name(self) -> str:
        return self.root_dir.resolve().name


@dataclass
class PublishingRepository:
    """Repositório maven usado pelas tasks de publicação."""
    name: str
    url: str
    username: Optional[str] = None
    password: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializa sem expor a senha."""
        return {
            "name": self.name,
            "url": self.url,
            "username": self.username,
            "password": "***" if self.password else None,
        }


@dataclass
class ConventionPlan:
    """O que as convenções de root aplicam para uma configuração."""
    config: KgpConfig
    plugins: List[str] = field(default_factory=list)
    tasks: List[str] = field(default_factory=list)
    group: Optional[str] = None
    version: Optional[str] = None
    repository: Optional[PublishingRepository] = None
    gradle_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializa ConventionPlan para dict."""
        return {
            "gradle_version": self.gradle_version,
            "plugins": list(self.plugins),
            "tasks": list(self.tasks),
            "publishing": {
                "group": self.group,
                "version": self.version,
                "repository": self.repository.to_dict() if self.repository else None,
            },
            "config": self.config.to_dict(),
        }


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Enums
    "PropertyType",
    "ComposeDependencies",
    "ENUM_TYPES",
    "enum_label",

    # Catalog
    "PropertySpec",
    "PropertyCatalog",

    # Configuration
    "KgpConfig",

    # Conventions
    "ProjectLayout",
    "PublishingRepository",
    "ConventionPlan",
]
