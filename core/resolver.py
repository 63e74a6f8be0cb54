"""
KGP - Property Resolver
Resolve propriedades ``kgp.*`` a partir de camadas (override, env,
gradle.properties do projeto e dos diretórios pais até o root).
"""

import logging
import os
import re
import string
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from .models import KgpConfig, PropertyCatalog, PropertyType, enum_label


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

PROPERTIES_FILENAME = "gradle.properties"
ENV_PREFIX = "ORG_GRADLE_PROJECT_"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


# =============================================================================
# Exceções
# =============================================================================

class InvalidPropertyValueError(ValueError):
    """Valor de enum não reconhecido."""

    def __init__(self, key: str, value: str, valid_values: List[str], label: str):
        self.key = key
        self.value = value
        self.valid_values = valid_values
        super().__init__(
            f"Invalid {label} value: {value}. Valid values are: {', '.join(valid_values)}"
        )


class UnknownPropertyError(ValueError):
    """Chaves ``kgp.*`` que não fazem parte do catálogo."""

    def __init__(self, keys: List[str]):
        self.keys = keys
        super().__init__(f"Unknown kgp properties: {', '.join(keys)}")


# =============================================================================
# Parsing de .properties
# =============================================================================

def parse_properties(text: str) -> Dict[str, str]:
    """
    Parseia o conteúdo de um arquivo ``.properties`` (formato de
    ``java.util.Properties``).

    Suporta:
    - comentários (``#`` e ``!`` como primeiro caractere não branco)
    - separadores ``=``, ``:`` ou espaço em branco, com brancos em volta
    - continuação de linha com um número ímpar de ``\\`` no final
    - escapes (``\\:``, ``\\=``, ``\\ ``, ``\\t``, ``\\uXXXX``...)

    Raises:
        ValueError: escape ``\\uXXXX`` malformado
    """
    result: Dict[str, str] = {}
    logical: Optional[str] = None

    for raw_line in _LINE_BREAK.split(text):
        line = raw_line.lstrip(_WHITESPACE)

        if logical is None:
            if not line or line[0] in "#!":
                continue
            logical = ""

        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            logical += line[:-1]
            continue

        key, value = _split_entry(logical + line)
        result[key] = value
        logical = None

    if logical is not None:
        key, value = _split_entry(logical)
        result[key] = value

    return result


def _split_entry(line: str) -> Tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1

    key = line[:index]
    value = line[index:].lstrip(_WHITESPACE)
    if value and value[0] in _SEPARATORS:
        value = value[1:].lstrip(_WHITESPACE)

    return _unescape(key), _unescape(value)


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text

    chars: List[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        index += 1
        if char != "\\":
            chars.append(char)
            continue
        if index == len(text):
            break

        char = text[index]
        index += 1
        if char == "u":
            digits = text[index:index + 4]
            if len(digits) != 4 or any(c not in string.hexdigits for c in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}")
            chars.append(chr(int(digits, 16)))
            index += 4
        else:
            chars.append(_ESCAPES.get(char, char))

    return "".join(chars)


def load_properties_file(path: Path) -> Dict[str, str]:
    """Lê um gradle.properties; arquivo ausente resulta em camada vazia."""
    if not path.is_file():
        return {}

    logger.debug("Loading properties from %s", path)
    return parse_properties(path.read_text(encoding="utf-8"))


def parse_boolean(value: Optional[str]) -> Optional[bool]:
    """'true' (qualquer caixa) -> True; qualquer outra string -> False."""
    if value is None:
        return None
    return value.lower() == "true"


# =============================================================================
# Property Source
# =============================================================================

class PropertySource:
    """Cadeia ordenada de camadas chave -> valor; a primeira que tiver a chave vence."""

    def __init__(self, layers: Iterable[Mapping[str, str]]):
        self.layers: List[Mapping[str, str]] = list(layers)

    @classmethod
    def for_project(
        cls,
        project_dir: Path,
        root_dir: Optional[Path] = None,
        overrides: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PropertySource":
        """
        Monta a cadeia de um projeto.

        Args:
            project_dir: Diretório do projeto
            root_dir: Diretório do root project (default: project_dir)
            overrides: Valores explícitos (-P key=value)
            environ: Ambiente (default: os.environ)

        Returns:
            PropertySource com precedência override > env > projeto > ... > root
        """
        project_dir = Path(project_dir).absolute()
        root_dir = Path(root_dir).absolute() if root_dir else project_dir
        environ = os.environ if environ is None else environ

        layers: List[Mapping[str, str]] = [dict(overrides or {})]
        layers.append({
            name[len(ENV_PREFIX):]: value
            for name, value in environ.items()
            if name.startswith(ENV_PREFIX)
        })

        for directory in _project_chain(project_dir, root_dir):
            layers.append(load_properties_file(directory / PROPERTIES_FILENAME))

        return cls(layers)

    def get(self, key: str) -> Optional[str]:
        for layer in self.layers:
            if key in layer:
                return layer[key]
        return None

    def keys(self) -> List[str]:
        seen: List[str] = []
        for layer in self.layers:
            for key in layer:
                if key not in seen:
                    seen.append(key)
        return seen


def _project_chain(project_dir: Path, root_dir: Path) -> List[Path]:
    """Diretórios do projeto até o root (inclusive)."""
    chain = [project_dir]
    if project_dir == root_dir:
        return chain

    for parent in project_dir.parents:
        chain.append(parent)
        if parent == root_dir:
            return chain

    # projeto fora do root: apenas projeto e root
    return [project_dir, root_dir]


# =============================================================================
# Property Resolver
# =============================================================================

class PropertyResolver:
    """Resolve propriedades tipadas sobre um PropertySource."""

    def __init__(self, source: PropertySource):
        self.source = source

    def resolve_string(self, key: str) -> Optional[str]:
        """Valor bruto, ou None (nunca string vazia) quando ausente."""
        return self.source.get(key)

    def resolve_boolean(self, key: str) -> Optional[bool]:
        return parse_boolean(self.resolve_string(key))

    def resolve_enum(
        self,
        key: str,
        enum_type: Type[E],
        default: E,
        label: Optional[str] = None,
    ) -> E:
        """
        Resolve uma escolha enumerada.

        Raises:
            InvalidPropertyValueError: valor presente que não é membro de enum_type
        """
        raw = self.resolve_string(key)
        if raw is None:
            return default

        try:
            return enum_type[raw.upper()]
        except KeyError as e:
            raise InvalidPropertyValueError(
                key,
                raw,
                [member.name.lower() for member in enum_type],
                label or enum_label(enum_type),
            ) from e


# =============================================================================
# Config Builder
# =============================================================================

def build_config(resolver: PropertyResolver, catalog: PropertyCatalog) -> KgpConfig:
    """
    Monta o KgpConfig a partir do catálogo.

    Raises:
        UnknownPropertyError: chave ``kgp.*`` fora do catálogo
        InvalidPropertyValueError: valor de enum inválido
    """
    unknown = catalog.unknown_keys(resolver.source.keys())
    if unknown:
        raise UnknownPropertyError(unknown)

    values = {}
    for spec in catalog.properties:
        if spec.type == PropertyType.BOOLEAN:
            parsed = resolver.resolve_boolean(spec.key)
            value = spec.default if parsed is None else parsed
        elif spec.type == PropertyType.ENUM:
            value = resolver.resolve_enum(spec.key, spec.enum_type, spec.default)
        else:
            raw = resolver.resolve_string(spec.key)
            value = spec.default if raw is None else raw

        values[spec.field_name] = value

    config = KgpConfig(**values)
    logger.debug("Resolved configuration: %s", config)
    return config


def resolve_config(
    project_dir: Path,
    root_dir: Optional[Path] = None,
    overrides: Optional[Mapping[str, str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    catalog: Optional[PropertyCatalog] = None,
) -> KgpConfig:
    """Helper: monta source, resolver e config de uma vez."""
    if catalog is None:
        from .properties_loader import load_default_properties
        catalog = load_default_properties()

    source = PropertySource.for_project(project_dir, root_dir, overrides, environ)
    return build_config(PropertyResolver(source), catalog)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'InvalidPropertyValueError',
    'UnknownPropertyError',
    'PropertySource',
    'PropertyResolver',
    'parse_properties',
    'load_properties_file',
    'parse_boolean',
    'build_config',
    'resolve_config',
]
