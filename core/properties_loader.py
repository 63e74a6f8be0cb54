"""
KGP - Properties Loader
Carrega e valida o catálogo de propriedades do arquivo YAML.
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Union
import yaml

from .models import (
    ENUM_TYPES,
    KgpConfig,
    PropertyCatalog,
    PropertySpec,
    PropertyType,
)


# =============================================================================
# Exceções Customizadas
# =============================================================================

class PropertiesLoadError(Exception):
    """Erro ao carregar arquivo de propriedades."""
    pass


class PropertyValidationError(Exception):
    """Erro de validação de uma propriedade específica."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Propriedade '{key}': {message}")


# =============================================================================
# Loader Principal
# =============================================================================

class PropertiesLoader:
    """
    Carrega o catálogo de propriedades do YAML.

    Responsabilidades:
    - Ler arquivo YAML
    - Validar estrutura
    - Converter para objetos tipados (PropertySpec, PropertyCatalog)
    - Garantir que cada propriedade corresponde a um campo de KgpConfig
    """

    REQUIRED_FIELDS = ['key', 'field', 'type', 'description']

    def load_from_file(self, filepath: Union[str, Path]) -> PropertyCatalog:
        """
        Carrega o catálogo de um arquivo YAML.

        Raises:
            PropertiesLoadError: Se não conseguir ler o arquivo
            PropertyValidationError: Se alguma propriedade for inválida
        """
        filepath = Path(filepath)

        if not filepath.is_file():
            raise PropertiesLoadError(f"Arquivo não encontrado: {filepath}")

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PropertiesLoadError(f"Erro ao parsear YAML: {e}")
        except OSError as e:
            raise PropertiesLoadError(f"Erro ao ler arquivo: {e}")

        return self.load_from_dict(data, source_file=str(filepath))

    def load_from_dict(self, data: Dict[str, Any], source_file: str = "unknown") -> PropertyCatalog:
        """Carrega o catálogo de um dicionário já parseado."""
        if not isinstance(data, dict):
            raise PropertiesLoadError("YAML deve conter um objeto no nível raiz")

        if not isinstance(data.get('properties'), list):
            raise PropertiesLoadError("Campo 'properties' deve ser uma lista")

        config_fields = {f.name for f in fields(KgpConfig)}
        specs: List[PropertySpec] = []
        keys_seen = set()
        fields_seen = set()

        for idx, entry in enumerate(data['properties']):
            if not isinstance(entry, dict):
                raise PropertyValidationError(f'property_#{idx}', "entrada deve ser um objeto")

            spec = self._load_property(entry, index=idx)

            if spec.key in keys_seen:
                raise PropertyValidationError(spec.key, "chave duplicada")
            if spec.field_name in fields_seen:
                raise PropertyValidationError(spec.key, f"campo '{spec.field_name}' duplicado")
            if spec.field_name not in config_fields:
                raise PropertyValidationError(
                    spec.key,
                    f"campo '{spec.field_name}' não existe em KgpConfig"
                )

            keys_seen.add(spec.key)
            fields_seen.add(spec.field_name)
            specs.append(spec)

        return PropertyCatalog(
            version=str(data.get('version', '1.0')),
            properties=specs,
            metadata={'source_file': source_file},
        )

    def _load_property(self, data: Dict[str, Any], index: int) -> PropertySpec:
        """Carrega uma propriedade individual."""
        for name in self.REQUIRED_FIELDS:
            if name not in data:
                key = data.get('key', f'property_#{index}')
                raise PropertyValidationError(key, f"Campo obrigatório '{name}' não encontrado")

        key = data['key']
        if not key.startswith(PropertyCatalog.PREFIX):
            raise PropertyValidationError(key, f"chave deve começar com '{PropertyCatalog.PREFIX}'")

        try:
            prop_type = PropertyType(data['type'])
        except ValueError:
            raise PropertyValidationError(
                key,
                f"Valor inválido para 'type': {data['type']}. "
                f"Valores válidos: {[t.value for t in PropertyType]}"
            )

        enum_type = None
        default = data.get('default')

        if prop_type == PropertyType.ENUM:
            enum_name = data.get('enum')
            if enum_name not in ENUM_TYPES:
                raise PropertyValidationError(
                    key,
                    f"Enum desconhecido: {enum_name}. Valores válidos: {sorted(ENUM_TYPES)}"
                )
            enum_type = ENUM_TYPES[enum_name]
            try:
                default = enum_type[str(default).upper()]
            except KeyError:
                raise PropertyValidationError(key, f"default inválido para {enum_name}: {default}")

        try:
            return PropertySpec(
                key=key,
                field_name=data['field'],
                type=prop_type,
                description=data['description'],
                default=default,
                enum_type=enum_type,
            )
        except ValueError as e:
            raise PropertyValidationError(key, str(e))


# =============================================================================
# Funções Helper
# =============================================================================

def load_properties(filepath: Union[str, Path]) -> PropertyCatalog:
    """Carrega um catálogo de propriedades de um arquivo."""
    return PropertiesLoader().load_from_file(filepath)


def load_default_properties() -> PropertyCatalog:
    """Carrega o catálogo embutido (config/properties.yaml)."""
    from ..config import DEFAULT_PROPERTIES_FILE

    return load_properties(DEFAULT_PROPERTIES_FILE)


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'PropertiesLoader',
    'PropertiesLoadError',
    'PropertyValidationError',
    'load_properties',
    'load_default_properties',
]
