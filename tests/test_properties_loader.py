"""Tests for the property catalog loader."""

from dataclasses import fields

import pytest

from kgp.core.models import ComposeDependencies, KgpConfig, PropertyType
from kgp.core.properties_loader import (
    PropertiesLoader,
    PropertiesLoadError,
    PropertyValidationError,
    load_default_properties,
    load_properties,
)


def entry(**overrides):
    data = {
        "key": "kgp.plugins.autoapply.dokka",
        "field": "auto_apply_dokka",
        "type": "boolean",
        "default": True,
        "description": "Dokka",
    }
    data.update(overrides)
    return data


def test_default_catalog_covers_every_config_field():
    catalog = load_default_properties()

    assert {spec.field_name for spec in catalog.properties} == {f.name for f in fields(KgpConfig)}
    assert len(catalog.keys) == len(set(catalog.keys))


def test_default_catalog_defaults_match_config():
    catalog = load_default_properties()
    defaults = KgpConfig()

    for spec in catalog.properties:
        assert getattr(defaults, spec.field_name) == spec.default, spec.key


def test_enum_entry():
    spec = load_default_properties().get("kgp.android.autoconfigure.compose.dependencies")

    assert spec.type == PropertyType.ENUM
    assert spec.enum_type is ComposeDependencies
    assert spec.default is ComposeDependencies.NONE
    assert spec.default_display == "none"


def test_duplicate_key_rejected():
    data = {"properties": [entry(), entry(field="auto_apply_kover")]}

    with pytest.raises(PropertyValidationError, match="duplicada"):
        PropertiesLoader().load_from_dict(data)


def test_unknown_field_rejected():
    with pytest.raises(PropertyValidationError, match="KgpConfig"):
        PropertiesLoader().load_from_dict({"properties": [entry(field="does_not_exist")]})


def test_invalid_type_rejected():
    with pytest.raises(PropertyValidationError, match="type"):
        PropertiesLoader().load_from_dict({"properties": [entry(type="integer")]})


def test_key_outside_namespace_rejected():
    with pytest.raises(PropertyValidationError):
        PropertiesLoader().load_from_dict({"properties": [entry(key="android.useAndroidX")]})


def test_missing_properties_list():
    with pytest.raises(PropertiesLoadError):
        PropertiesLoader().load_from_dict({"version": "1.0"})


def test_load_from_file(tmp_path):
    path = tmp_path / "props.yaml"
    path.write_text(
        "properties:\n"
        "  - key: kgp.repository.name\n"
        "    field: repository_name\n"
        "    type: string\n"
        "    default: Nexus\n"
        "    description: Repository name\n"
    )

    catalog = load_properties(path)

    assert catalog.keys == ["kgp.repository.name"]
    assert catalog.get("kgp.repository.name").default == "Nexus"


def test_missing_file(tmp_path):
    with pytest.raises(PropertiesLoadError):
        load_properties(tmp_path / "missing.yaml")
