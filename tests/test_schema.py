"""
Tests para models/schema.py - Carga y validación del esquema.
"""

import json

import pytest

from udyam.exceptions import SchemaError
from udyam.models.schema import (
    FieldDescriptor,
    FieldKind,
    FormSchema,
    load_schema,
    parse_schema,
)


class TestDefaultSchema:
    """Tests del esquema incluido."""

    def test_two_steps(self, schema):
        assert [s.index for s in schema.steps] == [1, 2]

    def test_identity_fields(self, schema):
        assert schema.step(1).field_names == ["aadhaar", "aadhaarName"]

    def test_business_fields(self, schema):
        names = schema.step(2).field_names
        for name in ("businessName", "businessType", "pincode", "city", "state", "address"):
            assert name in names

    def test_aliases(self, schema):
        """Test que las claves del scraper se mapean a los atributos."""
        aadhaar = schema.step(1).get_field("aadhaar")
        assert aadhaar.kind == FieldKind.TEXT
        assert aadhaar.max_length == 12
        assert aadhaar.required is True

    def test_metadata(self, schema):
        assert schema.metadata.version == "1.0.0"
        assert schema.metadata.source == "Udyam Registration Portal"
        assert schema.metadata.captured_at.year == 2025

    def test_select_options(self, schema):
        business_type = schema.step(2).get_field("businessType")
        assert business_type.kind == FieldKind.SELECT
        assert "Proprietorship" in business_type.options

    def test_unknown_step(self, schema):
        assert schema.step(7) is None
        assert schema.step(1).get_field("nope") is None

    def test_frozen(self, schema):
        with pytest.raises(Exception):
            schema.steps = ()


class TestParseSchema:
    """Tests de documentos mal formados."""

    def test_not_a_dict(self):
        with pytest.raises(SchemaError):
            parse_schema([])

    def test_missing_forms(self, schema_document):
        del schema_document["forms"]
        with pytest.raises(SchemaError, match="forms"):
            parse_schema(schema_document)

    def test_missing_metadata(self, schema_document):
        del schema_document["metadata"]
        with pytest.raises(SchemaError):
            parse_schema(schema_document)

    def test_unknown_kind(self, schema_document):
        schema_document["forms"][0]["fields"][0]["type"] = "checkbox"
        with pytest.raises(SchemaError):
            parse_schema(schema_document)

    def test_invalid_pattern(self, schema_document):
        schema_document["forms"][0]["fields"][0]["pattern"] = "^[0-9"
        with pytest.raises(SchemaError, match="expresión regular"):
            parse_schema(schema_document)

    def test_select_without_options(self, schema_document):
        field = schema_document["forms"][1]["fields"][1]
        assert field["type"] == "select"
        field["options"] = []
        with pytest.raises(SchemaError, match="opciones"):
            parse_schema(schema_document)

    def test_non_positive_maxlength(self, schema_document):
        schema_document["forms"][0]["fields"][0]["maxlength"] = 0
        with pytest.raises(SchemaError):
            parse_schema(schema_document)

    def test_duplicate_field_names(self, schema_document):
        fields = schema_document["forms"][0]["fields"]
        fields.append(dict(fields[0]))
        with pytest.raises(SchemaError, match="duplicado"):
            parse_schema(schema_document)

    def test_duplicate_step_index(self, schema_document):
        schema_document["forms"][1]["step"] = 1
        with pytest.raises(SchemaError, match="duplicado"):
            parse_schema(schema_document)

    def test_error_message_prefix(self, schema_document):
        del schema_document["forms"]
        with pytest.raises(SchemaError) as exc_info:
            parse_schema(schema_document)
        assert str(exc_info.value).startswith("Esquema mal formado")

    def test_populate_by_name(self):
        """Test que también se aceptan los nombres de atributo."""
        field = FieldDescriptor(name="pan", kind=FieldKind.TEXT, label="PAN", max_length=10)
        assert field.max_length == 10

    def test_valid_document(self, schema_document):
        assert isinstance(parse_schema(schema_document), FormSchema)


class TestLoadSchema:
    """Tests para load_schema."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaError, match="no se pudo leer"):
            load_schema(tmp_path / "no_existe.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{forms: ", encoding="utf-8")
        with pytest.raises(SchemaError, match="JSON inválido"):
            load_schema(path)

    def test_roundtrip_file(self, tmp_path, schema_document):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps(schema_document), encoding="utf-8")
        schema = load_schema(str(path))
        assert len(schema.steps) == 2
