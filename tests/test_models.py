"""
Tests for model definitions
"""
import pytest
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    JSON,
    LargeBinary,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import declarative_base

from automigrate.config.env_config import ConfigError
from automigrate.models import Model, TableModel, load_models


class TestTableModel:
    """Tests for the concrete model."""

    def test_accessors(self):
        model = TableModel("notes", {"title": "string", "views": "integer"})

        assert model.get_model_name() == "notes"
        assert list(model.get_model_fields()) == ["title", "views"]
        assert isinstance(model, Model)

    def test_fields_are_copied(self):
        fields = {"title": "string"}
        model = TableModel("notes", fields)
        fields["extra"] = "string"
        model.get_model_fields()["other"] = "string"

        assert model.get_model_fields() == {"title": "string"}

    def test_name_required(self):
        with pytest.raises(ValueError, match="Model name is required"):
            TableModel("", {"title": "string"})

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError, match="unknown field types"):
            TableModel("notes", {"title": "varchar"})

    def test_equality_respects_order(self):
        a = TableModel("t", {"x": "string", "y": "string"})
        b = TableModel("t", {"y": "string", "x": "string"})
        assert a != b
        assert a == TableModel.from_dict("t", {"x": "string", "y": "string"})


class TestSqlAlchemyAdapter:
    """Tests for building models from SQLAlchemy tables."""

    def test_from_table(self):
        table = Table(
            "readings",
            MetaData(),
            Column("id", Integer, primary_key=True),
            Column("label", String(50)),
            Column("body", Text),
            Column("value", Float),
            Column("price", Numeric(10, 2)),
            Column("active", Boolean),
            Column("taken_on", Date),
            Column("taken_at", DateTime),
            Column("raw", LargeBinary),
            Column("meta", JSON),
        )

        model = TableModel.from_sqlalchemy(table)

        assert model.get_model_name() == "readings"
        assert model.get_model_fields() == {
            "id": "integer",
            "label": "string",
            "body": "text",
            "value": "number",
            "price": "number",
            "active": "boolean",
            "taken_on": "date",
            "taken_at": "datetime",
            "raw": "blob",
            "meta": "json",
        }

    def test_from_declarative_class(self):
        Base = declarative_base()

        class Task(Base):
            __tablename__ = "tasks"

            id = Column(String(36), primary_key=True)
            goal = Column(String(500), nullable=False)
            retries = Column(Integer, default=0)

        model = TableModel.from_sqlalchemy(Task)

        assert model.get_model_name() == "tasks"
        assert list(model.get_model_fields().items()) == [
            ("id", "string"),
            ("goal", "string"),
            ("retries", "integer"),
        ]

    def test_rejects_other_objects(self):
        with pytest.raises(TypeError):
            TableModel.from_sqlalchemy(object())


class TestLoadModels:
    """Tests for YAML model definitions."""

    def test_load_in_file_order(self, tmp_path):
        path = tmp_path / "models.yaml"
        path.write_text(
            "models:\n"
            "  notes:\n"
            "    title: string\n"
            "    views: integer\n"
            "  tags:\n"
            "    label: string\n"
        )

        models = load_models(path)

        assert [m.get_model_name() for m in models] == ["notes", "tags"]
        assert list(models[0].get_model_fields()) == ["title", "views"]

    def test_environment_override(self, tmp_path):
        (tmp_path / "models.yaml").write_text("models:\n  notes:\n    title: string\n")
        (tmp_path / "environments").mkdir()
        (tmp_path / "environments" / "staging.yaml").write_text(
            "models:\n  models:\n    notes:\n      draft: boolean\n"
        )

        plain = load_models(tmp_path / "models.yaml")
        staged = load_models(tmp_path / "models.yaml", environment="staging")

        assert plain[0].get_model_fields() == {"title": "string"}
        assert staged[0].get_model_fields() == {"title": "string", "draft": "boolean"}

    def test_missing_models_key(self, tmp_path):
        path = tmp_path / "models.yaml"
        path.write_text("tables: {}\n")
        with pytest.raises(ConfigError, match="'models' mapping"):
            load_models(path)

    def test_unknown_type(self, tmp_path):
        path = tmp_path / "models.yaml"
        path.write_text("models:\n  notes:\n    title: varchar\n")
        with pytest.raises(ConfigError, match="unknown field types"):
            load_models(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "models.yaml"
        path.write_text("models: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_models(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_models(tmp_path / "absent.yaml")
