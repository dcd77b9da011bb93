from typing import List, Optional

import pytest
from pydantic import BaseModel, Field

from agenttime.agent_core.exceptions import ToolValidationError
from agenttime.agent_core.tools import SchemaValidator
from agenttime.agent_core.tools.registry.catalog import CreateCalendarEventArgs, WebSearchArgs


class Address(BaseModel):
    street: str = Field(description="Street")
    city: Optional[str] = Field(default=None, description="City")


class Contact(BaseModel):
    name: str = Field(description="Name")
    address: Address = Field(description="Postal address")


class Node(BaseModel):
    value: int
    children: List["Node"] = []


def test_schema_from_model_inlines_refs() -> None:
    schema = SchemaValidator.schema_from_model(Contact)

    assert "$defs" not in schema
    assert "title" not in schema
    address = schema["properties"]["address"]
    assert address["properties"]["street"]["type"] == "string"
    assert address["properties"]["city"] == {"type": "string", "description": "City"}


def test_recursive_models_are_rejected() -> None:
    with pytest.raises(ToolValidationError, match="Recursive structure"):
        SchemaValidator.schema_from_model(Node)


def test_sanitize_keeps_parent_description_on_optional() -> None:
    schema = {
        "anyOf": [{"type": "integer", "description": "inner"}, {"type": "null"}],
        "description": "outer",
        "default": None,
    }

    assert SchemaValidator.sanitize_schema(schema) == {"type": "integer", "description": "outer"}


def test_sanitize_leaves_real_unions_alone() -> None:
    schema = {"anyOf": [{"type": "integer"}, {"type": "string"}]}

    assert SchemaValidator.sanitize_schema(schema) == schema


def test_advisory_issues_for_valid_and_invalid_arguments() -> None:
    assert SchemaValidator.advisory_issues(WebSearchArgs, {"query": "q", "maxResults": 3}) == []

    issues = SchemaValidator.advisory_issues(CreateCalendarEventArgs, {"summary": "x", "startTime": "s"})
    assert issues == ["endTime: Field required"]
