from typing import Any, Dict, List, Set, Type

import jsonref  # type: ignore
from pydantic import BaseModel, ValidationError

from ...exceptions import ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)


class SchemaValidator:
    """
    Helper class for building, sanitizing and checking JSON schemas for tools.
    """

    @staticmethod
    def schema_from_model(model: Type[BaseModel]) -> Dict[str, Any]:
        """Build a flat, provider-friendly input schema from a Pydantic model.

        Args:
            model: The arguments model of a tool.

        Returns:
            A JSON schema of type ``object`` without ``$ref`` indirections.

        Raises:
            ToolValidationError: If the model is recursive.
        """
        raw_schema = model.model_json_schema(by_alias=True)
        SchemaValidator.assert_no_recursive_refs(raw_schema)

        # proxies=False ensures we get a plain dict back, not JsonRef objects
        resolved = jsonref.replace_refs(raw_schema, proxies=False)
        schema = SchemaValidator.sanitize_schema(resolved)
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return schema

    @staticmethod
    def assert_no_recursive_refs(schema: Dict[str, Any]) -> None:
        """
        Checks if the schema contains recursive references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Raises:
            ToolValidationError: If a recursive reference is found.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> None:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        msg = (
                            f"Recursive structure detected: {ref}. "
                            "Recursive structures are not allowed in tool inputs."
                        )
                        logger.error(msg)
                        raise ToolValidationError(msg)

                    # e.g. #/$defs/MyModel
                    if ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3:
                            def_name = parts[-1]
                            if def_name in defs:
                                check(defs[def_name], path | {ref})
                    return

                for v in node.values():
                    check(v, path)
            elif isinstance(node, list):
                for item in node:
                    check(item, path)

        check(schema, set())

    @staticmethod
    def sanitize_schema(schema: Any) -> Any:
        """
        Cleans up the schema for better compatibility with LLM providers.
        Removes $defs, $schema, $id, title.
        Simplifies Optional fields (anyOf with null).

        Args:
            schema: The JSON schema to sanitize.

        Returns:
            The sanitized schema.
        """
        if not isinstance(schema, dict):
            return schema

        new_schema = schema.copy()

        for key in ["$defs", "$schema", "$id", "title", "definitions"]:
            new_schema.pop(key, None)

        if "anyOf" in new_schema:
            any_of = new_schema["anyOf"]
            non_null = [x for x in any_of if x.get("type") != "null"]

            if len(non_null) == 1 and isinstance(non_null[0], dict):
                # Prefer the parent's description and default over the branch's.
                merged = non_null[0].copy()
                for key in ("description", "default"):
                    if key in new_schema:
                        merged[key] = new_schema[key]
                return SchemaValidator.sanitize_schema(merged)

        # Optional fields default to None, which is noise for the model.
        if new_schema.get("default", ...) is None:
            new_schema.pop("default")

        for key, value in new_schema.items():
            if key == "properties" and isinstance(value, dict):
                new_schema[key] = {name: SchemaValidator.sanitize_schema(prop) for name, prop in value.items()}
            elif isinstance(value, dict):
                new_schema[key] = SchemaValidator.sanitize_schema(value)
            elif isinstance(value, list):
                new_schema[key] = [
                    SchemaValidator.sanitize_schema(item) if isinstance(item, dict) else item for item in value
                ]

        return new_schema

    @staticmethod
    def advisory_issues(model: Type[BaseModel], arguments: Dict[str, Any]) -> List[str]:
        """Validate arguments against a tool's model without rejecting them.

        Args:
            model: The arguments model of the tool.
            arguments: The arguments produced by the model.

        Returns:
            Human-readable validation issues; empty when the arguments are valid.
        """
        try:
            model.model_validate(arguments)
        except ValidationError as exc:
            return [f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()]
        return []
