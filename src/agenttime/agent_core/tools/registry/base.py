"""Tool registry and helpers for declaring tool specs."""

from typing import Dict, Iterable, Iterator, List, Optional, Type

from pydantic import BaseModel

from ..models import ToolSpec
from ..schema import SchemaValidator
from ...exceptions import ToolNotFoundError, ToolRegistrationError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)


def build_tool_spec(name: str, args_model: Type[BaseModel], description: Optional[str] = None) -> ToolSpec:
    """Generate a ToolSpec from an arguments model.

    Args:
        name: Tool name exposed to the model.
        args_model: Pydantic model describing the tool's arguments.
        description: Optional description override. Defaults to the model's docstring.

    Returns:
        The immutable ToolSpec.

    Raises:
        ToolValidationError: If the tool has no description or a property lacks one.
    """
    description = description or (args_model.__doc__ or "").strip()
    if not description:
        msg = f"Tool '{name}' missing description. LLMs need a description of what the tool does."
        logger.error(msg)
        raise ToolValidationError(msg)

    schema = SchemaValidator.schema_from_model(args_model)
    for prop_name, prop in schema["properties"].items():
        if not prop.get("description"):
            msg = (
                f"Parameter '{prop_name}' in tool '{name}' is missing a description.\n"
                f"Usage: {prop_name}: Type = Field(..., description='...')"
            )
            logger.error(msg)
            raise ToolValidationError(msg)

    return ToolSpec(name=name, description=description, input_schema=schema, args_model=args_model)


class ToolRegistry:
    """
    Static, ordered catalog of the tools the model may call.

    The registry is built once at process start and is read-only afterwards, so it can be
    shared by concurrent executions.
    """

    def __init__(self, specs: Iterable[ToolSpec]) -> None:
        """Initialize the registry.

        Args:
            specs: Tool specs in the order they are presented to the model.

        Raises:
            ToolRegistrationError: If two specs share a name.
        """
        tools: Dict[str, ToolSpec] = {}
        for spec in specs:
            if spec.name in tools:
                msg = f"Tool '{spec.name}' is already registered."
                logger.error(msg)
                raise ToolRegistrationError(msg)
            tools[spec.name] = spec
            logger.debug(f"Registered tool: '{spec.name}'")
        self._tools = tools
        self._ordered = tuple(tools.values())

    def list(self) -> List[ToolSpec]:
        """Return the tool specs in registration order."""
        return list(self._ordered)

    def get(self, name: str) -> ToolSpec:
        """Look up a tool spec by name.

        Raises:
            ToolNotFoundError: If no tool with that name exists.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Tool '{name}' not found in the registry.") from None

    @property
    def names(self) -> List[str]:
        return [spec.name for spec in self._ordered]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)
