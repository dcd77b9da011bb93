from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict


class ToolSpec(BaseModel):
    """
    Declares a tool that the model may invoke.

    Attributes:
        name: The unique name of the tool.
        description: A brief description of what the tool does.
        input_schema: JSON schema (object with named properties) describing the arguments.
        args_model: Optional Pydantic model the schema was generated from. Used by the
                    executor for advisory argument validation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: Dict[str, Any]
    args_model: Optional[Type[BaseModel]] = None

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))
