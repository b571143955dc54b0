# static tool schemas, declared once at startup and immutable thereafter

from enum import Enum
from pydantic import BaseModel, ConfigDict, model_validator

class ToolParamType(str, Enum):
    STRING = "string"
    INTEGER = "integer"

class ToolParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ToolParamType
    description: str

class ToolDeclaration(BaseModel):
    """
    Declarative schema of one tool: ordered parameters plus the subset marked required.
    Rendered into the function declaration dict that tool-calling LLM APIs expect.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: tuple[ToolParameter, ...] = ()
    required: frozenset[str] = frozenset()

    @model_validator(mode="after")
    def _required_are_declared(self) -> "ToolDeclaration":
        unknown = self.required - {param.name for param in self.parameters}
        if unknown:
            raise ValueError(f"Tool '{self.name}' marks undeclared parameters as required: {sorted(unknown)}")
        return self

    def is_required(self, param_name: str) -> bool:
        return param_name in self.required

    def to_function_declaration(self) -> dict:
        """JSON-schema style declaration, accepted by both Gemini and OpenAI-compatible APIs."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    param.name: {"type": param.type.value, "description": param.description}
                    for param in self.parameters
                },
                # keep declaration order so the schema reads the same as the parameter list
                "required": [param.name for param in self.parameters if param.name in self.required],
            },
        }
