"""Tool registry - declared tools, their parameter schemas and implementations."""

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from backend.tripply.models.common import ToolResult

ToolFn = Callable[[Any], Awaitable[ToolResult]]


def _inline_refs(node: Any, defs: dict[str, Any]) -> Any:
    """Replace local $ref pointers with their definitions and drop titles."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/$defs/"):
            return _inline_refs(defs[ref.removeprefix("#/$defs/")], defs)
        return {
            key: _inline_refs(value, defs)
            for key, value in node.items()
            if key not in ("$defs", "title")
        }
    if isinstance(node, list):
        return [_inline_refs(item, defs) for item in node]
    return node


def parameters_schema(params_model: type[BaseModel]) -> dict[str, Any]:
    """JSON schema for a parameter model, flattened for function declarations."""
    schema = params_model.model_json_schema()
    flattened: dict[str, Any] = _inline_refs(schema, schema.get("$defs", {}))
    flattened.setdefault("required", [])
    return flattened


@dataclass(frozen=True)
class ToolSpec:
    """A named, schema-declared capability the model may invoke."""

    name: str
    description: str
    params_model: type[BaseModel]
    fn: ToolFn

    def openai_tool(self) -> dict[str, Any]:
        """Render as an OpenAI function-calling declaration."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters_schema(self.params_model),
            },
        }


class ToolRegistry:
    """Registry of tools keyed by name."""

    def __init__(self) -> None:
        self._by_name: dict[str, ToolSpec] = {}

    def register(
        self,
        name: str,
        description: str,
        params_model: type[BaseModel],
        fn: ToolFn,
    ) -> ToolSpec:
        """Declare a tool. Names must be unique."""
        if name in self._by_name:
            raise ValueError(f"Tool already registered: {name}")
        spec = ToolSpec(name=name, description=description, params_model=params_model, fn=fn)
        self._by_name[name] = spec
        return spec

    def get(self, name: str) -> ToolSpec | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return list(self._by_name)

    def openai_tools(self) -> list[dict[str, Any]]:
        """Function declarations for every registered tool, in registration order."""
        return [spec.openai_tool() for spec in self._by_name.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)
