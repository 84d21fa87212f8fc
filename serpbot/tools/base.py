"""Base class for callable tools."""

from abc import ABC, abstractmethod
from typing import Any


class Tool(ABC):
    """
    A named operation with a JSON-schema parameter description.

    Tools return plain text; failures are reported as text starting with
    "Error:" rather than raised to the caller.
    """

    _TYPE_MAP = {
        "string": str,
        "integer": int,
        "number": (int, float),
        "boolean": bool,
        "array": list,
        "object": dict,
    }

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name used in function calls."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of what the tool does."""

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for tool parameters."""

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """Execute the tool with given parameters."""

    def validate_params(self, params: dict[str, Any]) -> list[str]:
        """Validate tool parameters against the JSON schema. Returns error list."""
        schema = self.parameters or {}
        if schema.get("type", "object") != "object":
            raise ValueError(f"Schema must be object type, got {schema.get('type')!r}")
        return self._validate(params, {**schema, "type": "object"}, "")

    def _validate(self, value: Any, schema: dict[str, Any], path: str) -> list[str]:
        expected, label = schema.get("type"), path or "parameter"
        py_type = self._TYPE_MAP.get(expected)
        if py_type is not None:
            # bool is an int subclass; keep them apart.
            if not isinstance(value, py_type) or (
                expected in ("integer", "number") and isinstance(value, bool)
            ):
                return [f"{label} should be {expected}"]

        errors: list[str] = []
        if "enum" in schema and value not in schema["enum"]:
            errors.append(f"{label} must be one of {schema['enum']}")
        if expected in ("integer", "number"):
            if "minimum" in schema and value < schema["minimum"]:
                errors.append(f"{label} must be >= {schema['minimum']}")
            if "maximum" in schema and value > schema["maximum"]:
                errors.append(f"{label} must be <= {schema['maximum']}")
        if expected == "string":
            if "minLength" in schema and len(value) < schema["minLength"]:
                errors.append(f"{label} must be at least {schema['minLength']} chars")
            if "maxLength" in schema and len(value) > schema["maxLength"]:
                errors.append(f"{label} must be at most {schema['maxLength']} chars")
        if expected == "object":
            props = schema.get("properties", {})
            for key in schema.get("required", []):
                if key not in value:
                    errors.append(f"missing required {path + '.' + key if path else key}")
            for key, item in value.items():
                if key in props:
                    errors.extend(self._validate(item, props[key], path + "." + key if path else key))
        if expected == "array" and "items" in schema:
            for index, item in enumerate(value):
                errors.extend(self._validate(item, schema["items"], f"{label}[{index}]"))
        return errors

    def to_schema(self) -> dict[str, Any]:
        """Convert tool to function-calling schema format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
