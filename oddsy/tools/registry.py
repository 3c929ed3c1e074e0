"""
Tool Registry - per-request catalog of the tools offered to the model.

Each tool is data: a name, a model-facing description, a pydantic
parameter model and an execute callable closed over its credentials.
A registry is built from the available API keys for every request; tool
families without a key are left out entirely.
"""

import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from ..errors import ToolArgumentError, UpstreamError
from ..models import UpstreamConfig

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 500


@dataclass
class ToolResult:
    """Uniform result of a tool execution, always JSON-serializable."""

    ok: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any) -> "ToolResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(ok=False, error=message)

    def to_dict(self) -> dict:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


def parse_arguments(tool_name: str, raw_arguments: Any) -> dict:
    """
    Decode the model's raw argument payload into a dict.

    The function-calling protocol delivers arguments as a JSON string;
    an empty string means "no arguments". NaN and Infinity are refused.

    Raises:
        ToolArgumentError: If the payload is not a JSON object
    """
    if isinstance(raw_arguments, dict):
        return raw_arguments
    if raw_arguments is None or (isinstance(raw_arguments, str) and not raw_arguments.strip()):
        return {}

    def reject_constant(token: str) -> Any:
        raise ToolArgumentError(
            f"Arguments for tool '{tool_name}' are not valid JSON: {token} is not a JSON value"
        )

    try:
        data = json.loads(raw_arguments, parse_constant=reject_constant)
    except (json.JSONDecodeError, TypeError) as e:
        raise ToolArgumentError(
            f"Arguments for tool '{tool_name}' are not valid JSON: {e}"
        ) from e
    if not isinstance(data, dict):
        raise ToolArgumentError(
            f"Arguments for tool '{tool_name}' must be a JSON object, got {type(data).__name__}"
        )
    return data


def describe_validation_error(tool_name: str, error: ValidationError) -> str:
    """Summarize a pydantic ValidationError as one line per bad field."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg', 'invalid value')}")
    return f"Invalid arguments for tool '{tool_name}': " + "; ".join(problems)


def _inline_refs(schema: dict) -> dict:
    """Resolve local $ref pointers and drop pydantic titles."""
    definitions = schema.get("$defs", {})

    def resolve(node: Any) -> Any:
        if isinstance(node, dict):
            if "$ref" in node:
                target = node["$ref"].rsplit("/", 1)[-1]
                siblings = {k: v for k, v in node.items() if k != "$ref"}
                return resolve({**copy.deepcopy(definitions.get(target, {})), **siblings})
            if len(node.get("allOf", ())) == 1:
                siblings = {k: v for k, v in node.items() if k != "allOf"}
                return resolve({**node["allOf"][0], **siblings})
            return {
                k: resolve(v)
                for k, v in node.items()
                if k != "$defs" and not (k == "title" and isinstance(v, str))
            }
        if isinstance(node, list):
            return [resolve(item) for item in node]
        return node

    return resolve(schema)


@dataclass
class ToolSpec:
    """Registry entry: everything needed to offer and run one tool."""

    name: str
    description: str
    parameters: type[BaseModel]
    execute: Callable[[Any], ToolResult]
    terminal: bool = False
    family: str = "core"

    def json_schema(self) -> dict:
        """JSON schema of the parameters, self-contained."""
        schema = _inline_refs(self.parameters.model_json_schema())
        schema.setdefault("type", "object")
        schema.setdefault("properties", {})
        return schema

    def openai_schema(self) -> dict:
        """OpenAI function-calling tool definition."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.json_schema(),
            },
        }

    def validate(self, raw_arguments: Any) -> BaseModel:
        """
        Parse and validate raw arguments against the parameter model.

        Raises:
            ToolArgumentError: If the arguments are malformed or invalid
        """
        data = parse_arguments(self.name, raw_arguments)
        try:
            return self.parameters.model_validate(data)
        except ValidationError as e:
            raise ToolArgumentError(describe_validation_error(self.name, e)) from e

    def run(self, raw_arguments: Any) -> ToolResult:
        """
        Validate and execute. Never raises: every failure becomes an
        error result the model can read and react to.
        """
        try:
            args = self.validate(raw_arguments)
        except ToolArgumentError as e:
            logger.info("Tool '%s' rejected arguments: %s", self.name, e)
            return ToolResult.failure(str(e))

        try:
            return self.execute(args)
        except (ToolArgumentError, UpstreamError) as e:
            logger.warning("Tool '%s' failed: %s", self.name, e)
            return ToolResult.failure(str(e))
        except Exception as e:
            logger.exception("Tool '%s' execution failed: %s", self.name, e)
            error_msg = str(e)
            if len(error_msg) > MAX_ERROR_CHARS:
                error_msg = error_msg[:MAX_ERROR_CHARS] + "..."
            return ToolResult.failure(f"Tool '{self.name}' execution error: {error_msg}")


class ToolRegistry:
    """Mapping of tool name to ToolSpec for a single request."""

    def __init__(self, tools: Optional[list[ToolSpec]] = None):
        self._tools: dict[str, ToolSpec] = {}
        for spec in tools or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        """Register a tool. Names must be unique within the registry."""
        if spec.name in self._tools:
            raise ValueError(f"Tool '{spec.name}' is already registered")
        self._tools[spec.name] = spec

    def get(self, name: str) -> Optional[ToolSpec]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def all_tools(self) -> dict[str, ToolSpec]:
        """Get a copy of all registered tools."""
        return self._tools.copy()

    def families(self) -> list[str]:
        seen: list[str] = []
        for spec in self._tools.values():
            if spec.family not in seen:
                seen.append(spec.family)
        return seen

    def terminal_tool(self) -> Optional[ToolSpec]:
        for spec in self._tools.values():
            if spec.terminal:
                return spec
        return None

    def to_openai_tools(self) -> list[dict]:
        """Tool definitions in registration order, terminal tool included."""
        return [spec.openai_schema() for spec in self._tools.values()]

    def get_tools_summary(self) -> str:
        """Get formatted summary of all tools for logs and the CLI."""
        lines = []
        for name, tool in self._tools.items():
            lines.append(f"- {name}: {tool.description.splitlines()[0]}")
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


@dataclass
class ApiKeyConfig:
    """Which upstream credential families are available for a request."""

    odds: Optional[str] = None
    sports: Optional[str] = None
    tavily: Optional[str] = None

    @classmethod
    def from_upstream(cls, upstream: UpstreamConfig) -> "ApiKeyConfig":
        return cls(
            odds=upstream.odds_api_key or None,
            sports=upstream.sports_api_key or None,
            tavily=upstream.tavily_api_key or None,
        )

    def families(self) -> list[str]:
        """Tool families a registry built from these keys would contain."""
        available = [name for name in ("odds", "sports", "tavily") if getattr(self, name)]
        return available + ["core"]


def build_registry(
    api_keys: ApiKeyConfig,
    upstream: Optional[UpstreamConfig] = None,
) -> ToolRegistry:
    """
    Build the tool registry for one request.

    Only families with a credential are registered; the calculator and the
    terminal recommendation tool are always present. No network I/O.

    Args:
        api_keys: Available upstream credentials
        upstream: Timeout/retry/truncation policy (defaults if None)

    Returns:
        A fresh ToolRegistry
    """
    from .math_solver import create_calculator_tool
    from .odds_api import create_odds_tools
    from .recommendation import create_recommendation_tool
    from .search import create_search_tools
    from .sports_api import create_sports_tools

    policy = upstream or UpstreamConfig()
    registry = ToolRegistry()

    if api_keys.odds:
        for spec in create_odds_tools(api_keys.odds, policy):
            registry.register(spec)
    else:
        logger.warning("Odds API key not provided. Odds tools will be unavailable.")

    if api_keys.sports:
        for spec in create_sports_tools(api_keys.sports, policy):
            registry.register(spec)
    else:
        logger.warning("Sports API key not provided. Sports data tools will be unavailable.")

    if api_keys.tavily:
        for spec in create_search_tools(api_keys.tavily, policy):
            registry.register(spec)
    else:
        logger.warning("Tavily API key not provided. News search will be unavailable.")

    if not (api_keys.odds or api_keys.sports or api_keys.tavily):
        logger.warning("No upstream API keys provided. Only the calculator is available.")

    registry.register(create_calculator_tool())
    registry.register(create_recommendation_tool())

    logger.info("Tool registry initialized with %d tools", len(registry))
    return registry
