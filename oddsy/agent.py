"""
Entry point: run one conversation through the betting-analyst loop.

Every call builds its own registry, model client and loop; nothing is
shared between requests except the read-only configuration.
"""

import logging
import uuid
from typing import Any, Optional

from .config import config
from .llm_call import LLMClient
from .models import AppConfig
from .orchestration import AgentLoop, format_outcome
from .tools import ApiKeyConfig, build_registry
from .tracing import TracingContext

logger = logging.getLogger(__name__)


def new_execution_id() -> str:
    return f"exec-{uuid.uuid4().hex[:8]}"


def build_agent_loop(
    app_config: Optional[AppConfig] = None,
    api_keys: Optional[ApiKeyConfig] = None,
    llm_client: Optional[LLMClient] = None,
    execution_id: Optional[str] = None,
    tracing_context: Optional[TracingContext] = None,
) -> AgentLoop:
    """
    Assemble a loop for a single run.

    Args:
        app_config: Configuration (the process config if None)
        api_keys: Upstream credentials (taken from app_config if None)
        llm_client: Model client (built from app_config if None)
        execution_id: Log/trace correlation id
        tracing_context: Optional request tracing context

    Returns:
        A ready-to-run AgentLoop
    """
    app_config = app_config or config
    api_keys = api_keys or ApiKeyConfig.from_upstream(app_config.upstream)

    registry = build_registry(api_keys, app_config.upstream)
    logger.debug("[%s] Tools:\n%s", execution_id, registry.get_tools_summary())

    return AgentLoop(
        registry=registry,
        llm_client=llm_client or LLMClient(orchestrator_config=app_config.orchestrator),
        max_steps=app_config.orchestrator.max_steps,
        execution_id=execution_id,
        tracing_context=tracing_context,
    )


def run_agent(
    history: list[dict[str, Any]],
    *,
    app_config: Optional[AppConfig] = None,
    api_keys: Optional[ApiKeyConfig] = None,
    llm_client: Optional[LLMClient] = None,
    execution_id: Optional[str] = None,
    tracing_context: Optional[TracingContext] = None,
) -> dict[str, Any]:
    """
    Run the agent over a conversation history.

    Args:
        history: Ordered ``[{"role": ..., "content": ...}, ...]`` messages

    Returns:
        One of ``{"type": "final", "data"}``, ``{"type": "answer", "content",
        "steps"}`` or ``{"type": "exhausted", "content"}``

    Raises:
        InvalidRequestError: If the history is empty or malformed
        FatalContractViolation: If the model breaks the final-decision contract
        ModelCallError: If the model endpoint fails
    """
    execution_id = execution_id or new_execution_id()
    loop = build_agent_loop(
        app_config=app_config,
        api_keys=api_keys,
        llm_client=llm_client,
        execution_id=execution_id,
        tracing_context=tracing_context,
    )
    response = format_outcome(loop.run(history))
    logger.info(f"[{execution_id}] Run finished with '{response['type']}' after {len(loop.steps)} step(s)")
    return response
