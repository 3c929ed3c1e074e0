"""
Chat endpoint: one request runs one agent loop.

Returns one of three shapes (final, answer, exhausted). Bad input is a
400; a broken final-decision contract or a failing model endpoint is a
502 with a typed error body.
"""

import logging
from typing import Any, Union

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from ...agent import new_execution_id, run_agent
from ...errors import FatalContractViolation, InvalidRequestError, ModelCallError
from ...tracing import TracingContext, get_tracing_client
from ..schemas import (
    AnswerResponse,
    ChatRequest,
    ErrorResponse,
    ExhaustedResponse,
    FinalResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": error_type, "message": message}},
    )


@router.post(
    "/api/chat",
    response_model=Union[FinalResponse, AnswerResponse, ExhaustedResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid conversation history"},
        502: {"model": ErrorResponse, "description": "Model failure or broken decision contract"},
    },
    summary="Run the betting analyst",
    description=(
        "Runs the conversation through the tool-calling loop and returns a final "
        "recommendation, a plain answer, or a step-budget notice."
    ),
)
def chat(request: ChatRequest) -> Any:
    """Process a chat request through the agent loop."""
    history = [message.model_dump() for message in request.messages]
    execution_id = new_execution_id()
    logger.info(f"[{execution_id}] Processing chat request with {len(history)} message(s)")

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(name="chat", input={"messages": history})

    try:
        response = run_agent(
            history,
            execution_id=execution_id,
            tracing_context=tracing_context,
        )
    except InvalidRequestError as e:
        logger.warning(f"[{execution_id}] Invalid request: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return _error(400, "invalid_request", str(e))
    except FatalContractViolation as e:
        logger.error(f"[{execution_id}] {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return _error(502, "contract_violation", str(e))
    except ModelCallError as e:
        logger.error(f"[{execution_id}] Model call failed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return _error(502, "model_error", str(e))
    except Exception as e:
        logger.exception(f"[{execution_id}] Chat request failed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        raise HTTPException(status_code=500, detail=str(e))

    tracing_context.end_trace(output=response, status="success", metadata={"type": response["type"]})
    _flush_tracing()
    return JSONResponse(content=response)


def _flush_tracing() -> None:
    """Flush tracing client if available."""
    client = get_tracing_client()
    if client:
        client.flush()
