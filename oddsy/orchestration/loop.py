"""
Core orchestration loop.

Drives the model through native function calling until it either calls
the terminal ``make_final_recommendation`` tool, answers in plain text,
or runs out of steps.

Per-step flow:
    1. Send the full conversation and every registered tool schema
    2. Terminal tool: validate its arguments and stop with the payload
       (invalid arguments abort the run)
    3. Other tool: record the call, execute it through the never-raising
       ToolSpec boundary, append the result, loop
    4. Plain text: stop with the text and the progress labels so far
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import BaseModel

from ..errors import FatalContractViolation, ModelCallError, ToolArgumentError
from ..prompts import SYSTEM_PROMPT
from ..tools.registry import ToolRegistry, ToolResult, ToolSpec, parse_arguments
from ..tracing import TracingContext
from .state import ConversationState, ToolCallRequest, Turn

if TYPE_CHECKING:
    from ..llm_call import LLMClient, ModelDecision

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 5

BUDGET_EXHAUSTED_MESSAGE = "I've reached the maximum number of steps for my analysis."

# Caller-visible progress, never shown to the model
PROGRESS_LABELS = {
    "list_odds": "Shopping for the best lines...",
    "get_event_odds": "Shopping for the best lines...",
    "search_news": "Researching team news and injuries...",
    "get_injury_report": "Checking injury reports...",
}


@dataclass
class FinalDecision:
    """The terminal tool's arguments, exactly as the model sent them."""

    payload: dict


@dataclass
class PlainAnswer:
    text: str
    steps: list[str] = field(default_factory=list)


@dataclass
class BudgetExhausted:
    message: str = BUDGET_EXHAUSTED_MESSAGE


LoopOutcome = Union[FinalDecision, PlainAnswer, BudgetExhausted]


@dataclass
class OrchestrationStep:
    """A single step in the orchestration process."""

    step_number: int
    action: Optional[str] = None
    action_input: Optional[str] = None
    observation: Optional[dict] = None
    is_final: bool = False
    final_answer: Optional[str] = None


class AgentLoop:
    """
    Bounded tool-calling loop for a single conversation.

    One instance serves one run: the conversation state, step trace and
    progress labels all belong to the run and are rebuilt by ``run()``.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        llm_client: Optional["LLMClient"] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
        system_prompt: Optional[str] = SYSTEM_PROMPT,
    ):
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}")
        if llm_client is None:
            from ..llm_call import LLMClient

            llm_client = LLMClient()

        self.registry = registry
        self.llm_client = llm_client
        self.max_steps = max_steps
        self.execution_id = execution_id
        self.tracing_context = tracing_context
        self.system_prompt = system_prompt

        self.state = ConversationState()
        self.steps: list[OrchestrationStep] = []
        self.progress: list[str] = []

    @property
    def _prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    def run(self, history: list[dict[str, Any]]) -> LoopOutcome:
        """
        Run the loop over the caller's conversation history.

        Returns:
            Exactly one of FinalDecision, PlainAnswer, BudgetExhausted

        Raises:
            InvalidRequestError: If the history is empty or malformed
            FatalContractViolation: If the terminal tool's arguments are invalid
            ModelCallError: If the model endpoint fails
        """
        self.state = ConversationState.from_history(history, system_prompt=self.system_prompt)
        self.steps = []
        self.progress = []

        logger.debug(
            "%sStarting orchestration: %d history turns, %d tools",
            self._prefix,
            len(self.state),
            len(self.registry),
        )

        if self.tracing_context is None:
            return self._run_loop()

        with self.tracing_context.span(
            name="orchestration",
            metadata={"max_steps": self.max_steps, "execution_id": self.execution_id},
            input={"turns": len(self.state)},
        ) as orch_span:
            try:
                outcome = self._run_loop()
            except (FatalContractViolation, ModelCallError):
                orch_span.set_status("error")
                raise
            orch_span.set_output({
                "outcome": type(outcome).__name__,
                "steps_taken": len(self.steps),
            })
            return outcome

    def _run_loop(self) -> LoopOutcome:
        tools = self.registry.to_openai_tools()

        for step_num in range(1, self.max_steps + 1):
            step = OrchestrationStep(step_number=step_num)
            decision = self._call_llm(self.state.to_messages(), tools, step_num)

            if not decision.is_tool_call:
                step.is_final = True
                step.final_answer = decision.text or ""
                self.steps.append(step)
                logger.info("%sStep %d: model answered in plain text", self._prefix, step_num)
                self._log_trace_summary()
                return PlainAnswer(text=step.final_answer, steps=list(self.progress))

            call = decision.tool_call
            step.action = call.name
            step.action_input = call.arguments
            spec = self.registry.get(call.name)

            if spec is not None and spec.terminal:
                payload, args = self._parse_terminal_arguments(spec, call)
                step.observation = spec.execute(args).to_dict()
                step.is_final = True
                self.steps.append(step)
                logger.info("%sStep %d: final decision via '%s'", self._prefix, step_num, call.name)
                self._log_trace_summary()
                return FinalDecision(payload=payload)

            self.state.append(Turn.assistant_tool_call(call, content=decision.text))
            result = self._execute_tool(call, spec, step_num)
            self.state.append(Turn.tool_result(call, result.to_json()))
            step.observation = result.to_dict()

            label = PROGRESS_LABELS.get(call.name)
            if label:
                self.progress.append(label)

            self.steps.append(step)

        logger.warning("%sMax steps (%d) reached without a decision", self._prefix, self.max_steps)
        self._log_trace_summary()
        return BudgetExhausted()

    def _parse_terminal_arguments(
        self, spec: ToolSpec, call: ToolCallRequest
    ) -> tuple[dict, BaseModel]:
        """
        Validate the terminal tool's arguments.

        Returns:
            The raw payload, untouched, and the validated parameter model

        Raises:
            FatalContractViolation: On invalid JSON or a schema violation
        """
        try:
            payload = parse_arguments(spec.name, call.arguments)
            args = spec.validate(payload)
        except ToolArgumentError as e:
            logger.error("%sTerminal tool contract violated: %s", self._prefix, e)
            raise FatalContractViolation(spec.name, str(e), call.arguments) from e
        return payload, args

    def _call_llm(self, messages: list[dict], tools: list[dict], step_num: int) -> "ModelDecision":
        logger.debug("%sStep %d: calling model", self._prefix, step_num)

        if self.tracing_context is None:
            return self.llm_client.decide(messages, tools)

        with self.tracing_context.generation(
            name=f"orchestrator_step_{step_num}",
            model=getattr(self.llm_client, "model", "unknown"),
            input=messages,
            model_parameters={"temperature": getattr(self.llm_client, "temperature", None)},
        ) as gen:
            try:
                decision = self.llm_client.decide(messages, tools)
            except ModelCallError:
                gen.set_status("error")
                raise
            if decision.is_tool_call:
                gen.set_output({
                    "tool_call": decision.tool_call.name,
                    "arguments": decision.tool_call.arguments[:2000],
                })
            else:
                gen.set_output((decision.text or "")[:2000])
            gen.set_usage(decision.usage)
            return decision

    def _execute_tool(
        self,
        call: ToolCallRequest,
        spec: Optional[ToolSpec],
        step_num: int,
    ) -> ToolResult:
        if spec is None:
            logger.warning("%sUnknown tool: %s", self._prefix, call.name)
            return ToolResult.failure(
                f"Unknown tool '{call.name}'. Available tools: {', '.join(self.registry.names())}"
            )

        logger.debug("%sStep %d: executing tool '%s'", self._prefix, step_num, call.name)

        if self.tracing_context is None:
            return spec.run(call.arguments)

        with self.tracing_context.span(name=f"tool:{call.name}", input={"arguments": call.arguments}) as span:
            result = spec.run(call.arguments)
            if not result.ok:
                span.set_status("error")
            span.set_output({"result": result.to_json()[:500]})
            return result

    def get_trace(self) -> list[dict]:
        """Get the step trace of the last run as plain dicts."""
        return [
            {
                "step": s.step_number,
                "action": s.action,
                "action_input": s.action_input,
                "observation": s.observation,
                "is_final": s.is_final,
                "final_answer": s.final_answer,
            }
            for s in self.steps
        ]

    def _log_trace_summary(self) -> None:
        tools_used = [s.action for s in self.steps if s.action]
        failed = sum(1 for s in self.steps if s.observation and not s.observation.get("ok"))
        logger.info(
            "%sOrchestration finished: %d step(s), tools=%s, failed_tool_calls=%d",
            self._prefix,
            len(self.steps),
            tools_used,
            failed,
        )
