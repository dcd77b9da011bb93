"""The conversation driver: the bounded, tool-augmented agent loop."""

import asyncio
from enum import Enum
from typing import Any, AsyncGenerator, List, Optional

from ...integrations import CredentialProvider
from ..base import Completion, ModelProvider
from ..events import EventStream, Severity
from ..events.stream import Event
from ..exceptions import AgentTimeError, ExecutionCancelledError
from ..logger import get_logger
from ..messages import ConversationTurn, TextSegment, ToolCallSegment
from ..tools.execution import ToolExecutor
from ..tools.models import ToolCall, ToolResult
from ..tools.registry import ToolRegistry
from .directive import build_system_directive, build_task_prompt

logger = get_logger(__name__)

MAX_ROUNDS = 10


class DriverState(str, Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    COMPLETED = "completed"
    FAILED = "failed"


class ConversationDriver:
    """
    Runs exactly one execution: INITIALIZING -> ITERATING -> COMPLETED | FAILED.

    The driver owns the conversation history and is the only writer to its event stream.
    Tool-level failures are fed back to the model as tool results; only orchestration
    faults (model call failures, cancellation, internal errors) end the execution as FAILED.
    """

    def __init__(
        self,
        provider: ModelProvider,
        registry: ToolRegistry,
        executor: ToolExecutor,
        stream: EventStream,
        credentials: Optional[CredentialProvider] = None,
        max_rounds: int = MAX_ROUNDS,
    ) -> None:
        """
        Args:
            provider: Model provider used for completions.
            registry: Tool catalog passed to the model on every round.
            executor: Executor for the model's tool calls.
            stream: Event stream the client is subscribed to.
            credentials: Credential provider (``resolve(principal)``). Without one every
                integration reports as not connected.
            max_rounds: Round cap.
        """
        self.provider = provider
        self.registry = registry
        self.executor = executor
        self.stream = stream
        self.credentials = credentials
        self.max_rounds = max_rounds

        self._state = DriverState.INITIALIZING
        self._started = False
        self._cancelled = False
        self._rounds = 0
        self._history: List[ConversationTurn] = []

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def rounds(self) -> int:
        """Number of model completions requested so far."""
        return self._rounds

    @property
    def history(self) -> List[ConversationTurn]:
        return list(self._history)

    def cancel(self) -> None:
        """Request cancellation. Observed at the start of the next round."""
        self._cancelled = True

    async def run(self, task: str, agent_name: str, agent_role: str, principal: Optional[str] = None) -> DriverState:
        """Run the execution to a terminal state.

        Every path ends with exactly one completion event on the stream.

        Raises:
            AgentTimeError: If the driver was already used.
        """
        if self._started:
            raise AgentTimeError("A ConversationDriver runs exactly one execution.")
        self._started = True

        try:
            self.stream.log("Starting task execution...")
            self.stream.log(f'Agent "{agent_name}" ({agent_role}) is analyzing the task...')

            credential = await self._resolve_credential(principal)
            directive = build_system_directive(agent_name, agent_role, principal if credential is not None else None)
            self._history = [ConversationTurn.user_text(build_task_prompt(task))]

            self._state = DriverState.ITERATING
            await self._iterate(directive, credential)
        except asyncio.CancelledError:
            self._fail(ExecutionCancelledError().args[0])
            raise
        except Exception as e:
            logger.error(f"Execution failed: {e}", exc_info=not isinstance(e, AgentTimeError))
            self._fail(str(e) or type(e).__name__)
            return self._state

        self._state = DriverState.COMPLETED
        self.stream.log("Task execution completed", Severity.SUCCESS)
        self.stream.complete(True)
        return self._state

    async def _resolve_credential(self, principal: Optional[str]) -> Any:
        if not principal or self.credentials is None:
            return None
        credential = await self.credentials.resolve(principal)
        if credential is None:
            logger.info(f"No usable credential for '{principal}'.")
        return credential

    async def _iterate(self, directive: str, credential: Any) -> None:
        for round_index in range(1, self.max_rounds + 1):
            if self._cancelled:
                raise ExecutionCancelledError()

            self._rounds = round_index
            logger.info(f"Round {round_index}/{self.max_rounds}")
            completion = await self.provider.complete(directive, self.registry.list(), list(self._history))

            results = await self._process_completion(completion, credential)
            if not results:
                logger.info(f"No tool calls in round {round_index} (stop reason: {completion.stop_reason}). Finishing.")
                return

            self._history.append(completion.to_turn())
            self._history.append(ConversationTurn(role="user", segments=[r.to_segment() for r in results]))

        logger.warning(f"Round cap ({self.max_rounds}) reached. Stopping execution.")

    async def _process_completion(self, completion: Completion, credential: Any) -> List[ToolResult]:
        results: List[ToolResult] = []
        for segment in completion.segments:
            if isinstance(segment, TextSegment):
                self.stream.log(segment.text)
            elif isinstance(segment, ToolCallSegment):
                results.append(await self._run_tool_call(ToolCall.from_segment(segment), credential))
        return results

    async def _run_tool_call(self, call: ToolCall, credential: Any) -> ToolResult:
        self.stream.log(f"Using tool: {call.name}")
        result = await self.executor.invoke_call(call, credential)
        summary = self.executor.summarize(call, result)
        if summary is not None:
            message, severity = summary
            self.stream.log(message, severity)
        return result

    def _fail(self, message: str) -> None:
        self._state = DriverState.FAILED
        if self.stream.completed or self.stream.closed:
            return
        self.stream.log(f"Execution failed: {message}", Severity.ERROR)
        self.stream.complete(False, message)


async def execute_task(
    task: str,
    agent_name: str,
    agent_role: str,
    principal: Optional[str],
    *,
    provider: ModelProvider,
    executor: ToolExecutor,
    registry: ToolRegistry,
    credentials: Optional[CredentialProvider] = None,
    max_rounds: int = MAX_ROUNDS,
) -> AsyncGenerator[Event, None]:
    """Run one task and yield its events as they are produced.

    The sequence always ends with a single completion event. Closing the generator early
    (e.g. because the client disconnected) cancels the running execution.
    """
    stream = EventStream()
    driver = ConversationDriver(provider, registry, executor, stream, credentials=credentials, max_rounds=max_rounds)
    runner = asyncio.create_task(driver.run(task, agent_name, agent_role, principal))
    runner.add_done_callback(lambda _: stream.close())

    try:
        async for event in stream:
            yield event
        await runner
    finally:
        if not runner.done():
            logger.info("Event consumer went away. Cancelling execution.")
            driver.cancel()
            runner.cancel()
            try:
                await runner
            except asyncio.CancelledError:
                pass
