"""OpenAIAgentExecutor: A2A AgentExecutor backed by an OpenAI Agents SDK agent.

Per execution: submitted (new tasks only) -> working -> streamed run, one working
event per translated run item -> history saved to the context's session -> judge
agent publishes artifacts and the final state -> queue finished. MCP servers are
connected for the run and cleaned up on every exit path.
"""

import logging
from typing import TYPE_CHECKING, Any, Sequence

from a2a.server.agent_execution import AgentExecutor, RequestContext
from a2a.types import Task, TaskState, TaskStatus, TaskStatusUpdateEvent

from a2a_bridge.executor.judge import JudgeDriver
from a2a_bridge.executor.mcp import McpLifecycle
from a2a_bridge.executor.parts import now_iso, user_input_items
from a2a_bridge.executor.publisher import EventPublisher
from a2a_bridge.executor.sessions import SessionCache, SessionProvider
from a2a_bridge.executor.translator import EventTranslator

if TYPE_CHECKING:
    from a2a.server.events import EventQueue
    from agents import Agent
    from agents.mcp import MCPServer
    from agents.memory import Session

logger = logging.getLogger(__name__)

__all__ = ["OpenAIAgentExecutor"]


class OpenAIAgentExecutor(AgentExecutor):
    """Runs `agent` for each A2A request and lets `judge_agent` decide the task state.

    judge_agent must use StructuredResponse as its output_type. mcp_servers are the
    servers the agent uses; the executor owns their connect/cleanup around each run.
    Concurrent executions share those servers: they stay connected until the last
    overlapping run finishes. A failed connect is cleaned up before it propagates.
    """

    def __init__(
        self,
        agent: "Agent",
        judge_agent: "Agent",
        session_provider: SessionProvider | None = None,
        mcp_servers: Sequence["MCPServer"] | None = None,
        run_config: Any = None,
        max_turns: int | None = None,
    ) -> None:
        self._agent = agent
        self._judge = JudgeDriver(judge_agent, run_config=run_config)
        self._sessions = SessionCache(session_provider)
        self._mcp = McpLifecycle(mcp_servers)
        self._run_config = run_config
        self._max_turns = max_turns

    @property
    def sessions(self) -> SessionCache:
        return self._sessions

    async def execute(self, context: RequestContext, event_queue: "EventQueue") -> None:
        task_id = context.task_id
        context_id = context.context_id
        user_message = context.message
        publisher = EventPublisher(event_queue)
        logger.info("execute task %s (context %s)", task_id, context_id)

        if context.current_task is None:
            await publisher.publish(
                Task(
                    id=task_id,
                    context_id=context_id,
                    status=TaskStatus(state=TaskState.submitted, timestamp=now_iso()),
                    history=[user_message] if user_message is not None else [],
                )
            )
        await publisher.publish(
            TaskStatusUpdateEvent(
                task_id=task_id,
                context_id=context_id,
                status=TaskStatus(state=TaskState.working, timestamp=now_iso()),
                final=False,
            )
        )

        try:
            session = await self._sessions.get_or_create(context_id)
            user_items = user_input_items(user_message)
            input_items = await self._build_input(session, user_items)
            async with self._mcp:
                history = await self._run_streamed(input_items, task_id, context_id, publisher)
                if session is not None:
                    await self._save_history(session, user_items, history[len(input_items) :])
                await self._judge.judge(history, task_id, context_id, publisher)
                await publisher.finished()
        except Exception as e:
            logger.exception("execution of task %s failed: %s", task_id, e)
            raise

    async def cancel(self, context: RequestContext, event_queue: "EventQueue") -> None:
        # TODO: stop the running stream and publish a canceled status once the request handler exposes the in-flight run.
        logger.info("cancel task %s: no-op", context.task_id)
        await EventPublisher(event_queue).finished()

    async def _build_input(
        self, session: "Session | None", user_items: list[dict[str, str]]
    ) -> list[Any]:
        if session is None:
            return list(user_items)
        return list(await session.get_items()) + list(user_items)

    async def _run_streamed(
        self,
        input_items: list[Any],
        task_id: str,
        context_id: str,
        publisher: EventPublisher,
    ) -> list[Any]:
        """Stream the agent run, publishing translated items in arrival order. Returns the full history."""
        from agents import Runner

        kwargs: dict[str, Any] = {}
        if self._run_config is not None:
            kwargs["run_config"] = self._run_config
        if self._max_turns is not None:
            kwargs["max_turns"] = self._max_turns
        translator = EventTranslator(task_id, context_id)
        result = Runner.run_streamed(self._agent, input_items, **kwargs)
        async for event in result.stream_events():
            if event.type != "run_item_stream_event":
                continue
            status_event = translator.translate(event.item)
            if status_event is not None:
                await publisher.publish(status_event)
        return result.to_input_list()

    async def _save_history(
        self, session: "Session", user_items: list[dict[str, str]], new_items: list[Any]
    ) -> None:
        """The user's turn is always saved, with whatever the run added after it."""
        await session.add_items([*user_items, *new_items])
