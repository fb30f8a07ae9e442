"""JudgeDriver: classifies the finished run with the judge agent and publishes the terminal events."""

import logging
import uuid
from typing import Any

from a2a.types import (
    Artifact,
    Part,
    TaskArtifactUpdateEvent,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)
from pydantic import ValidationError

from a2a_bridge.executor.models import (
    ArtifactTextPart,
    JudgeTaskState,
    StructuredResponse,
    StructuredResponseArtifact,
    StructuredResponseWithArtifacts,
)
from a2a_bridge.executor.parts import json_or_text_part, now_iso, text_part
from a2a_bridge.executor.publisher import EventPublisher

logger = logging.getLogger(__name__)

__all__ = ["JudgeDriver", "artifact_parts", "coerce_structured_response"]


def coerce_structured_response(output: Any) -> StructuredResponse | None:
    """StructuredResponse from the judge's final_output (model, dict or JSON string). None if unusable."""
    if output is None or output == "":
        return None
    try:
        if isinstance(output, StructuredResponse):
            return output
        if callable(getattr(output, "model_dump", None)):
            output = output.model_dump()
        if isinstance(output, (str, bytes)):
            return StructuredResponse.model_validate_json(output)
        return StructuredResponse.model_validate(output)
    except ValidationError as e:
        logger.warning("judge output is not a StructuredResponse: %s", e)
        return None


def artifact_parts(artifact: StructuredResponseArtifact) -> list[Part]:
    """Text stays text; data is a data part when it is a JSON object, text otherwise."""
    if isinstance(artifact.part, ArtifactTextPart):
        return [text_part(artifact.part.text)]
    return [json_or_text_part(artifact.part.data)]


class JudgeDriver:
    """Runs the judge agent once over the transcript; publishes artifacts then one final status."""

    def __init__(self, judge_agent: Any, run_config: Any = None) -> None:
        self._judge_agent = judge_agent
        self._run_config = run_config

    async def judge(
        self,
        history: list[Any],
        task_id: str,
        context_id: str,
        publisher: EventPublisher,
    ) -> TaskState:
        """Publish the judge's verdict for task_id. Returns the terminal state published."""
        from agents import Runner

        kwargs: dict[str, Any] = {}
        if self._run_config is not None:
            kwargs["run_config"] = self._run_config
        result = await Runner.run(self._judge_agent, history, **kwargs)
        response = coerce_structured_response(result.final_output)

        if response is None:
            logger.warning("judge produced no structured output for task %s", task_id)
            await self._publish_final(TaskState.unknown, task_id, context_id, publisher)
            return TaskState.unknown

        artifacts = self._checked_artifacts(response, task_id)
        if response.task_state == JudgeTaskState.COMPLETED:
            for artifact in artifacts:
                await publisher.publish(self._artifact_event(artifact, task_id, context_id))

        state = response.task_state.to_task_state()
        await self._publish_final(state, task_id, context_id, publisher)
        return state

    def _checked_artifacts(
        self, response: StructuredResponse, task_id: str
    ) -> list[StructuredResponseArtifact]:
        """Artifacts to emit. A state/artifacts mismatch emits none; the claimed state still stands."""
        try:
            StructuredResponseWithArtifacts.model_validate(response.model_dump())
        except ValidationError as e:
            logger.warning(
                "judge output for task %s violates state/artifacts pairing: %s",
                task_id,
                e,
            )
            return []
        return list(response.artifacts or [])

    def _artifact_event(
        self, artifact: StructuredResponseArtifact, task_id: str, context_id: str
    ) -> TaskArtifactUpdateEvent:
        return TaskArtifactUpdateEvent(
            task_id=task_id,
            context_id=context_id,
            artifact=Artifact(
                artifact_id=str(uuid.uuid4()),
                name=artifact.name,
                description=artifact.description,
                parts=artifact_parts(artifact),
                metadata={"timestamp": now_iso()},
            ),
        )

    async def _publish_final(
        self,
        state: TaskState,
        task_id: str,
        context_id: str,
        publisher: EventPublisher,
    ) -> None:
        await publisher.publish(
            TaskStatusUpdateEvent(
                task_id=task_id,
                context_id=context_id,
                status=TaskStatus(state=state, timestamp=now_iso()),
                final=True,
            )
        )
