"""Judge agent output schema: task state + artifacts.

StructuredResponse is the judge agent's output_type (OpenAI Agents SDK structured output).
StructuredResponseWithArtifacts adds the state/artifact pairing rule and is used by the
judge driver to re-validate whatever the judge returned.
"""

from enum import Enum
from typing import Literal

from a2a.types import TaskState
from pydantic import BaseModel, Field, model_validator

__all__ = [
    "ArtifactDataPart",
    "ArtifactTextPart",
    "JudgeTaskState",
    "StructuredResponse",
    "StructuredResponseArtifact",
    "StructuredResponseWithArtifacts",
]


class JudgeTaskState(str, Enum):
    """Task states the judge agent may choose.

    submitted, working, canceled and unknown are set by the executor, never by the judge.
    """

    INPUT_REQUIRED = "input-required"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"
    AUTH_REQUIRED = "auth-required"

    def to_task_state(self) -> TaskState:
        return TaskState(self.value)


class ArtifactTextPart(BaseModel):
    kind: Literal["text"]
    text: str


class ArtifactDataPart(BaseModel):
    kind: Literal["data"]
    data: str = Field(description="Stringified JSON object.")


class StructuredResponseArtifact(BaseModel):
    name: str = Field(description="3-5 words describing the task output.")
    description: str = Field(description="1 sentence describing the task output.")
    part: ArtifactTextPart | ArtifactDataPart = Field(
        description=(
            "Task output. This can be a string, a markdown string, "
            "or a stringified JSON object."
        ),
    )


class StructuredResponse(BaseModel):
    """Structured output from the judge agent. Required by output_type."""

    task_state: JudgeTaskState = Field(
        description=(
            "The state of the task:\n"
            "- 'input-required': The task requires additional input from the user.\n"
            "- 'completed': The task has been completed.\n"
            "- 'failed': The task has failed.\n"
            "- 'rejected': The task has been rejected.\n"
            "- 'auth-required': The task requires authentication from the user.\n"
        ),
    )
    artifacts: list[StructuredResponseArtifact] | None = Field(
        default=None,
        description=(
            "Required if `task_state` is 'completed'. "
            "If `task_state` is not 'completed', `artifacts` should not be provided."
        ),
    )


class StructuredResponseWithArtifacts(StructuredResponse):
    """StructuredResponse that rejects a state/artifacts mismatch."""

    @model_validator(mode="after")
    def _check_artifacts_match_state(self) -> "StructuredResponseWithArtifacts":
        has_artifacts = bool(self.artifacts)
        if self.task_state != JudgeTaskState.COMPLETED and has_artifacts:
            raise ValueError(
                "`task_state` is not 'completed', `artifacts` should not be provided."
            )
        if self.task_state == JudgeTaskState.COMPLETED and not has_artifacts:
            raise ValueError(
                "`task_state` is 'completed', `artifacts` must contain at least one item."
            )
        return self
