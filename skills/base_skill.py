"""Shared types for the model-backed pipeline skills."""

from dataclasses import dataclass, field
from typing import Any

from claude_client import CompletionClient
from config_loader import Settings
from models import CandidateProfile


@dataclass
class SkillContext:
    """Inputs every skill may read: settings, the candidate, and per-call extras."""

    settings: Settings
    profile: CandidateProfile | None = None
    extra: dict = field(default_factory=dict)


@dataclass
class SkillResult:
    """Tagged outcome of one skill call.

    Callers branch on success; data is only meaningful when it is True,
    except for scoring, which always carries a fallback score list.
    """

    success: bool
    data: Any = None
    error: str | None = None
    metadata: dict = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any, **metadata) -> "SkillResult":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, **metadata) -> "SkillResult":
        return cls(success=False, error=error, metadata=metadata)


class BaseSkill:
    """One structured-output call against the completion service.

    A skill holds no state besides its client, never touches the stores,
    and reports upstream failures through SkillResult.fail rather than
    raising.
    """

    def __init__(self, client: CompletionClient):
        self.client = client

    async def execute(self, context: SkillContext, *args, **kwargs) -> SkillResult:
        raise NotImplementedError(f"{type(self).__name__} does not implement execute()")
