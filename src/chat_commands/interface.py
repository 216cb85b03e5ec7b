from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, Protocol


class ProviderId(StrEnum):
    CLAUDE = "claude"
    CODEX = "codex"


# Spoken forms accepted for each provider, matched case-insensitively.
PROVIDER_ALIASES: dict[ProviderId, tuple[str, ...]] = {
    ProviderId.CLAUDE: ("claude", "claude code"),
    ProviderId.CODEX: ("codex", "openai codex"),
}


@dataclass(frozen=True)
class ProviderRequest:
    provider: ProviderId
    project_hint: str | None
    instruction: str
    kind: Literal["provider"] = "provider"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "provider": str(self.provider),
            "project_hint": self.project_hint,
            "instruction": self.instruction,
        }


@dataclass(frozen=True)
class JobReference:
    owner: str
    repo: str
    number: int

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"


class JobKind(StrEnum):
    RUN = "run"
    REVIEW = "review"
    QA = "qa"


@dataclass(frozen=True)
class JobRequest:
    reference: JobReference
    instruction: str
    job: JobKind = JobKind.REVIEW
    fix_conflicts: bool = False
    kind: Literal["job"] = "job"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "reference": {
                "owner": self.reference.owner,
                "repo": self.reference.repo,
                "number": self.reference.number,
            },
            "instruction": self.instruction,
            "job": str(self.job),
            "fix_conflicts": self.fix_conflicts,
        }


AutomationRequest = ProviderRequest | JobRequest


@dataclass(frozen=True)
class DirectiveMatch:
    """A provider directive found at the start of a message.

    ``start``/``end`` are offsets into the mention-stripped message.
    ``rule_index`` is the position of the grammar rule that produced it.
    """

    start: int
    end: int
    provider: ProviderId
    rule_index: int


class DirectiveRule(Protocol):
    @property
    def name(self) -> str: ...
    def candidates(self, text: str, rule_index: int) -> list[DirectiveMatch]: ...
