from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_REPO_PART = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*[A-Za-z0-9]$|^[A-Za-z0-9]$")
MAX_REPO_NAME_LENGTH = 100


@dataclass(frozen=True)
class IssueRecord:
    """Canonical issue produced from one CSV row.

    Frozen so that nothing downstream of the validator can change
    title/body/labels/assignees; the validator hands back repaired copies.
    """

    title: str
    body: str | None = None
    labels: tuple[str, ...] | None = None
    assignees: tuple[str, ...] | None = None
    milestone: str | None = None

    def to_payload(self, milestone_number: int | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title, "body": self.body or ""}
        if self.labels:
            payload["labels"] = list(self.labels)
        if self.assignees:
            payload["assignees"] = list(self.assignees)
        if milestone_number is not None:
            payload["milestone"] = milestone_number
        return payload


@dataclass(frozen=True)
class MilestoneRef:
    number: int
    title: str


@dataclass(frozen=True)
class LabelRef:
    name: str
    color: str = ""


@dataclass(frozen=True)
class RemoteMetadata:
    """Read-only snapshot of repository milestones and labels for one batch."""

    milestones: tuple[MilestoneRef, ...] = ()
    labels: tuple[LabelRef, ...] = ()

    @classmethod
    def empty(cls) -> RemoteMetadata:
        return cls()

    def resolve_milestone(self, title: str | None) -> int | None:
        if not title or not title.strip():
            return None
        wanted = title.strip().casefold()
        for milestone in self.milestones:
            if milestone.title.casefold() == wanted:
                return milestone.number
        return None


@dataclass(frozen=True)
class CreatedIssue:
    number: int
    title: str
    url: str


@dataclass(frozen=True)
class SubmissionOutcome:
    success: bool
    title: str
    number: int | None = None
    url: str | None = None
    reason: str | None = None

    @classmethod
    def created(cls, issue: CreatedIssue) -> SubmissionOutcome:
        return cls(success=True, title=issue.title, number=issue.number, url=issue.url)

    @classmethod
    def failed(cls, title: str, reason: str) -> SubmissionOutcome:
        return cls(success=False, title=title, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "number": self.number, "title": self.title, "url": self.url}
        return {"success": False, "title": self.title, "reason": self.reason}


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str
    html_base: str = field(default="https://github.com", compare=False)

    @classmethod
    def parse(cls, text: str) -> RepoRef:
        owner, sep, name = (text or "").strip().partition("/")
        if not sep or "/" in name:
            raise ValueError(f"Repository must be in owner/repo format: {text!r}")
        return cls.of(owner, name)

    @classmethod
    def of(cls, owner: str, name: str) -> RepoRef:
        owner, name = owner.strip(), name.strip()
        for part in (owner, name):
            if not _REPO_PART.match(part) or len(part) > MAX_REPO_NAME_LENGTH:
                raise ValueError(f"Invalid repository component: {part!r}")
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def issues_url(self) -> str:
        return f"{self.html_base}/{self.full_name}/issues"

    def __str__(self) -> str:
        return self.full_name


__all__ = [
    "CreatedIssue",
    "IssueRecord",
    "LabelRef",
    "MilestoneRef",
    "RemoteMetadata",
    "RepoRef",
    "SubmissionOutcome",
]
