from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import requests

from .errors import AuthorizationError, redact
from .models import CreatedIssue, LabelRef, MilestoneRef, RemoteMetadata, RepoRef
from .retry import RetryConfig, run_with_retries

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "issueimport-rest/0.1.0"
HTTP_ERROR_STATUS = 400
REQUEST_TIMEOUT = 30


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub REST API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(redact(message))
        self.status = status
        self.response_text = redact(response_text) if response_text else response_text


def _api_message(response: requests.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            details = "; ".join(
                str(e.get("message") or e.get("code") or e) if isinstance(e, dict) else str(e)
                for e in errors
            )
            return f"{data['message']}: {details}"
        return str(data["message"])
    return None


@dataclass
class GitHubRestClient:
    """REST client for one repository, implementing the ``IssueTracker`` protocol."""

    token: str
    repo: str
    base_url: str = DEFAULT_API_URL
    session: requests.Session | None = None
    retry: RetryConfig | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.repo_ref = RepoRef.parse(self.repo)
        self._session = self.session or requests.Session()
        self._session.headers.setdefault("Authorization", f"Bearer {self.token}")
        self._session.headers.setdefault("Accept", "application/vnd.github+json")
        self._session.headers.setdefault("X-GitHub-Api-Version", "2022-11-28")
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    # ---- REST helpers -------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Any:
        url = (
            path
            if path.startswith("http")
            else f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        )

        def _run() -> requests.Response:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._session.headers,
                timeout=REQUEST_TIMEOUT,
            )
            if response.status_code >= HTTP_ERROR_STATUS:
                detail = _api_message(response)
                raise GitHubAPIError(
                    f"GitHub API {method} {url} failed with {response.status_code}"
                    + (f": {detail}" if detail else ""),
                    status=response.status_code,
                    response_text=response.text,
                )
            return response

        response = run_with_retries(_run, cfg=self.retry, idempotent=method == "GET")
        if response.text:
            try:
                return response.json()
            except ValueError:
                return response.text
        return None

    def _paginate(self, path: str, *, params: dict[str, Any] | None = None) -> list[Any]:
        params = dict(params or {})
        per_page = params.setdefault("per_page", 100)
        params.setdefault("page", 1)
        results: list[Any] = []
        while True:
            data = self._request("GET", path, params=params)
            if not isinstance(data, list):
                break
            results.extend(data)
            if len(data) < per_page:
                break
            params["page"] = params.get("page", 1) + 1
        return results

    # ---- Metadata -----------------------------------------------------
    def list_milestones(self, *, state: str = "all") -> list[MilestoneRef]:
        data = self._paginate(f"/repos/{self.repo}/milestones", params={"state": state})
        out: list[MilestoneRef] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            number, title = entry.get("number"), entry.get("title")
            if isinstance(number, int) and isinstance(title, str):
                out.append(MilestoneRef(number=number, title=title))
        return out

    def list_labels(self) -> list[LabelRef]:
        data = self._paginate(f"/repos/{self.repo}/labels")
        return [
            LabelRef(name=entry["name"], color=str(entry.get("color") or ""))
            for entry in data
            if isinstance(entry, dict) and isinstance(entry.get("name"), str)
        ]

    def fetch_metadata(self) -> RemoteMetadata:
        return RemoteMetadata(
            milestones=tuple(self.list_milestones()),
            labels=tuple(self.list_labels()),
        )

    # ---- Issue operations --------------------------------------------
    def create_issue(
        self,
        *,
        title: str,
        body: str,
        labels: Sequence[str] | None = None,
        assignees: Sequence[str] | None = None,
        milestone: int | None = None,
    ) -> CreatedIssue:
        payload: dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = list(labels)
        if assignees:
            payload["assignees"] = list(assignees)
        if milestone is not None:
            payload["milestone"] = milestone
        data = self._request("POST", f"/repos/{self.repo}/issues", json_body=payload)
        if not isinstance(data, dict) or not isinstance(data.get("number"), int):
            raise GitHubAPIError("GitHub API returned an unexpected create-issue payload")
        number = data["number"]
        return CreatedIssue(
            number=number,
            title=str(data.get("title") or title),
            url=str(data.get("html_url") or f"{self.repo_ref.issues_url}/{number}"),
        )

    def check_access(self) -> None:
        """Ensure the repository exists and the token may create issues in it.

        HTTP failures raise ``GitHubAPIError``; a readable repository without
        push or admin permission raises ``AuthorizationError``.
        """
        data = self._request("GET", f"/repos/{self.repo}")
        permissions = data.get("permissions") if isinstance(data, dict) else None
        if isinstance(permissions, dict) and not (
            permissions.get("push") or permissions.get("admin")
        ):
            raise AuthorizationError(
                f"Insufficient permissions to create issues in {self.repo}. "
                "You need push or admin access."
            )


__all__ = ["DEFAULT_API_URL", "GitHubAPIError", "GitHubRestClient"]
