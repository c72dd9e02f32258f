from __future__ import annotations

from typing import Callable, Optional

import requests

from shared.constants import DEFAULT_API_BASE
from shared.retry import RetryConfig, call_with_retry, is_retryable_status

_PAGE_SIZE = 100


class GitHubClient:
    def __init__(
        self,
        token_provider: Callable[[], str],
        api_base: str = DEFAULT_API_BASE,
        session: Optional[requests.Session] = None,
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()
        self._retry_config = retry_config

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._api_base}{path}"
        base_headers = kwargs.pop("headers", {})

        def _do_request() -> requests.Response:
            headers = dict(base_headers)
            headers.update(
                {
                    "Authorization": f"token {self._token_provider()}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                }
            )
            return self._session.request(method, url, headers=headers, timeout=20, **kwargs)

        response = call_with_retry(
            operation_name=f"github_{method}_{path}",
            fn=_do_request,
            is_retryable_exception=lambda exc: isinstance(exc, requests.RequestException),
            is_retryable_result=lambda r: is_retryable_status(r.status_code),
            config=self._retry_config,
        )
        response.raise_for_status()
        return response

    def _paginate(self, path: str, params: Optional[dict] = None) -> list[dict]:
        page = 1
        items: list[dict] = []
        while True:
            query = dict(params or {})
            query.update({"per_page": _PAGE_SIZE, "page": page})
            page_data = self._request("GET", path, params=query).json()
            if not page_data:
                break
            items.extend(page_data)
            if len(page_data) < _PAGE_SIZE:
                break
            page += 1
        return items

    def get_pull_request(self, owner: str, repo: str, pull_number: int) -> dict:
        response = self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")
        return response.json()

    def list_pull_commits(self, owner: str, repo: str, pull_number: int) -> list[dict]:
        """List every commit on a pull request, oldest first.

        GitHub caps this endpoint at 250 commits regardless of paging.
        """
        return self._paginate(f"/repos/{owner}/{repo}/pulls/{pull_number}/commits")

    def create_commit_status(
        self,
        owner: str,
        repo: str,
        sha: str,
        state: str,
        context: str,
        description: str,
        target_url: Optional[str] = None,
    ) -> dict:
        """Publish a commit status (``success``, ``failure``, ``error`` or ``pending``)."""
        payload: dict = {
            "state": state,
            "context": context,
            "description": description,
        }
        if target_url:
            payload["target_url"] = target_url

        response = self._request(
            "POST",
            f"/repos/{owner}/{repo}/statuses/{sha}",
            json=payload,
        )
        return response.json()
