import json
import os
import time
from typing import Callable, Dict, Mapping, Optional, Tuple

import boto3
import jwt
import requests
from botocore.client import BaseClient

from shared.constants import DEFAULT_API_BASE
from shared.retry import call_with_retry, is_retryable_status


class GitHubAppAuth:
    """Mint installation tokens for a GitHub App whose credentials live in Secrets Manager.

    ``app_ids_secret_arn`` holds ``{"app_id": ..., "installation_id": ...}`` and
    ``private_key_secret_arn`` holds the PEM private key. Secrets are read once
    per instance; installation tokens are cached until shortly before expiry.
    """

    def __init__(
        self,
        app_ids_secret_arn: str,
        private_key_secret_arn: str,
        api_base: str = DEFAULT_API_BASE,
        secrets_client: Optional[BaseClient] = None,
        http_session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._app_ids_secret_arn = app_ids_secret_arn
        self._private_key_secret_arn = private_key_secret_arn
        self._api_base = api_base.rstrip("/")
        self._secrets = secrets_client or boto3.client("secretsmanager")
        self._session = http_session or requests.Session()
        self._clock = clock
        self._app_ids: Optional[Tuple[str, str]] = None
        self._private_key: Optional[str] = None
        self._tokens: Dict[str, Tuple[str, float]] = {}

    def _read_secret_string(self, secret_arn: str) -> str:
        response = self._secrets.get_secret_value(SecretId=secret_arn)
        secret_string = response.get("SecretString")
        if not secret_string:
            raise ValueError(f"Secret {secret_arn} has no SecretString")
        return secret_string

    def _load_app_ids(self) -> Tuple[str, str]:
        if self._app_ids is None:
            payload = json.loads(self._read_secret_string(self._app_ids_secret_arn))
            self._app_ids = (str(payload["app_id"]), str(payload["installation_id"]))
        return self._app_ids

    def create_app_jwt(self) -> str:
        app_id, _ = self._load_app_ids()
        if self._private_key is None:
            self._private_key = self._read_secret_string(self._private_key_secret_arn)

        now = int(self._clock())
        claims = {"iat": now - 60, "exp": now + 540, "iss": app_id}
        return jwt.encode(claims, self._private_key, algorithm="RS256")

    def get_installation_token(self, installation_id_override: Optional[str] = None) -> str:
        _, default_installation_id = self._load_app_ids()
        installation_id = str(installation_id_override or default_installation_id)
        cached = self._tokens.get(installation_id)
        if cached and self._clock() < cached[1]:
            return cached[0]

        app_jwt = self.create_app_jwt()
        url = f"{self._api_base}/app/installations/{installation_id}/access_tokens"

        def _request() -> requests.Response:
            return self._session.post(
                url,
                headers={
                    "Authorization": f"Bearer {app_jwt}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=15,
            )

        response = call_with_retry(
            "github_installation_token",
            _request,
            is_retryable_exception=lambda exc: isinstance(exc, requests.RequestException),
            is_retryable_result=lambda r: is_retryable_status(r.status_code),
        )
        response.raise_for_status()
        token = response.json().get("token")
        if not token:
            raise ValueError("GitHub installation token missing from response")

        # Installation tokens live for an hour; refresh five minutes early.
        self._tokens[installation_id] = (token, self._clock() + 55 * 60)
        return token


def token_provider_from_env(
    env: Optional[Mapping[str, str]] = None,
    installation_id: Optional[str] = None,
    secrets_client: Optional[BaseClient] = None,
) -> Callable[[], str]:
    """Pick a token source: a GitHub App when its secret ARNs are set, else ``GITHUB_TOKEN``."""
    env = os.environ if env is None else env
    ids_arn = (env.get("GITHUB_APP_IDS_SECRET_ARN") or "").strip()
    key_arn = (env.get("GITHUB_APP_PRIVATE_KEY_SECRET_ARN") or "").strip()
    if ids_arn and key_arn:
        auth = GitHubAppAuth(
            app_ids_secret_arn=ids_arn,
            private_key_secret_arn=key_arn,
            api_base=env.get("GITHUB_API_BASE") or DEFAULT_API_BASE,
            secrets_client=secrets_client,
        )
        return lambda: auth.get_installation_token(installation_id)

    token = (env.get("GITHUB_TOKEN") or "").strip()
    if not token:
        raise ValueError("Set GITHUB_TOKEN or both GITHUB_APP_IDS_SECRET_ARN and GITHUB_APP_PRIVATE_KEY_SECRET_ARN")
    return lambda: token
