"""Lambda entrypoint for GitHub ``pull_request`` webhooks.

Validates the pull request title (or its commits, with ``VALIDATE=commits``)
and publishes the verdict as a commit status on the head sha, so branch
protection can require the ``conventional-commits`` context.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from typing import Any, Optional

import boto3
import requests
from botocore.client import BaseClient

from commit_lint.config import ConfigError, LintConfig, config_from_env
from commit_lint.policy import validate_messages
from commit_lint.report import build_report, log_verdict, status_description
from commit_lint.sources import Message, SourceError, pull_request_commit_source, pull_request_title_source
from shared.constants import DEFAULT_API_BASE, DEFAULT_REGION, STATUS_CONTEXT
from shared.github_app_auth import token_provider_from_env
from shared.github_client import GitHubClient
from shared.logging import get_logger

logger = get_logger("commit_lint_webhook")

ALLOWED_ACTIONS = {"opened", "edited", "synchronize", "reopened"}

_secrets: Optional[BaseClient] = None
_cached_webhook_secret: bytes | None = None


def _secrets_client() -> BaseClient:
    global _secrets
    if _secrets is None:
        _secrets = boto3.client("secretsmanager", region_name=os.getenv("AWS_REGION", DEFAULT_REGION))
    return _secrets


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _get_header(headers: dict[str, str], key: str) -> str | None:
    target = key.lower()
    for k, v in (headers or {}).items():
        if k.lower() == target:
            return v
    return None


def _load_webhook_secret(secrets_client: BaseClient | None = None) -> bytes:
    global _cached_webhook_secret
    if _cached_webhook_secret is not None:
        return _cached_webhook_secret

    client = secrets_client or _secrets_client()
    response = client.get_secret_value(SecretId=os.environ["WEBHOOK_SECRET_ARN"])
    secret = response.get("SecretString")
    if not secret:
        raise ValueError("Webhook secret must exist in SecretString")
    _cached_webhook_secret = secret.encode("utf-8")
    return _cached_webhook_secret


def verify_signature(raw_body: bytes, signature_header: str, secret: bytes) -> bool:
    if not signature_header or not signature_header.startswith("sha256="):
        return False

    expected = "sha256=" + hmac.new(secret, raw_body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header)


def _extract_raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


def _repo_allowed(repo_full_name: str) -> bool:
    configured = os.getenv("GITHUB_ALLOWED_REPOS", "").strip()
    if not configured:
        return True
    allowed = {repo.strip() for repo in configured.split(",") if repo.strip()}
    return repo_full_name in allowed


def _collect(
    gh: GitHubClient,
    owner: str,
    repo: str,
    pull_request: dict[str, Any],
    config: LintConfig,
) -> list[Message]:
    if config.validate == "commits":
        return pull_request_commit_source(
            gh, owner, repo, int(pull_request["number"]), config.skip_merge_commits
        )
    return pull_request_title_source(pull_request)


def check_pull_request(
    gh: GitHubClient,
    repo_full_name: str,
    pull_request: dict[str, Any],
    config: LintConfig,
) -> dict[str, Any]:
    """Validate one pull request and publish the commit status. Returns the report body."""
    owner, repo = repo_full_name.split("/", maxsplit=1)
    head_sha = (pull_request.get("head") or {}).get("sha") or ""
    log = logger.bind(repo=repo_full_name, pr_number=pull_request.get("number"), sha=head_sha)

    verdict = validate_messages(_collect(gh, owner, repo, pull_request, config), config.allowed_types)
    report = build_report(verdict, config.validate)
    log_verdict(log, report)

    try:
        gh.create_commit_status(
            owner,
            repo,
            head_sha,
            state="success" if report.valid else "failure",
            context=STATUS_CONTEXT,
            description=status_description(report),
        )
    except requests.RequestException as exc:
        raise SourceError(f"Could not publish commit status for {head_sha}: {exc}") from exc

    return report.model_dump()


def lambda_handler(event: dict[str, Any], _context: Any) -> dict[str, Any]:
    headers = event.get("headers") or {}
    github_event = _get_header(headers, "X-GitHub-Event")
    delivery_id = _get_header(headers, "X-GitHub-Delivery")
    signature = _get_header(headers, "X-Hub-Signature-256")

    if github_event != "pull_request":
        return _response(202, {"ignored": "non_pull_request_event"})

    if not delivery_id:
        return _response(400, {"error": "missing_delivery_id"})

    raw_body = _extract_raw_body(event)
    if not verify_signature(raw_body, signature or "", _load_webhook_secret()):
        logger.warning("signature_verification_failed", extra={"delivery_id": delivery_id})
        return _response(401, {"error": "invalid_signature"})

    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        logger.warning("invalid_json_body", extra={"delivery_id": delivery_id})
        return _response(400, {"error": "invalid_json"})
    if not isinstance(payload, dict):
        return _response(400, {"error": "invalid_json"})

    if payload.get("action") not in ALLOWED_ACTIONS:
        return _response(202, {"ignored": "action_not_supported"})

    pull_request = payload.get("pull_request") or {}
    repo_full_name = (payload.get("repository") or {}).get("full_name") or ""
    if "/" not in repo_full_name or not pull_request.get("number") or not (pull_request.get("head") or {}).get("sha"):
        return _response(400, {"error": "missing_required_fields"})

    if not _repo_allowed(repo_full_name):
        logger.info("repo_not_allowed", extra={"delivery_id": delivery_id, "repo": repo_full_name})
        return _response(202, {"ignored": "repo_not_allowed"})

    try:
        config = config_from_env()
    except ConfigError as exc:
        logger.error("configuration_invalid", extra={"delivery_id": delivery_id, "extra": {"error": str(exc)}})
        return _response(500, {"error": "configuration_invalid"})

    base_ref = (pull_request.get("base") or {}).get("ref")
    if base_ref != config.target_branch:
        logger.info(
            "validation_skipped",
            extra={"delivery_id": delivery_id, "repo": repo_full_name, "extra": {"base_ref": base_ref}},
        )
        return _response(202, {"ignored": "base_not_target_branch"})

    installation_id = (payload.get("installation") or {}).get("id")
    try:
        token_provider = token_provider_from_env(installation_id=str(installation_id) if installation_id else None)
    except ValueError as exc:
        logger.error("configuration_invalid", extra={"delivery_id": delivery_id, "extra": {"error": str(exc)}})
        return _response(500, {"error": "configuration_invalid"})

    try:
        gh = GitHubClient(token_provider=token_provider, api_base=os.getenv("GITHUB_API_BASE", DEFAULT_API_BASE))
        body = check_pull_request(gh, repo_full_name, pull_request, config)
    except (SourceError, ValueError, requests.RequestException):
        logger.exception("infrastructure_failure", extra={"delivery_id": delivery_id, "repo": repo_full_name})
        return _response(502, {"error": "github_unavailable"})

    return _response(200, body)
