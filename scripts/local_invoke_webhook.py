#!/usr/bin/env python3
"""Invoke the webhook Lambda locally with a signed pull_request payload.

Needs GITHUB_TOKEN (or the GitHub App secret ARNs) for the status call;
the webhook secret comes from WEBHOOK_SECRET instead of Secrets Manager.
"""

import argparse
import base64
import hashlib
import hmac
import json
import os
import sys

sys.path.append("src")
import commit_lint.webhook as webhook  # noqa: E402


def build_payload(repo: str, number: int, title: str, base: str, head_sha: str) -> dict:
    return {
        "action": "opened",
        "repository": {"full_name": repo},
        "pull_request": {
            "number": number,
            "title": title,
            "base": {"ref": base},
            "head": {"sha": head_sha},
        },
    }


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--repo", required=True, help="owner/repo")
    parser.add_argument("--number", type=int, required=True)
    parser.add_argument("--title", required=True)
    parser.add_argument("--head-sha", required=True)
    parser.add_argument("--base", default="main")
    args = parser.parse_args()

    secret = os.getenv("WEBHOOK_SECRET", "local-dev-secret").encode("utf-8")
    webhook._cached_webhook_secret = secret

    body = json.dumps(build_payload(args.repo, args.number, args.title, args.base, args.head_sha)).encode("utf-8")
    event = {
        "headers": {
            "X-GitHub-Event": "pull_request",
            "X-GitHub-Delivery": "local-delivery-123",
            "X-Hub-Signature-256": "sha256=" + hmac.new(secret, body, hashlib.sha256).hexdigest(),
        },
        "isBase64Encoded": True,
        "body": base64.b64encode(body).decode("utf-8"),
    }

    out = webhook.lambda_handler(event, None)
    print(json.dumps(out, indent=2))
    return 0 if out["statusCode"] == 200 else 1


if __name__ == "__main__":
    raise SystemExit(main())
