"""Databricks client construction.

Profiles are resolved through the Databricks unified authentication chain
(~/.databrickscfg or DATABRICKS_* environment variables). The workspace host
is normalized before the client is built because browser-copied URLs often
carry a `?o=<workspace-id>` query string.
"""

import re

from databricks.sdk import WorkspaceClient
from databricks.sdk.core import Config


class AuthError(RuntimeError):
    """Raised when a Databricks profile cannot be resolved."""


def _auth_error_message(message: str, profile: str | None) -> str:
    """Turn an SDK configuration error into an actionable message."""
    if re.search(r"databricks auth login", message):
        cmd = "databricks auth login"
        if profile:
            cmd = f"{cmd} --profile {profile}"
        return (
            "Databricks authentication failed. Your refresh token is invalid.\n"
            f"Re-authenticate with:\n  $ {cmd}"
        )
    return f"Databricks authentication failed: {message}"


def normalize_host(host: str | None) -> str | None:
    """Drop query string and trailing slashes from a workspace URL."""
    if not host:
        return host
    return host.split("?", 1)[0].rstrip("/")


def get_client(profile: str | None = None) -> WorkspaceClient:
    """Return a WorkspaceClient for `profile` (default chain when None)."""
    try:
        cfg = Config(profile=profile) if profile else Config()
    except ValueError as exc:
        raise AuthError(_auth_error_message(str(exc), profile)) from exc
    cfg.host = normalize_host(cfg.host)
    return WorkspaceClient(config=cfg)
