"""
Secret Manager API access.

``SecretManagerClient`` is the interface the service depends on; tests
substitute a fake.  ``GcloudSecretManagerClient`` drives the ``gcloud``
CLI, reusing whatever credentials the user already configured for it.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

from lazycloud.constants import GCLOUD_TIMEOUT_SECONDS
from lazycloud.exceptions import ProviderError
from lazycloud.providers.gcp.secret_manager.model import IamPolicy, Secret, SecretPayload, SecretVersion

logger = logging.getLogger(__name__)


class SecretManagerClient(Protocol):
    """Protocol for Secret Manager operations."""

    async def list_secrets(self) -> list[Secret]:
        ...

    async def create_secret(self, name: str, payload: str | None = None) -> Secret:
        ...

    async def describe_secret(self, name: str) -> Secret:
        ...

    async def delete_secret(self, name: str) -> None:
        ...

    async def get_iam_policy(self, name: str) -> IamPolicy:
        ...

    async def list_versions(self, secret: str) -> list[SecretVersion]:
        ...

    async def add_version(self, secret: str, payload: str) -> SecretVersion:
        ...

    async def disable_version(self, secret: str, version_id: str) -> SecretVersion:
        ...

    async def enable_version(self, secret: str, version_id: str) -> SecretVersion:
        ...

    async def destroy_version(self, secret: str, version_id: str) -> SecretVersion:
        ...

    async def access_version(self, secret: str, version_id: str = "latest") -> SecretPayload:
        ...


class GcloudSecretManagerClient:
    """Secret Manager through ``gcloud secrets ... --format=json``."""

    def __init__(
        self,
        project: str,
        account: str | None = None,
        *,
        gcloud: str = "gcloud",
        timeout: float = GCLOUD_TIMEOUT_SECONDS,
    ) -> None:
        self.project = project
        self.account = account
        self.gcloud = gcloud
        self.timeout = timeout

    async def _run(self, *args: str, stdin: str | None = None) -> Any:
        cmd = [self.gcloud, *args, "--format=json", "--quiet", f"--project={self.project}"]
        if self.account:
            cmd.append(f"--account={self.account}")
        logger.debug("Running %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise ProviderError(f"{self.gcloud} not found; install the Google Cloud CLI") from exc

        data = stdin.encode("utf-8") if stdin is not None else None
        try:
            out, err = await asyncio.wait_for(proc.communicate(data), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ProviderError(f"gcloud {args[0]} {args[1]} timed out after {self.timeout:.0f}s") from None

        if proc.returncode != 0:
            message = err.decode("utf-8", errors="replace").strip()
            raise ProviderError(_last_error_line(message) or f"gcloud exited with status {proc.returncode}")

        text = out.decode("utf-8", errors="replace").strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"Unexpected gcloud output: {exc}") from exc

    async def list_secrets(self) -> list[Secret]:
        data = await self._run("secrets", "list") or []
        return sorted((Secret.from_json(item) for item in data), key=lambda s: s.name)

    async def create_secret(self, name: str, payload: str | None = None) -> Secret:
        args = ["secrets", "create", name, "--replication-policy=automatic"]
        if payload is not None:
            args.append("--data-file=-")
        data = await self._run(*args, stdin=payload)
        if isinstance(data, dict) and "name" in data:
            return Secret.from_json(data)
        return Secret(name)

    async def describe_secret(self, name: str) -> Secret:
        data = await self._run("secrets", "describe", name)
        if not isinstance(data, dict) or "name" not in data:
            raise ProviderError(f"gcloud did not describe secret {name}")
        return Secret.from_json(data)

    async def delete_secret(self, name: str) -> None:
        await self._run("secrets", "delete", name)

    async def get_iam_policy(self, name: str) -> IamPolicy:
        data = await self._run("secrets", "get-iam-policy", name)
        return IamPolicy.from_json(data if isinstance(data, dict) else {})

    async def list_versions(self, secret: str) -> list[SecretVersion]:
        data = await self._run("secrets", "versions", "list", secret) or []
        versions = [SecretVersion.from_json(item) for item in data]
        return sorted(versions, key=_version_sort_key, reverse=True)

    async def add_version(self, secret: str, payload: str) -> SecretVersion:
        data = await self._run("secrets", "versions", "add", secret, "--data-file=-", stdin=payload)
        return _version(data)

    async def _set_state(self, verb: str, secret: str, version_id: str) -> SecretVersion:
        data = await self._run("secrets", "versions", verb, version_id, f"--secret={secret}")
        return _version(data)

    async def disable_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("disable", secret, version_id)

    async def enable_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("enable", secret, version_id)

    async def destroy_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("destroy", secret, version_id)

    async def access_version(self, secret: str, version_id: str = "latest") -> SecretPayload:
        data = await self._run("secrets", "versions", "access", version_id, f"--secret={secret}")
        try:
            return SecretPayload.from_json(data or {})
        except ValueError as exc:
            raise ProviderError(str(exc)) from exc


def _version(data: Any) -> SecretVersion:
    if not isinstance(data, dict) or "name" not in data:
        raise ProviderError("gcloud did not return a secret version")
    return SecretVersion.from_json(data)


def _version_sort_key(version: SecretVersion) -> tuple[int, str]:
    return (int(version.version_id), "") if version.version_id.isdigit() else (-1, version.version_id)


def _last_error_line(stderr: str) -> str:
    """gcloud prefixes the useful part with ``ERROR:``; keep just that line."""
    for line in reversed(stderr.splitlines()):
        if line.startswith("ERROR:"):
            return line.removeprefix("ERROR:").strip()
    return stderr.splitlines()[-1].strip() if stderr else ""
