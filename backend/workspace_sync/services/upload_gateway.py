"""Object store upload gateway — signed POST-policy uploads over httpx."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import posixpath
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

import httpx

from workspace_sync.config import Settings, settings as default_settings
from workspace_sync.exceptions import UploadError
from workspace_sync.models.sync_task import TargetEnv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    success: bool
    error: str | None = None


class UploadGateway(Protocol):
    """Pushes one file to the store backing ``env``.

    Ordinary remote failures come back as ``UploadResult(success=False)``;
    only local problems (e.g. missing credentials) raise.
    """

    async def upload(self, path: str, content: bytes, env: TargetEnv) -> UploadResult: ...


@dataclass(frozen=True)
class UploadPolicy:
    host: str
    access_key_id: str
    policy: str  # base64 JSON
    signature: str  # base64 HMAC-SHA1
    expires_at: datetime


def build_policy(env: TargetEnv, cfg: Settings, now: datetime | None = None) -> UploadPolicy:
    """Sign a short-lived browser upload policy for the env's bucket."""
    if not cfg.oss_access_key_id or not cfg.oss_access_key_secret:
        raise UploadError("Object store credentials are not configured")

    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=cfg.oss_policy_ttl_seconds)
    document = {
        "expiration": expires_at.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        "conditions": [["content-length-range", 0, cfg.oss_max_content_length]],
    }
    policy = base64.b64encode(json.dumps(document).encode()).decode()
    digest = hmac.new(
        cfg.oss_access_key_secret.encode(), policy.encode(), hashlib.sha1
    ).digest()
    return UploadPolicy(
        host=f"https://{cfg.bucket_for(TargetEnv(env).value)}.{cfg.oss_endpoint}",
        access_key_id=cfg.oss_access_key_id,
        policy=policy,
        signature=base64.b64encode(digest).decode(),
        expires_at=expires_at,
    )


def object_key(path: str) -> str:
    """Object key for a workspace path: the path without its leading "/"."""
    return path.lstrip("/")


class OssUploadGateway:
    """Uploads via multipart POST to ``https://<bucket>.<endpoint>``.

    Every call makes exactly one HTTP attempt; retries are not performed.
    """

    def __init__(
        self,
        cfg: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cfg = cfg or default_settings
        self._transport = transport

    async def upload(self, path: str, content: bytes, env: TargetEnv) -> UploadResult:
        key = object_key(path)
        if self._cfg.is_dev_mode:
            logger.info("[DEV] upload (not sent): %s -> %s (%d bytes)", key, env, len(content))
            return UploadResult(success=True)

        policy = build_policy(env, self._cfg)
        data = {
            "key": key,
            "policy": policy.policy,
            "OSSAccessKeyId": policy.access_key_id,
            "signature": policy.signature,
            "success_action_status": "200",
        }
        files = {"file": (posixpath.basename(key), content, "application/octet-stream")}

        logger.info("Uploading %s to %s (%d bytes)", key, policy.host, len(content))
        try:
            async with httpx.AsyncClient(
                timeout=self._cfg.upload_timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(policy.host, data=data, files=files)
        except httpx.HTTPError as exc:
            logger.warning("Upload error for %s: %s", key, exc)
            return UploadResult(success=False, error=str(exc) or exc.__class__.__name__)

        if resp.status_code == 200:
            logger.info("Upload successful: %s", key)
            return UploadResult(success=True)

        logger.warning("Upload failed for %s: HTTP %s", key, resp.status_code)
        return UploadResult(success=False, error=f"Upload failed with status {resp.status_code}")
