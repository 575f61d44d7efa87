"""S3 app store.

Stores app documents as JSON objects in S3 with optional namespace prefix::

    s3://{bucket}/{prefix}/apps/{app_id}.json
    s3://{bucket}/{prefix}/apps/{app_id}/executions/{execution_id}.json

When prefix is None, the key collapses to::

    s3://{bucket}/apps/{app_id}.json

Uses ``anyio.to_thread.run_sync`` to run boto3 calls in the thread pool,
matching the same async pattern as LocalAppStore.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from functools import partial
from typing import Any

import boto3
from anyio import to_thread
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from hector.app_runtime.models.app import AppConfig
from hector.app_runtime.models.execution import Execution
from hector.app_runtime.store.base import APPS_DIR, EXECUTIONS_DIR, check_app_id

_SUFFIX = ".json"


def _create_s3_client(
    endpoint_url: str | None,
    access_key: str | None,
    secret_key: str | None,
    region: str | None = None,
    path_style: bool = False,
) -> Any:
    """Create a boto3 S3 client.

    Args:
        endpoint_url: S3 endpoint URL (``None`` for AWS).
        access_key: Access key ID (``None`` to use the default credential chain).
        secret_key: Secret access key.
        region: Region name (optional, some endpoints require it).
        path_style: Use path-style addressing instead of virtual-hosted.
            Required by MinIO and some S3-compatible services.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
        s3={"addressing_style": "path" if path_style else "auto"},
    )

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        region_name=region,
        config=config,
    )


@contextlib.contextmanager
def _backend_errors(key: str) -> Iterator[None]:
    """Re-raise botocore failures as ``OSError`` so callers stay backend-agnostic."""
    try:
        yield
    except (BotoCoreError, ClientError) as e:
        msg = f"S3 request failed for {key}: {e}"
        raise OSError(msg) from e


class S3AppStore:
    """S3 implementation of the AppStore protocol.

    Layout::

        s3://{bucket}/{key_prefix}apps/{app_id}.json

    Where ``key_prefix`` is ``{prefix}/`` if prefix is set, or empty string.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        prefix: str | None = None,
        region: str | None = None,
        path_style: bool = False,
        client: Any = None,
    ) -> None:
        self._bucket = bucket
        self._client = client or _create_s3_client(
            endpoint_url, access_key, secret_key, region=region, path_style=path_style
        )
        self._key_prefix = f"{prefix}/{APPS_DIR}/" if prefix else f"{APPS_DIR}/"

    def _object_key(self, app_id: str) -> str:
        return f"{self._key_prefix}{check_app_id(app_id)}{_SUFFIX}"

    def _history_prefix(self, app_id: str) -> str:
        return f"{self._key_prefix}{check_app_id(app_id)}/{EXECUTIONS_DIR}/"

    def _execution_key(self, app_id: str, execution_id: str) -> str:
        execution_id = check_app_id(execution_id, kind="execution")
        return f"{self._history_prefix(app_id)}{execution_id}{_SUFFIX}"

    # -- Write -----------------------------------------------------------------

    async def write_app(self, app: AppConfig) -> None:
        key = self._object_key(app.id)
        data = app.model_dump_json(by_alias=True, indent=2)
        with _backend_errors(key):
            await to_thread.run_sync(
                partial(
                    self._client.put_object,
                    Bucket=self._bucket,
                    Key=key,
                    Body=data.encode("utf-8"),
                    ContentType="application/json",
                )
            )

    # -- Read ------------------------------------------------------------------

    async def read_app(self, app_id: str) -> AppConfig:
        key = self._object_key(app_id)
        with _backend_errors(key):
            body = await to_thread.run_sync(partial(self._get_object_body, key))
        return AppConfig.model_validate_json(body)

    def _get_object_body(self, key: str) -> str:
        """Get object and read body in the same thread.

        Reading the streaming body must happen in the same thread as
        get_object to avoid issues with chunked transfer encoding.
        """
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
        except self._client.exceptions.NoSuchKey:
            msg = f"Document not found: {key}"
            raise FileNotFoundError(msg) from None
        return resp["Body"].read().decode("utf-8")

    async def list_app_ids(self) -> list[str]:
        with _backend_errors(self._key_prefix):
            return await to_thread.run_sync(partial(self._list_ids, self._key_prefix))

    def _list_keys(self, prefix: str) -> list[str]:
        paginator = self._client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    def _list_ids(self, prefix: str) -> list[str]:
        ids: list[str] = []
        for key in self._list_keys(prefix):
            name = key[len(prefix) :]
            # Direct children only.
            if "/" not in name and name.endswith(_SUFFIX):
                ids.append(name[: -len(_SUFFIX)])
        return sorted(ids)

    # -- Utilities -------------------------------------------------------------

    async def exists(self, app_id: str) -> bool:
        key = self._object_key(app_id)
        with _backend_errors(key):
            try:
                await to_thread.run_sync(partial(self._client.head_object, Bucket=self._bucket, Key=key))
            except ClientError as e:
                if e.response["Error"]["Code"] in ("404", "NoSuchKey", "NotFound"):
                    return False
                raise
            else:
                return True

    async def delete(self, app_id: str) -> None:
        key = self._object_key(app_id)
        history_prefix = self._history_prefix(app_id)
        # S3 delete is idempotent -- no error if key doesn't exist.
        with _backend_errors(key):
            await to_thread.run_sync(partial(self._client.delete_object, Bucket=self._bucket, Key=key))
            for history_key in await to_thread.run_sync(partial(self._list_keys, history_prefix)):
                await to_thread.run_sync(partial(self._client.delete_object, Bucket=self._bucket, Key=history_key))

    # -- Execution history -----------------------------------------------------

    async def write_execution(self, app_id: str, execution_id: str, execution: Execution) -> None:
        key = self._execution_key(app_id, execution_id)
        data = execution.model_dump_json(by_alias=True, indent=2)
        with _backend_errors(key):
            await to_thread.run_sync(
                partial(
                    self._client.put_object,
                    Bucket=self._bucket,
                    Key=key,
                    Body=data.encode("utf-8"),
                    ContentType="application/json",
                )
            )

    async def read_execution(self, app_id: str, execution_id: str) -> Execution:
        key = self._execution_key(app_id, execution_id)
        with _backend_errors(key):
            body = await to_thread.run_sync(partial(self._get_object_body, key))
        return Execution.model_validate_json(body)

    async def list_execution_ids(self, app_id: str) -> list[str]:
        prefix = self._history_prefix(app_id)
        with _backend_errors(prefix):
            return await to_thread.run_sync(partial(self._list_ids, prefix))
