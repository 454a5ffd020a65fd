"""boto3-backed client for the SQS queue service.

Fetches queue summaries (message counts) for a full refresh and the full
attribute set for a single queue. Every botocore failure is converted into
the QueueServiceError taxonomy so callers only need to handle one family
of exceptions.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..models import QueueDetail, QueueSummary, RedrivePolicy, is_dead_letter_name
from .errors import NotFoundError, classify_error

logger = logging.getLogger(__name__)

SUMMARY_ATTRIBUTES = [
    "ApproximateNumberOfMessages",
    "ApproximateNumberOfMessagesNotVisible",
    "ApproximateNumberOfMessagesDelayed",
]

PAGE_SIZE = 1000


def queue_name_from_url(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name or "unknown"


def _int_attr(attributes: Dict[str, str], key: str) -> Optional[int]:
    value = attributes.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _ts_attr(attributes: Dict[str, str], key: str) -> Optional[datetime]:
    seconds = _int_attr(attributes, key)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_redrive_policy(raw: Optional[str]) -> Optional[RedrivePolicy]:
    """Parse the RedrivePolicy attribute (a JSON document) if present."""
    if not raw:
        return None
    try:
        doc = json.loads(raw)
        return RedrivePolicy(
            dead_letter_target_arn=str(doc.get("deadLetterTargetArn", "")),
            max_receive_count=int(doc.get("maxReceiveCount", 0)),
        )
    except (ValueError, TypeError, AttributeError) as e:
        logger.debug("Unparseable RedrivePolicy %r: %s", raw, e)
        return None


def build_summary(name: str, url: str, attributes: Dict[str, str]) -> QueueSummary:
    return QueueSummary(
        name=name,
        approximate_messages=_int_attr(attributes, "ApproximateNumberOfMessages") or 0,
        in_flight_messages=_int_attr(attributes, "ApproximateNumberOfMessagesNotVisible") or 0,
        delayed_messages=_int_attr(attributes, "ApproximateNumberOfMessagesDelayed") or 0,
        is_dead_letter_queue=is_dead_letter_name(name),
        url=url,
    )


def build_detail(name: str, url: str, attributes: Dict[str, str]) -> QueueDetail:
    return QueueDetail(
        summary=build_summary(name, url, attributes),
        arn=attributes.get("QueueArn", ""),
        retention_seconds=_int_attr(attributes, "MessageRetentionPeriod"),
        visibility_timeout_seconds=_int_attr(attributes, "VisibilityTimeout"),
        maximum_message_size=_int_attr(attributes, "MaximumMessageSize"),
        delay_seconds=_int_attr(attributes, "DelaySeconds"),
        created_at=_ts_attr(attributes, "CreatedTimestamp"),
        last_modified_at=_ts_attr(attributes, "LastModifiedTimestamp"),
        redrive_policy=parse_redrive_policy(attributes.get("RedrivePolicy")),
    )


class SqsQueueClient:
    """Thin wrapper over a boto3 SQS client.

    Safe to call from worker threads: boto3 clients are thread-safe and the
    name-to-URL cache is guarded by a lock.
    """

    def __init__(self, region: Optional[str] = None,
                 profile: Optional[str] = None,
                 endpoint_url: Optional[str] = None,
                 client: Any = None):
        if client is None:
            session = boto3.session.Session(profile_name=profile, region_name=region)
            client = session.client(
                "sqs",
                endpoint_url=endpoint_url,
                config=Config(retries={"mode": "standard", "max_attempts": 3}),
            )
        self._client = client
        self._urls: Dict[str, str] = {}
        self._urls_lock = threading.Lock()

    @property
    def region(self) -> str:
        meta = getattr(self._client, "meta", None)
        return getattr(meta, "region_name", None) or "?"

    def _queue_url(self, name: str) -> str:
        with self._urls_lock:
            url = self._urls.get(name)
        if url:
            return url
        resp = self._client.get_queue_url(QueueName=name)
        url = resp["QueueUrl"]
        with self._urls_lock:
            self._urls[name] = url
        return url

    def _forget(self, name: str) -> None:
        with self._urls_lock:
            self._urls.pop(name, None)

    # -- Queue service operations --

    def list_queues(self, scope: str = "") -> List[QueueSummary]:
        """Return a summary for every queue whose name starts with *scope*."""
        params: Dict[str, Any] = {"PaginationConfig": {"PageSize": PAGE_SIZE}}
        if scope:
            params["QueueNamePrefix"] = scope
        try:
            urls: List[str] = []
            paginator = self._client.get_paginator("list_queues")
            for page in paginator.paginate(**params):
                urls.extend(page.get("QueueUrls", []))
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e) from e

        summaries: List[QueueSummary] = []
        fresh_urls: Dict[str, str] = {}
        for url in urls:
            name = queue_name_from_url(url)
            try:
                resp = self._client.get_queue_attributes(
                    QueueUrl=url, AttributeNames=SUMMARY_ATTRIBUTES)
            except (ClientError, BotoCoreError) as e:
                err = classify_error(e, name)
                if isinstance(err, NotFoundError):
                    # Deleted between list and attribute fetch
                    logger.debug("Queue %s vanished during refresh", name)
                    continue
                raise err from e
            summaries.append(build_summary(name, url, resp.get("Attributes", {})))
            fresh_urls[name] = url

        with self._urls_lock:
            self._urls = fresh_urls
        logger.debug("Listed %d queues (scope=%r)", len(summaries), scope)
        return summaries

    def get_queue_detail(self, name: str) -> QueueDetail:
        """Fetch every attribute of a single queue."""
        try:
            url = self._queue_url(name)
            resp = self._client.get_queue_attributes(
                QueueUrl=url, AttributeNames=["All"])
        except (ClientError, BotoCoreError) as e:
            err = classify_error(e, name)
            if isinstance(err, NotFoundError):
                self._forget(name)
            raise err from e
        return build_detail(name, url, resp.get("Attributes", {}))

    def purge_queue(self, name: str) -> None:
        """Delete every message in the queue."""
        try:
            url = self._queue_url(name)
            self._client.purge_queue(QueueUrl=url)
        except (ClientError, BotoCoreError) as e:
            raise classify_error(e, name) from e
        logger.info("Purged queue %s", name)
