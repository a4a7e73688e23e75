from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from .models import ClusterEvent

logger = logging.getLogger(__name__)


class ClusterConfigError(Exception):
    """Raised when no cluster credentials can be resolved."""


class EventQueryError(Exception):
    """Raised when listing events fails (transport or API error)."""


class EventSource(Protocol):
    def list_events(self, namespace: str, field_selector: str) -> List[ClusterEvent]: ...


def load_cluster_config() -> k8s_client.Configuration:
    """
    Resolve cluster credentials.

    The in-cluster service account is tried first, then the default
    kubeconfig loading rules (KUBECONFIG, ~/.kube/config).
    """
    configuration = k8s_client.Configuration()
    try:
        k8s_config.load_incluster_config(client_configuration=configuration)
        logger.info("Using in-cluster configuration")
        return configuration
    except ConfigException as exc:
        logger.debug("In-cluster configuration unavailable: %s", exc)

    try:
        k8s_config.load_kube_config(client_configuration=configuration)
    except (ConfigException, OSError) as exc:
        raise ClusterConfigError(f"could not load credentials from config: {exc}") from exc
    logger.info("Using kubeconfig configuration for host %s", configuration.host)
    return configuration


class KubeEventClient:
    def __init__(self, configuration: Optional[k8s_client.Configuration] = None, api: Any = None):
        if api is not None:
            self._api = api
            self._api_client = None
        else:
            self._api_client = k8s_client.ApiClient(configuration)
            self._api = k8s_client.CoreV1Api(self._api_client)

    def close(self) -> None:
        if self._api_client is not None:
            self._api_client.close()

    def list_events(self, namespace: str, field_selector: str) -> List[ClusterEvent]:
        try:
            if namespace:
                response = self._api.list_namespaced_event(namespace, field_selector=field_selector)
            else:
                response = self._api.list_event_for_all_namespaces(field_selector=field_selector)
        except ApiException as exc:
            raise EventQueryError(f"listing events failed with status {exc.status}: {exc.reason}") from exc
        except HTTPError as exc:
            raise EventQueryError(f"listing events failed: {exc}") from exc
        items = response.items or []
        logger.debug("Fetched %s events for selector %r", len(items), field_selector)
        return [self._to_model(raw) for raw in items]

    @staticmethod
    def _to_model(raw: Any) -> ClusterEvent:
        metadata = raw.metadata
        involved = raw.involved_object
        return ClusterEvent(
            name=(metadata.name if metadata else None) or "",
            namespace=(metadata.namespace if metadata else None) or "",
            kind=(involved.kind if involved else None) or "",
            type=raw.type or "",
            reason=raw.reason or "",
            message=raw.message or "",
            last_timestamp=_as_utc(raw.last_timestamp),
        )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
