"""Endpoint registry: builds, names and indexes actions for an API document."""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set, Union

import httpx

from .collisions import collision_group, escalation_depth, find_colliding_indices, required_escalation
from .config import Settings, build_base_url, get_settings, normalize_swagger_path
from .endpoint import Endpoint, EndpointAction
from .errors import InitializationError, InvalidDocumentError, OpenApiActionsError
from .models import NO_ESCALATION, Escalation, EscalationLike
from .openapi import DocumentLoader, parse_path_item
from .transport import HttpxTransport, Transport


logger = logging.getLogger(__name__)


class Service:
    """
    Registry of the endpoints of one API and the actions synthesized for them.

    Registration is serialized: each registration computes collisions against
    the paths registered so far and may rename earlier endpoints. Once
    initialized the registry is only read, and actions can be awaited
    concurrently.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
        loader: Optional[DocumentLoader] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.api_host = self.settings.api_host
        self.api_scheme = self.settings.api_scheme
        self.base_path = self.settings.api_base_path.strip("/")
        self.url_namespace = self.settings.api_url_namespace
        self.swagger_path = self.settings.swagger_path()
        self.base_url = build_base_url(self.api_host, self.api_scheme, self.base_path)
        self.transport: Optional[Transport] = (
            transport if transport is not None else self._default_transport()
        )
        self.loader = loader or DocumentLoader(
            cache_seconds=self.settings.document_cache_seconds,
            document_name=self.settings.api_document_name,
        )

        self.api_version = ""
        self.title = ""

        self._endpoints: Dict[str, Endpoint] = {}
        self._actions: Dict[str, EndpointAction] = {}
        self._names_by_path: Dict[str, Set[str]] = {}
        self._lock = threading.RLock()

    @property
    def endpoints(self) -> List[Endpoint]:
        return list(self._endpoints.values())

    @property
    def endpoint_paths(self) -> List[str]:
        return list(self._endpoints)

    @property
    def actions(self) -> Mapping[str, EndpointAction]:
        return MappingProxyType(self._actions)

    def get_endpoint(self, path: str) -> Optional[Endpoint]:
        return self._endpoints.get(path)

    def set_base_url(
        self,
        url_or_host: str,
        base_path: Optional[str] = None,
        scheme: Optional[str] = None,
    ) -> None:
        """Point the service at another API, given as a full URL or a bare host."""
        with self._lock:
            if "://" in url_or_host:
                url = httpx.URL(url_or_host)
                self.api_scheme = url.scheme
                self.api_host = f"{url.host}:{url.port}" if url.port else url.host
                self.base_path = url.path.strip("/")
            else:
                self.api_host = url_or_host.strip("/")
                if base_path is not None:
                    self.base_path = base_path.strip("/")
                if scheme is not None:
                    self.api_scheme = scheme

            self.base_url = build_base_url(self.api_host, self.api_scheme, self.base_path)
            self.transport = self._default_transport()
            for endpoint in self._endpoints.values():
                endpoint.transport = self.transport
                endpoint.base_path = self.base_path

    def register(
        self,
        path: str,
        operations: Mapping[str, Any],
        hint: EscalationLike = None,
    ) -> Endpoint:
        with self._lock:
            operations = parse_path_item(path, operations)
            escalation = self._resolve_escalation(path, hint)

            existing = self._endpoints.get(path)
            if existing is not None:
                existing.update(operations, escalation)
                self._reindex(existing)
                return existing

            endpoint = Endpoint(
                path,
                operations,
                namespace=self.url_namespace,
                base_path=self.base_path,
                transport=self.transport,
                escalation=escalation,
            )
            return self._admit(endpoint)

    def register_endpoint(self, endpoint: Endpoint, hint: EscalationLike = None) -> Endpoint:
        with self._lock:
            endpoint.escalate(self._resolve_escalation(endpoint.path, hint))
            if endpoint.transport is None:
                endpoint.transport = self.transport

            existing = self._endpoints.get(endpoint.path)
            if existing is None:
                return self._admit(endpoint)

            if existing is not endpoint:
                self._unindex(existing)
                self._endpoints[endpoint.path] = endpoint
            self._reindex(endpoint)
            return endpoint

    def initialize_from_document(
        self, document: Mapping[str, Any]
    ) -> Union["Service", InitializationError]:
        with self._lock:
            try:
                self._load_document(document)
            except OpenApiActionsError as exc:
                logger.error("Failed to initialize from API document: %s", exc)
                return InitializationError(exc)
        return self

    async def initialize(
        self,
        swagger_path: Optional[str] = None,
        url_namespace: Optional[str] = None,
    ) -> Union["Service", InitializationError]:
        with self._lock:
            if swagger_path is not None:
                self.swagger_path = normalize_swagger_path(swagger_path)
            if url_namespace is not None:
                self.url_namespace = url_namespace
            location = self.swagger_path

        try:
            document = await self.loader.load(self.transport, location)
        except OpenApiActionsError as exc:
            logger.warning("Failed to load API document from %s: %s", location, exc)
            return InitializationError(exc)

        return self.initialize_from_document(document)

    def _load_document(self, document: Mapping[str, Any]) -> None:
        if not isinstance(document, Mapping):
            raise InvalidDocumentError("API document must be a JSON object")

        info = document.get("info") or {}
        if not isinstance(info, Mapping):
            raise InvalidDocumentError("API document info must be an object")
        self.api_version = str(info.get("version", ""))
        self.title = str(info.get("title", ""))

        paths = document.get("paths") or {}
        if not isinstance(paths, Mapping):
            raise InvalidDocumentError("API document paths must be an object")

        colliding = find_colliding_indices(list(paths))
        for index, (path, path_item) in enumerate(paths.items()):
            self.register(path, path_item, True if index in colliding else None)

        logger.info(
            "Initialized %s %s: %s endpoints, %s actions",
            self.title or "API",
            self.api_version,
            len(self._endpoints),
            len(self._actions),
        )

    def _resolve_escalation(self, path: str, hint: EscalationLike) -> Escalation:
        escalation = Escalation.coerce(hint)
        if escalation:
            return escalation

        paths = list(self._endpoints)
        if path not in self._endpoints:
            paths.append(path)

        if paths.index(path) not in find_colliding_indices(paths):
            return NO_ESCALATION

        group = collision_group(paths, path)
        required = Escalation(required_escalation(group, escalation_depth(group)))

        for other_path in group:
            if other_path == path:
                continue
            other = self._endpoints[other_path]
            previous = set(other.actions)
            if other.escalate(required):
                self._reindex(other)
                logger.info(
                    "Renamed actions of %s to avoid collisions: %s -> %s",
                    other_path,
                    sorted(previous),
                    sorted(other.actions),
                )
        return required

    def _admit(self, endpoint: Endpoint) -> Endpoint:
        clashes = [name for name in endpoint.actions if name in self._actions]
        if clashes:
            logger.warning(
                "Skipping endpoint %s: action names already registered: %s",
                endpoint.path,
                ", ".join(clashes),
            )
            return endpoint

        self._endpoints[endpoint.path] = endpoint
        self._index(endpoint)
        return endpoint

    def _index(self, endpoint: Endpoint) -> None:
        names = self._names_by_path.setdefault(endpoint.path, set())
        for name, action in endpoint.actions.items():
            holder = self._actions.get(name)
            if holder is not None and holder.endpoint is not endpoint:
                logger.warning(
                    "Action %s of %s is already provided by %s; keeping the earlier one",
                    name,
                    endpoint.path,
                    holder.endpoint.path,
                )
                continue
            self._actions[name] = action
            names.add(name)

    def _unindex(self, endpoint: Endpoint) -> None:
        for name in self._names_by_path.pop(endpoint.path, set()):
            self._actions.pop(name, None)

    def _reindex(self, endpoint: Endpoint) -> None:
        self._unindex(endpoint)
        self._index(endpoint)

    def _default_transport(self) -> HttpxTransport:
        return HttpxTransport(
            self.base_url,
            timeout_seconds=self.settings.api_timeout_seconds,
            verify_ssl=self.settings.api_verify_ssl,
        )
