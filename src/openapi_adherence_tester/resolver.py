"""Reference resolution and per-operation schema extraction."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Optional

from .model_types import OperationSpec


class ResolveError(RuntimeError):
    """Raised when resolving OpenAPI references fails."""


_DEFAULT_RESPONSE = "default"


@dataclass(frozen=True)
class ResponseSchemas:
    """Resolved body and header schemas of one documented response."""

    body: Optional[dict[str, Any]]
    headers: dict[str, dict[str, Any]] = field(default_factory=dict)
    required_headers: frozenset[str] = frozenset()


@dataclass(frozen=True)
class OperationSchemas:
    """Resolved request and response schemas for one endpoint operation."""

    parameters: tuple[dict[str, Any], ...]
    request_body: Optional[dict[str, Any]]
    responses: dict[str, ResponseSchemas]

    @property
    def header_parameters(self) -> tuple[dict[str, Any], ...]:
        """Parameters sent as request headers."""
        return tuple(parameter for parameter in self.parameters if parameter.get("in") == "header")

    def response_for(self, status_code: int) -> Optional[ResponseSchemas]:
        """Return the response documented for ``status_code``.

        An exact code wins over a range such as ``2XX``, which wins over
        ``default``.
        """
        exact = self.responses.get(str(status_code))
        if exact is not None:
            return exact
        status_range = f"{status_code // 100}XX"
        for key, response in self.responses.items():
            if key.upper() == status_range:
                return response
        return self.responses.get(_DEFAULT_RESPONSE)


def _is_json_media_type(media_type: str) -> bool:
    essence = media_type.split(";", maxsplit=1)[0].strip().lower()
    return essence == "application/json" or essence.endswith("+json")


class Resolver:
    """Resolve local references and build operation schemas."""

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = deepcopy(document)
        self._cache: dict[str, Any] = {}

    def resolve_node(self, node: Any) -> Any:
        """Recursively inline references in a node."""
        return self._resolve(node, stack=())

    def _resolve(self, node: Any, stack: tuple[str, ...]) -> Any:
        if isinstance(node, list):
            return [self._resolve(item, stack) for item in node]
        if not isinstance(node, dict):
            return node

        ref_value = node.get("$ref")
        if isinstance(ref_value, str):
            resolved_ref = self._resolve_ref(ref_value, stack)
            siblings = {key: value for key, value in node.items() if key != "$ref"}
            if siblings and isinstance(resolved_ref, dict):
                merged = deepcopy(resolved_ref)
                for key, value in siblings.items():
                    merged[key] = self._resolve(value, stack)
                return merged
            return deepcopy(resolved_ref)

        return {key: self._resolve(value, stack) for key, value in node.items()}

    def _resolve_ref(self, ref: str, stack: tuple[str, ...]) -> Any:
        if ref in stack:
            # Recursive structures keep their reference instead of expanding forever.
            return {"$ref": ref}

        if ref in self._cache:
            return deepcopy(self._cache[ref])

        if not ref.startswith("#/"):
            raise ResolveError(f"Only local references are currently supported: {ref}")

        current: Any = self._document
        for token in ref[2:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if not isinstance(current, dict) or token not in current:
                raise ResolveError(f"Unresolvable reference: {ref}")
            current = current[token]

        resolved = self._resolve(deepcopy(current), (*stack, ref))
        self._cache[ref] = deepcopy(resolved)
        return resolved

    def build_operation_schemas(self, operation_spec: OperationSpec) -> OperationSchemas:
        """Build request and response schemas for a single operation."""
        # Operation-level parameters replace path-level ones with the same name and location.
        merged: dict[tuple[Any, Any], dict[str, Any]] = {}
        for parameter in (
            *self._collect_parameters(operation_spec.path_item),
            *self._collect_parameters(operation_spec.operation),
        ):
            merged[(parameter.get("in"), parameter.get("name"))] = parameter

        request_body = operation_spec.operation.get("requestBody")
        body_schema = self._request_body_to_schema(request_body)

        responses_raw = operation_spec.operation.get("responses")
        responses: dict[str, ResponseSchemas] = {}
        if isinstance(responses_raw, dict):
            for status_code, response_node in responses_raw.items():
                response = self._response_to_schemas(response_node)
                if response is not None:
                    responses[str(status_code)] = response

        return OperationSchemas(
            parameters=tuple(merged.values()),
            request_body=body_schema,
            responses=responses,
        )

    def _collect_parameters(self, node: dict[str, Any]) -> list[dict[str, Any]]:
        raw = node.get("parameters")
        if not isinstance(raw, list):
            return []
        parameters: list[dict[str, Any]] = []
        for parameter in raw:
            if not isinstance(parameter, dict):
                continue
            resolved = self.resolve_node(parameter)
            if isinstance(resolved, dict):
                parameters.append(resolved)
        return parameters

    def _json_schema_from_content(self, content: Any) -> Optional[dict[str, Any]]:
        if not isinstance(content, dict):
            return None
        for media_type, media in content.items():
            if not isinstance(media_type, str) or not _is_json_media_type(media_type):
                continue
            if not isinstance(media, dict):
                continue
            schema_node = media.get("schema")
            if isinstance(schema_node, dict):
                resolved_schema = self.resolve_node(schema_node)
                if isinstance(resolved_schema, dict):
                    return resolved_schema
        return None

    def _request_body_to_schema(self, request_body: Any) -> Optional[dict[str, Any]]:
        if not isinstance(request_body, dict):
            return None
        resolved_body = self.resolve_node(request_body)
        if not isinstance(resolved_body, dict):
            return None
        return self._json_schema_from_content(resolved_body.get("content"))

    def _response_to_schemas(self, response_node: Any) -> Optional[ResponseSchemas]:
        if not isinstance(response_node, dict):
            return None
        resolved_response = self.resolve_node(response_node)
        if not isinstance(resolved_response, dict):
            return None

        headers: dict[str, dict[str, Any]] = {}
        required: set[str] = set()
        raw_headers = resolved_response.get("headers")
        if isinstance(raw_headers, dict):
            for name, header in raw_headers.items():
                if not isinstance(header, dict):
                    continue
                schema = header.get("schema")
                if not isinstance(schema, dict):
                    continue
                headers[name] = schema
                if header.get("required") is True:
                    required.add(name)

        return ResponseSchemas(
            body=self._json_schema_from_content(resolved_response.get("content")),
            headers=headers,
            required_headers=frozenset(required),
        )
