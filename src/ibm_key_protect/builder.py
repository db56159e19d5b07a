"""Request construction and validation for table-driven operations."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import MissingParametersError
from .models import BODY, BODY_FIELD, HEADER, PATH, QUERY, OperationDescriptor, RequestDescriptor
from .schemas import dump_body

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def build_request(
    operation: OperationDescriptor,
    params: Optional[Mapping[str, Any]] = None,
    sdk_headers: Optional[Mapping[str, str]] = None,
) -> RequestDescriptor:
    """Validate call parameters and resolve them into a request descriptor.

    ``None`` params are treated as an empty mapping and ``None`` values as
    absent. The reserved ``headers`` key carries caller header overrides,
    which win over everything else, including ``Accept`` and ``Content-Type``.
    """
    supplied: Dict[str, Any] = dict(params or {})
    caller_headers = supplied.pop("headers", None) or {}

    unknown = sorted(set(supplied) - set(operation.param_names))
    if unknown:
        raise TypeError(f"{operation.operation_id}() got unexpected parameters: {', '.join(unknown)}")

    missing = [name for name in operation.required_params if supplied.get(name) is None]
    if missing:
        raise MissingParametersError(missing)

    present = {name: value for name, value in supplied.items() if value is not None}
    path, path_params = _resolve_path(operation, present)

    query: Dict[str, Any] = {}
    headers: Dict[str, str] = dict(sdk_headers or {})
    for param in operation.params:
        if param.name not in present:
            continue
        if param.location == QUERY:
            query[param.wire_name] = present[param.name]
        elif param.location == HEADER:
            headers[param.wire_name] = str(present[param.name])

    if operation.accept:
        headers["Accept"] = operation.accept
    if operation.content_type:
        headers["Content-Type"] = operation.content_type
    _overlay_headers(headers, caller_headers)

    request = RequestDescriptor(
        operation_id=operation.operation_id,
        method=operation.method,
        path=path,
        path_template=operation.path,
        path_params=path_params,
        query=query,
        headers=headers,
        body=_build_body(operation, present),
        stream=operation.stream,
    )
    logger.debug("Built %s request %s %s", operation.operation_id, request.method, request.path)
    return request


def _resolve_path(
    operation: OperationDescriptor, present: Mapping[str, Any]
) -> Tuple[str, Dict[str, str]]:
    path_params = {
        param.wire_name: str(present[param.name])
        for param in operation.params
        if param.location == PATH
    }
    path = _PLACEHOLDER.sub(lambda match: path_params[match.group(1)], operation.path)
    return path, path_params


def _build_body(operation: OperationDescriptor, present: Mapping[str, Any]) -> Any:
    body: Any = None
    fields: Dict[str, Any] = {}
    has_fields = False
    for param in operation.params:
        if param.location == BODY and param.name in present:
            body = present[param.name]
        elif param.location == BODY_FIELD:
            has_fields = True
            if param.name in present:
                fields[param.wire_name] = dump_body(present[param.name])
    if has_fields:
        return fields
    return body


def _overlay_headers(headers: Dict[str, str], overrides: Mapping[str, Any]) -> None:
    for key, value in overrides.items():
        for existing in [name for name in headers if name.lower() == key.lower()]:
            del headers[existing]
        headers[key] = str(value)
