"""Declarative table of Key Protect API operations.

Each entry describes the HTTP shape of one endpoint; ``builder.build_request``
turns an entry plus call parameters into a request.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .models import BODY, BODY_FIELD, HEADER, PATH, QUERY, OperationDescriptor, ParamSpec

JSON = "application/json"
KMS_KEY = "application/vnd.ibm.kms.key+json"


def _path(name: str, wire_name: Optional[str] = None) -> ParamSpec:
    return ParamSpec(name, PATH, wire_name or name, required=True)


def _query(name: str, wire_name: Optional[str] = None, required: bool = False) -> ParamSpec:
    return ParamSpec(name, QUERY, wire_name or name, required=required)


def _header(name: str, wire_name: str, required: bool = False) -> ParamSpec:
    return ParamSpec(name, HEADER, wire_name, required=required)


def _body(name: str) -> ParamSpec:
    return ParamSpec(name, BODY, name, required=True)


def _field(name: str, wire_name: Optional[str] = None, required: bool = False) -> ParamSpec:
    return ParamSpec(name, BODY_FIELD, wire_name or name, required=required)


BLUEMIX_INSTANCE = _header("bluemix_instance", "Bluemix-Instance", required=True)
CORRELATION_ID = _header("correlation_id", "Correlation-Id")
KEY_RING = _header("x_kms_key_ring", "X-Kms-Key-Ring")
PREFER = _header("prefer", "Prefer")
IF_MATCH = _header("if_match", "If-Match")

KEY_HEADERS = (BLUEMIX_INSTANCE, CORRELATION_ID, KEY_RING)
INSTANCE_HEADERS = (BLUEMIX_INSTANCE, CORRELATION_ID)

KEY_ID = _path("id")
ADAPTER_ID = _path("adapter_id")
RESOURCE_CRN = _path("url_encoded_resource_crn", "urlEncodedResourceCRN")

LIMIT = _query("limit")
OFFSET = _query("offset")
TOTAL_COUNT = _query("total_count", "totalCount")
STATE = _query("state")
EXTRACTABLE = _query("extractable")
FILTER = _query("filter")
FORCE = _query("force")
POLICY = _query("policy")
RESOURCE_CRN_QUERY = _query("url_encoded_resource_crn_query", "urlEncodedResourceCRNQuery")
PREVENT_KEY_DELETION = _query("prevent_key_deletion", "preventKeyDeletion")

METADATA = _field("metadata", required=True)
RESOURCES = _field("resources", required=True)


def _op(
    operation_id: str,
    method: str,
    path: str,
    params: Iterable[ParamSpec] = (),
    accept: Optional[str] = None,
    content_type: Optional[str] = None,
    stream: bool = False,
    description: str = "",
) -> OperationDescriptor:
    return OperationDescriptor(
        operation_id=operation_id,
        method=method,
        path=path,
        params=tuple(params),
        accept=accept,
        content_type=content_type,
        stream=stream,
        description=description,
    )


def _key_action(verb: str, body_name: str, description: str) -> OperationDescriptor:
    return _op(
        f"{verb}_key",
        "POST",
        f"/api/v2/keys/{{id}}/actions/{verb}",
        (KEY_ID, BLUEMIX_INSTANCE, _body(body_name), CORRELATION_ID, KEY_RING),
        accept=JSON,
        content_type=f"application/vnd.ibm.kms.key_action_{verb}+json",
        description=description,
    )


def _key_state_action(operation_id: str, action: str, description: str) -> OperationDescriptor:
    return _op(
        operation_id,
        "POST",
        f"/api/v2/keys/{{id}}/actions/{action}",
        (KEY_ID, *KEY_HEADERS),
        description=description,
    )


_OPERATIONS: List[OperationDescriptor] = [
    # Keys
    _op(
        "get_key_collection_metadata",
        "HEAD",
        "/api/v2/keys",
        (*INSTANCE_HEADERS, STATE, EXTRACTABLE, FILTER, KEY_RING),
        description="Retrieve the number of keys in an instance.",
    ),
    _op(
        "create_key",
        "POST",
        "/api/v2/keys",
        (BLUEMIX_INSTANCE, _body("key_create_body"), CORRELATION_ID, PREFER, KEY_RING),
        accept=JSON,
        content_type=KMS_KEY,
        description="Create or import a key.",
    ),
    _op(
        "get_keys",
        "GET",
        "/api/v2/keys",
        (*INSTANCE_HEADERS, LIMIT, OFFSET, STATE, EXTRACTABLE, _query("search"), _query("sort"), FILTER, KEY_RING),
        accept=JSON,
        description="List keys in an instance.",
    ),
    _op(
        "create_key_with_policies_overrides",
        "POST",
        "/api/v2/keys_with_policy_overrides",
        (BLUEMIX_INSTANCE, _body("key_create_body"), CORRELATION_ID, PREFER, KEY_RING),
        accept=JSON,
        content_type=KMS_KEY,
        description="Create or import a key with policies that override instance policies.",
    ),
    _op(
        "get_key",
        "GET",
        "/api/v2/keys/{id}",
        (KEY_ID, *KEY_HEADERS),
        accept=JSON,
        description="Retrieve a key and its details.",
    ),
    _op(
        "action_on_key",
        "POST",
        "/api/v2/keys/{id}",
        (
            KEY_ID,
            BLUEMIX_INSTANCE,
            _query("action", required=True),
            _body("key_action_body"),
            CORRELATION_ID,
            KEY_RING,
            PREFER,
        ),
        accept=JSON,
        content_type="application/vnd.ibm.kms.key_action+json",
        description="Invoke an action on a key.",
    ),
    _op(
        "patch_key",
        "PATCH",
        "/api/v2/keys/{id}",
        (KEY_ID, BLUEMIX_INSTANCE, _body("key_patch_body"), CORRELATION_ID, KEY_RING),
        accept=JSON,
        content_type=KMS_KEY,
        description="Update (patch) a key.",
    ),
    _op(
        "delete_key",
        "DELETE",
        "/api/v2/keys/{id}",
        (KEY_ID, *KEY_HEADERS, PREFER, FORCE),
        accept=JSON,
        description="Delete a key.",
    ),
    _op(
        "get_key_metadata",
        "GET",
        "/api/v2/keys/{id}/metadata",
        (KEY_ID, *KEY_HEADERS),
        accept=JSON,
        description="Retrieve a key's metadata.",
    ),
    _op(
        "purge_key",
        "DELETE",
        "/api/v2/keys/{id}/purge",
        (KEY_ID, *KEY_HEADERS, PREFER),
        accept=JSON,
        description="Purge a deleted key.",
    ),
    _op(
        "restore_key",
        "POST",
        "/api/v2/keys/{id}/restore",
        (KEY_ID, BLUEMIX_INSTANCE, _body("key_restore_body"), CORRELATION_ID, KEY_RING, PREFER),
        accept=KMS_KEY,
        content_type="application/vnd.ibm.kms.key_action_restore+json",
        stream=True,
        description="Restore a deleted key.",
    ),
    _op(
        "get_key_versions",
        "GET",
        "/api/v2/keys/{id}/versions",
        (KEY_ID, *KEY_HEADERS, LIMIT, OFFSET, TOTAL_COUNT, _query("all_key_states", "allKeyStates")),
        accept=JSON,
        description="List the versions of a root key.",
    ),
    # Key actions
    _key_action("wrap", "key_action_wrap_body", "Wrap a data encryption key."),
    _key_action("unwrap", "key_action_unwrap_body", "Unwrap a data encryption key."),
    _key_action("rewrap", "key_action_rewrap_body", "Rewrap a data encryption key."),
    _op(
        "rotate_key",
        "POST",
        "/api/v2/keys/{id}/actions/rotate",
        (KEY_ID, BLUEMIX_INSTANCE, _body("key_action_rotate_body"), CORRELATION_ID, KEY_RING, PREFER),
        content_type="application/vnd.ibm.kms.key_action_rotate+json",
        description="Rotate a root key.",
    ),
    _key_state_action("set_key_for_deletion", "setKeyForDeletion", "Authorize deletion of a key with dual authorization."),
    _key_state_action("unset_key_for_deletion", "unsetKeyForDeletion", "Cancel a previous deletion authorization."),
    _key_state_action("enable_key", "enable", "Enable a disabled key."),
    _key_state_action("disable_key", "disable", "Disable a key."),
    _key_state_action("sync_associated_resources", "sync", "Sync resources associated with a key."),
    # Aliases
    _op(
        "create_key_alias",
        "POST",
        "/api/v2/keys/{id}/aliases/{alias}",
        (KEY_ID, _path("alias"), *KEY_HEADERS),
        accept=JSON,
        description="Create an alias for a key.",
    ),
    _op(
        "delete_key_alias",
        "DELETE",
        "/api/v2/keys/{id}/aliases/{alias}",
        (KEY_ID, _path("alias"), *KEY_HEADERS),
        description="Delete an alias of a key.",
    ),
    # Instance endpoints and governance
    _op(
        "crypto_v2_get_instance_endpoints",
        "GET",
        "/crypto_v2/instances/{instanceId}",
        (_path("instance_id", "instanceId"),),
        accept=JSON,
        description="Retrieve the endpoints of a service instance.",
    ),
    _op(
        "get_governance_config",
        "GET",
        "/governance/v1/configs",
        (
            _query("config_request_id", required=True),
            _query("account_id", required=True),
            _query("resource_kind", required=True),
            _query("service_instance_crn"),
            _query("resource_group_id"),
            _query("transaction_id", "Transaction-Id"),
            LIMIT,
            OFFSET,
        ),
        accept=JSON,
        description="List governance configuration state for resources.",
    ),
    # Import tokens
    _op(
        "post_import_token",
        "POST",
        "/api/v2/import_token",
        (
            BLUEMIX_INSTANCE,
            _field("expiration"),
            _field("max_allowed_retrievals", "maxAllowedRetrievals"),
            CORRELATION_ID,
            KEY_RING,
        ),
        accept=JSON,
        content_type=JSON,
        description="Create an import token.",
    ),
    _op(
        "get_import_token",
        "GET",
        "/api/v2/import_token",
        KEY_HEADERS,
        accept=JSON,
        description="Retrieve an import token.",
    ),
    # Events
    _op(
        "event_acknowledge",
        "POST",
        "/api/v2/event_ack",
        (BLUEMIX_INSTANCE, _body("event_acknowledge_body"), CORRELATION_ID, KEY_RING),
        content_type="application/vnd.ibm.kms.event_acknowledge+json",
        description="Acknowledge key lifecycle events.",
    ),
    # Key rings
    _op(
        "list_key_rings",
        "GET",
        "/api/v2/key_rings",
        (*INSTANCE_HEADERS, LIMIT, OFFSET, TOTAL_COUNT),
        accept=JSON,
        description="List key rings in an instance.",
    ),
    _op(
        "create_key_ring",
        "POST",
        "/api/v2/key_rings/{key-ring-id}",
        (_path("key_ring_id", "key-ring-id"), *INSTANCE_HEADERS),
        description="Create a key ring.",
    ),
    _op(
        "delete_key_ring",
        "DELETE",
        "/api/v2/key_rings/{key-ring-id}",
        (_path("key_ring_id", "key-ring-id"), *INSTANCE_HEADERS, FORCE),
        description="Delete a key ring.",
    ),
    # Migration intents
    _op(
        "create_migration_intent",
        "POST",
        "/api/v2/keys/{id}/migrationIntent",
        (KEY_ID, BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID, KEY_RING),
        accept=JSON,
        content_type=JSON,
        description="Create a migration intent for a key.",
    ),
    _op(
        "get_migration_intent",
        "GET",
        "/api/v2/keys/{id}/migrationIntent",
        (KEY_ID, *KEY_HEADERS),
        accept=JSON,
        description="Retrieve the migration intent of a key.",
    ),
    _op(
        "delete_migration_intent",
        "DELETE",
        "/api/v2/keys/{id}/migrationIntent",
        (KEY_ID, *KEY_HEADERS),
        description="Delete the migration intent of a key.",
    ),
    # Policies
    _op(
        "put_policy",
        "PUT",
        "/api/v2/keys/{id}/policies",
        (KEY_ID, BLUEMIX_INSTANCE, _body("set_key_policies_one_of"), CORRELATION_ID, KEY_RING, POLICY),
        accept=JSON,
        content_type=JSON,
        description="Set policies on a key.",
    ),
    _op(
        "get_policy",
        "GET",
        "/api/v2/keys/{id}/policies",
        (KEY_ID, *KEY_HEADERS, POLICY),
        accept=JSON,
        description="List the policies of a key.",
    ),
    _op(
        "put_instance_policy",
        "PUT",
        "/api/v2/instance/policies",
        (BLUEMIX_INSTANCE, _body("set_instance_policies_one_of"), CORRELATION_ID, POLICY),
        content_type=JSON,
        description="Set instance policies.",
    ),
    _op(
        "get_instance_policy",
        "GET",
        "/api/v2/instance/policies",
        (*INSTANCE_HEADERS, POLICY),
        accept=JSON,
        description="List instance policies.",
    ),
    _op(
        "get_allowed_ip_port",
        "GET",
        "/api/v2/instance/allowed_ip_port",
        INSTANCE_HEADERS,
        accept=JSON,
        description="Retrieve the allowed IP port for private endpoints.",
    ),
    # Registrations
    _op(
        "create_registration",
        "POST",
        "/api/v2/keys/{id}/registrations/{urlEncodedResourceCRN}",
        (KEY_ID, RESOURCE_CRN, BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID, KEY_RING),
        accept=JSON,
        content_type=JSON,
        description="Create a registration between a key and a cloud resource.",
    ),
    _op(
        "update_registration",
        "PATCH",
        "/api/v2/keys/{id}/registrations/{urlEncodedResourceCRN}",
        (KEY_ID, RESOURCE_CRN, BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID, KEY_RING, IF_MATCH),
        accept=JSON,
        content_type=JSON,
        description="Update attributes of a registration.",
    ),
    _op(
        "replace_registration",
        "PUT",
        "/api/v2/keys/{id}/registrations/{urlEncodedResourceCRN}",
        (KEY_ID, RESOURCE_CRN, BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID, KEY_RING, IF_MATCH),
        accept=JSON,
        content_type=JSON,
        description="Replace a registration.",
    ),
    _op(
        "delete_registration",
        "DELETE",
        "/api/v2/keys/{id}/registrations/{urlEncodedResourceCRN}",
        (KEY_ID, RESOURCE_CRN, *KEY_HEADERS, PREFER),
        accept=JSON,
        description="Delete a registration.",
    ),
    _op(
        "action_on_registration",
        "POST",
        "/api/v2/keys/{id}/registrations",
        (
            KEY_ID,
            BLUEMIX_INSTANCE,
            _query("action", required=True),
            _body("registration_action_one_of"),
            CORRELATION_ID,
            KEY_RING,
            PREFER,
        ),
        accept=JSON,
        content_type=JSON,
        description="Invoke an action on the registrations of a key.",
    ),
    _op(
        "get_registrations",
        "GET",
        "/api/v2/keys/{id}/registrations",
        (KEY_ID, *KEY_HEADERS, LIMIT, OFFSET, RESOURCE_CRN_QUERY, PREVENT_KEY_DELETION, TOTAL_COUNT),
        accept=JSON,
        description="List the registrations of a key.",
    ),
    _op(
        "get_registrations_all_keys",
        "GET",
        "/api/v2/keys/registrations",
        (*KEY_HEADERS, RESOURCE_CRN_QUERY, LIMIT, OFFSET, PREVENT_KEY_DELETION, TOTAL_COUNT),
        accept=JSON,
        description="List registrations across all keys of an instance.",
    ),
    # KMIP adapters
    _op(
        "get_kmip_adapters",
        "GET",
        "/api/v2/kmip_adapters",
        (*INSTANCE_HEADERS, LIMIT, OFFSET, TOTAL_COUNT, _query("crk_id")),
        accept=JSON,
        description="List KMIP adapters.",
    ),
    _op(
        "create_kmip_adapter",
        "POST",
        "/api/v2/kmip_adapters",
        (BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID),
        accept=JSON,
        content_type=JSON,
        description="Create a KMIP adapter.",
    ),
    _op(
        "get_kmip_adapter",
        "GET",
        "/api/v2/kmip_adapters/{id}",
        (KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Retrieve a KMIP adapter.",
    ),
    _op(
        "delete_kmip_adapter",
        "DELETE",
        "/api/v2/kmip_adapters/{id}",
        (KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Delete a KMIP adapter.",
    ),
    _op(
        "get_kmip_objects",
        "GET",
        "/api/v2/kmip_adapters/{adapter_id}/kmip_objects",
        (ADAPTER_ID, *INSTANCE_HEADERS, LIMIT, OFFSET, TOTAL_COUNT, STATE),
        accept=JSON,
        description="List KMIP objects of an adapter.",
    ),
    _op(
        "get_kmip_object",
        "GET",
        "/api/v2/kmip_adapters/{adapter_id}/kmip_objects/{id}",
        (ADAPTER_ID, KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Retrieve a KMIP object.",
    ),
    _op(
        "delete_kmip_object",
        "DELETE",
        "/api/v2/kmip_adapters/{adapter_id}/kmip_objects/{id}",
        (ADAPTER_ID, KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Delete a KMIP object.",
    ),
    _op(
        "get_kmip_client_certificates",
        "GET",
        "/api/v2/kmip_adapters/{adapter_id}/certificates",
        (ADAPTER_ID, *INSTANCE_HEADERS, LIMIT, OFFSET, TOTAL_COUNT),
        accept=JSON,
        description="List client certificates of a KMIP adapter.",
    ),
    _op(
        "add_kmip_client_certificate",
        "POST",
        "/api/v2/kmip_adapters/{adapter_id}/certificates",
        (ADAPTER_ID, BLUEMIX_INSTANCE, METADATA, RESOURCES, CORRELATION_ID),
        accept=JSON,
        content_type=JSON,
        description="Add a client certificate to a KMIP adapter.",
    ),
    _op(
        "get_kmip_client_certificate",
        "GET",
        "/api/v2/kmip_adapters/{adapter_id}/certificates/{id}",
        (ADAPTER_ID, KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Retrieve a client certificate of a KMIP adapter.",
    ),
    _op(
        "delete_kmip_client_certificate",
        "DELETE",
        "/api/v2/kmip_adapters/{adapter_id}/certificates/{id}",
        (ADAPTER_ID, KEY_ID, *INSTANCE_HEADERS),
        accept=JSON,
        description="Delete a client certificate of a KMIP adapter.",
    ),
]

OPERATIONS: Dict[str, OperationDescriptor] = {op.operation_id: op for op in _OPERATIONS}


def get_operation(operation_id: str) -> OperationDescriptor:
    try:
        return OPERATIONS[operation_id]
    except KeyError:
        raise ValueError(f"Unknown operation: {operation_id}") from None
