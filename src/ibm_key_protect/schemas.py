"""Request body models for JSON-bodied operations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class CollectionMetadata(_Body):
    collection_type: str = Field(..., alias="collectionType")
    collection_total: int = Field(..., alias="collectionTotal")


class CreateMigrationIntentObject(_Body):
    target_crk: str = Field(..., alias="targetCRK")


class CreateRegistrationResourceBody(_Body):
    prevent_key_deletion: Optional[bool] = Field(default=None, alias="preventKeyDeletion")
    description: Optional[str] = None
    registration_metadata: Optional[str] = Field(default=None, alias="registrationMetadata")


class CloudResourceName(_Body):
    resource_crn: str = Field(..., alias="resourceCrn")


class RegistrationAction(_Body):
    metadata: CollectionMetadata
    resources: List[CloudResourceName]


class SetKeyPolicies(_Body):
    metadata: CollectionMetadata
    resources: List[Dict[str, Any]]


class SetInstancePolicies(_Body):
    metadata: CollectionMetadata
    resources: List[Dict[str, Any]]


class KmipAdapterCreate(_Body):
    name: Optional[str] = None
    description: Optional[str] = None
    profile: str = "native_1.0"
    profile_data: Dict[str, str] = Field(default_factory=dict)


class KmipClientCertificateCreate(_Body):
    name: Optional[str] = None
    certificate: str


def dump_body(value: Any) -> Any:
    """Convert models (and containers of models) into JSON-ready data."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {key: dump_body(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [dump_body(item) for item in value]
    return value
