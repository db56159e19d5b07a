"""Headers sent with every request for SDK analytics."""

from __future__ import annotations

import platform
from typing import Dict

from .version import __version__

SDK_NAME = "ibm-key-protect-python"


def get_user_agent() -> str:
    return (
        f"{SDK_NAME}/{__version__} "
        f"(lang=python; os.name={platform.system()}; python.version={platform.python_version()})"
    )


def get_sdk_headers(service_name: str, service_version: str, operation_id: str) -> Dict[str, str]:
    return {
        "User-Agent": get_user_agent(),
        "X-IBMCloud-SDK-Analytics": (
            f"service_name={service_name};service_version={service_version};operation_id={operation_id}"
        ),
    }
