#!/usr/bin/env python3
"""
Iconect MCP Server - Response Envelope

Every dispatched command yields exactly one of these two shapes:

    {"success": True, "message": ..., "data": ...}
    {"success": False, "error": {"code": ..., "message": ..., "statusCode": ...}}
"""

from typing import Any, Dict, Optional

from .errors import IconectError


def success_envelope(message: Optional[str] = None, data: Any = None) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"success": True}
    if message is not None:
        envelope["message"] = message
    if data is not None:
        envelope["data"] = data
    return envelope


def error_envelope(error: IconectError) -> Dict[str, Any]:
    return {"success": False, "error": error.to_dict()}


def is_success_envelope(value: Any) -> bool:
    return isinstance(value, dict) and value.get("success") is True and "error" not in value
