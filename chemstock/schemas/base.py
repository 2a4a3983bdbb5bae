"""
Base Schemas

Standard response envelope used by the API endpoints:
- message: User-facing message
- data: Payload
- proofs: Tracing information
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class Proofs(BaseModel):
    """
    Tracing information included in API responses.

    - trace_id: Request trace ID
    - user_id: Caller's user ID (when authenticated)
    - role: Caller's effective role
    - sources: Backends consulted (store tables, identity provider)
    - component: Component that produced the response
    """
    trace_id: Optional[str] = Field(None, description="Request trace ID")
    user_id: Optional[str] = Field(None, description="Caller user ID")
    role: Optional[str] = Field(None, description="Caller effective role")
    sources: Optional[List[str]] = Field(None, description="Backends consulted")
    component: Optional[str] = Field(None, description="Producing component")

    model_config = ConfigDict(extra="allow")


class ApiResponse(BaseModel):
    message: str = Field(..., description="User-facing response message")
    data: Optional[Dict[str, Any]] = Field(None, description="Response data payload")
    proofs: Optional[Proofs] = Field(None, description="Tracing information")

    model_config = ConfigDict(extra="allow")
