"""
Request dependencies.

Identity comes from the upstream auth gateway as headers; this service trusts them
and does no session handling of its own:
- `X-Caller-Id`: user id
- `X-Caller-Role`: citizen | worker | admin
- `X-Caller-Ward`: optional ward number (workers)
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request
from pydantic import ValidationError

from wardpickup.domain.models import Caller
from wardpickup.engine.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_caller(
    x_caller_id: str | None = Header(default=None),
    x_caller_role: str | None = Header(default=None),
    x_caller_ward: str | None = Header(default=None),
) -> Caller:
    if not x_caller_id or not x_caller_role:
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Unauthorized."})
    ward = x_caller_ward.strip() if x_caller_ward else ""
    try:
        return Caller(
            id=x_caller_id,
            role=x_caller_role.strip().lower(),
            ward_number=int(ward) if ward else None,
        )
    except (ValueError, ValidationError) as e:
        raise HTTPException(
            status_code=401,
            detail={"code": "UNAUTHORIZED", "message": f"Invalid caller identity: {e}"},
        ) from e
