"""Unauthenticated liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter()


@router.get("/hello")
async def hello():
    return {"success": True, "message": "hello"}
