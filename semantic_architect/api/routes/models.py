from __future__ import annotations

import httpx
from fastapi import APIRouter, Header, HTTPException

from semantic_architect import llm_client
from semantic_architect.models.schemas import ModelInfo, ModelsResponse

router = APIRouter(prefix="/api/models", tags=["models"])


@router.get("", response_model=ModelsResponse)
async def list_models(authorization: str | None = Header(default=None)):
    """List OpenRouter models available to the caller's key."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    api_key = authorization.removeprefix("Bearer ").strip()
    try:
        models = await llm_client.list_models(api_key)
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"OpenRouter API error: {exc}") from exc

    return ModelsResponse(
        models=[
            ModelInfo(
                id=m["id"],
                name=m.get("name") or m["id"],
                context_length=m.get("context_length"),
                pricing=m.get("pricing"),
            )
            for m in models
        ]
    )
