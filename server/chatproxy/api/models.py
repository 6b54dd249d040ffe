from fastapi import APIRouter
from typing import Dict, Any

from chatproxy.providers.router import router as provider_router

router = APIRouter()

PROVIDER_NAMES = {
    "openrouter": "OpenRouter",
    "openai": "OpenAI",
    "anthropic": "Anthropic (Claude)",
    "google": "Google (Gemini)",
}


@router.get("/models")
async def get_models() -> Dict[str, Any]:
    """Get available models grouped by provider from the registered providers."""
    providers: Dict[str, Any] = {}
    for pid, models in provider_router.list_models().items():
        providers[pid] = {
            "name": PROVIDER_NAMES.get(pid, pid.capitalize()),
            "models": [m.model_dump(exclude_none=True) for m in models],
        }
    return {"providers": providers}
