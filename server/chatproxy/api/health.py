from fastapi import APIRouter
from typing import Dict

from chatproxy.config import get_settings
from chatproxy.schemas.chat import utcnow_iso

router = APIRouter()


@router.get("/health")
def health() -> Dict[str, str]:
    return {
        "status": "ok",
        "timestamp": utcnow_iso(),
        "service": get_settings().service_name,
    }
