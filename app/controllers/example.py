"""
Example Controller - a smoke-test route for API clients.
"""

from datetime import datetime

from fastapi import APIRouter

from app.models import HiResponse

router = APIRouter(prefix="/example", tags=["example"])


@router.get("/hi", response_model=HiResponse)
def hi(name: str):
    return HiResponse(hello=name, date=datetime.now())
