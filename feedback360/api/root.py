from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "360 Feedback API",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
