import uvicorn

from .config import settings

if __name__ == "__main__":
    uvicorn.run(
        "credential_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
    )
