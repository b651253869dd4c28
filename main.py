"""
Backend Entry Point
Run with: python main.py
Or: uvicorn app.main:create_app --factory --reload
"""
import uvicorn

from app.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("app.main:create_app", factory=True, host=settings.HOST, port=settings.PORT, reload=settings.is_development)
