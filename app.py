import os

from backend.config import load_environment
from backend.logging_config import setup_logging

load_environment()
setup_logging()

# 🚀 Import backend FastAPI app factory
from backend.app import create_app

application = create_app()

# For dev convenience: run FastAPI with hot-reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:application", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True)
