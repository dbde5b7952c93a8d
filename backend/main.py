"""Entry point for running the FastAPI application."""

import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

if __name__ == "__main__":
    # PORT=3000 python main.py to serve on the frontend's usual port
    port = int(os.getenv("PORT", "8000"))

    uvicorn.run(
        "mindit.api.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENVIRONMENT", "").lower() in ("development", "dev"),
    )
