#!/usr/bin/env python3
import uvicorn
from app.app import create_app
from app.core.config import HOST, PORT

# Create the FastAPI app
app = create_app()


if __name__ == "__main__":
    print(f"Starting retail sales explorer on {HOST}:{PORT}")

    uvicorn.run("main:app", host=HOST, port=PORT)
