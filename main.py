"""Main entry point for the FastAPI application."""

import uvicorn

from restapi.router import create_app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", reload=True)
