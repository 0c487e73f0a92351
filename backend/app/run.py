"""CLI entry point for launching the API with uvicorn."""

import os

import uvicorn


def main() -> None:
    """Run the development server."""
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "local") == "local",
    )


if __name__ == "__main__":
    main()
