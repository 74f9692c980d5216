import os


class Config:
    """
    Probe server settings, read from environment variables.
    """

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "5000"))

    # Browser front ends are served from a different origin in development.
    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "http://localhost:5173")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE", "")
