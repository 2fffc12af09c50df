import logging
import os
import sys


def configure_logging() -> None:
    """
    Configure plain-text logging for the whole app.
    Call this once in FastAPI startup and at the top of each Streamlit page.
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
