import logging

logger = logging.getLogger(__name__)

try:
    import os
    from dotenv import load_dotenv, find_dotenv

    env_file = os.environ.get("ENV_FILE", ".env")
    path = find_dotenv(filename=env_file, raise_error_if_not_found=True)
    logger.info(f"Loading environment variables from {path}")
    load_dotenv(dotenv_path=path)

except IOError:
    # No file to set environment variables
    pass

from argonaut.handlers import argocd, probes  # noqa: E402

__all__ = [
    "argocd",
    "probes",
]

__version__ = "0.1.0"
