import os
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Dict

from ..config import settings

DISTRIBUTION = "lpj-desa"


@lru_cache
def get_version() -> str:
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0+local"


def get_version_info() -> Dict[str, str]:
    """Build metadata for ``/health``; the commit comes from ``GIT_SHA`` when the image sets it."""
    return {
        "version": get_version(),
        "gitSha": os.getenv("GIT_SHA", "unknown"),
        "env": settings.environment,
    }
