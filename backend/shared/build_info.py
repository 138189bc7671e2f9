"""Build metadata exposed at runtime.

APP_VERSION can be pinned via environment variable in CI. Otherwise it is
the installed distribution's version, or "dev" when running from a checkout
that was never installed.
"""

import os
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "ballsort"


def _installed_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "dev"


APP_VERSION: str = os.environ.get("APP_VERSION") or _installed_version()
