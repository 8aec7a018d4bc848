"""Global pytest configuration."""

import os

# Keep tests independent of a developer's .env / shell
for _var in ("API_BASE", "API_TOKEN", "AUTH_PASSWORD", "STORAGE_PATH"):
    os.environ.pop(_var, None)
