"""Pytest configuration and shared fixtures."""

# Load environment variables from .env file at test startup
# so VNS_* settings are in place before fixtures are created
from dotenv import load_dotenv
load_dotenv()

pytest_plugins = [
    "tests.fixtures.core.times",
    "tests.fixtures.core.filesystems",
    "tests.fixtures.core.shells",
    "tests.fixtures.api",
]
