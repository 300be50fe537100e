"""Test configuration and fixtures for configer."""

import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Callable

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import configer


DEFAULT_TOML = """\
name = "example"
debug = false
ratio = 0.75
tags = ["api", "worker"]
started = 2024-01-15T10:30:00Z

[server]
host = "localhost"
port = 8080
timeout = "30s"

[database]
host = "db.local"
pool_size = 10

[database.options]
sslmode = "disable"

[logging]
level = "DEBUG"
"""

PROD_TOML = """\
debug = false

[server]
port = 9090

[database]
host = "db.prod"
"""


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def write_config(temp_dir) -> Callable[[str, str], Path]:
    """Return a helper that writes a file under temp_dir/config/."""
    config_dir = temp_dir / "config"
    config_dir.mkdir(exist_ok=True)

    def write(filename: str, content: str) -> Path:
        path = config_dir / filename
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def config_prefix(temp_dir, write_config) -> str:
    """Config directory holding default.toml and prod.toml."""
    write_config("default.toml", DEFAULT_TOML)
    write_config("prod.toml", PROD_TOML)
    return f"{temp_dir / 'config'}/"


@pytest.fixture
def build(config_prefix):
    """Return a helper building a Configer from the sample files and an env dict."""

    def build_configer(environ=None, *options):
        return configer.new(
            configer.with_env_config_file_prefix(config_prefix),
            configer.with_environ({} if environ is None else environ),
            *options
        )

    return build_configer
