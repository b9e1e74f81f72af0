import json
import shutil
import sys

import pytest
from loguru import logger


def pytest_configure(config):
    config.addinivalue_line("markers", "requires_tar: test runs the system tar executable")


def pytest_runtest_setup(item):
    if item.get_closest_marker("requires_tar") and shutil.which("tar") is None:
        pytest.skip("tar executable not available")


@pytest.fixture(autouse=True)
def reset_loguru():
    yield
    # CLI tests point loguru at CliRunner streams that are closed afterwards
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def make_project(tmp_path):
    """Build a package.json plus lib/node-v<ABI>/mbgl.node tree under tmp_path."""
    def _make(abis=("115", "127"), name="@scope/pkg", version="1.2.3"):
        (tmp_path / "package.json").write_text(json.dumps({"name": name, "version": version}))
        lib = tmp_path / "lib"
        lib.mkdir(exist_ok=True)
        for abi in abis:
            abi_dir = lib / f"node-v{abi}"
            abi_dir.mkdir()
            (abi_dir / "mbgl.node").write_bytes(b"\x7fELF binary for " + abi.encode())
        return tmp_path
    return _make
