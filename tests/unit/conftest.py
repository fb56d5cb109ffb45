"""Pytest configuration and fixtures for tins tests."""

import sys
import threading
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tins.core.config import TinsConfig
from tins.keys import KeyManager
from tins.lifecycle import LifecycleManager

tests_root = Path(__file__).parent.parent.parent
if str(tests_root) not in sys.path:
    sys.path.insert(0, str(tests_root))

from tests.unit.fakes import FakeComputeProvider  # noqa: E402

TINS_ENV_VARS = (
    "TINS_CONFIG",
    "TINS_DEBUG",
    "TINS_SSH_DIR",
    "OS_AUTH_URL",
    "OS_USERNAME",
    "OS_PASSWORD",
    "OS_DOMAIN_NAME",
    "OS_PROJECT_ID",
    "OS_PROJECT_NAME",
    "OS_REGION_NAME",
    "OS_AVAILABILITY_ZONE",
    "OS_IMAGE_NAME",
    "OS_FLAVOR_NAME",
    "OS_NETWORK_NAME",
    "OS_NETWORK_ATTACHMENT_MODE",
)


@pytest.fixture(autouse=True)
def clean_tins_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove tins and OpenStack variables from the environment.

    Yields
    ------
    None
        Control back to test with a clean environment
    """
    for name in TINS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    yield


@pytest.fixture
def ssh_dir(tmp_path: Path) -> Path:
    """Key directory that does not exist yet."""
    return tmp_path / "ssh"


@pytest.fixture
def tins_config(ssh_dir: Path) -> TinsConfig:
    """Complete configuration pointing at the temporary key directory."""
    return TinsConfig(
        auth_url="https://keystone.example.com:5000/v3",
        username="alice",
        password="secret",
        domain_name="default",
        project_id="project-123",
        project_name="sandbox",
        region_name="RegionOne",
        availability_zone="nova",
        image_name="ubuntu-22.04",
        flavor_name="m1.small",
        network_name="private",
        network_attachment_mode="existing_network",
        ssh_dir=ssh_dir,
    )


@pytest.fixture
def fake_provider() -> FakeComputeProvider:
    """In-memory compute provider."""
    return FakeComputeProvider()


@pytest.fixture
def key_manager(ssh_dir: Path) -> KeyManager:
    """Key manager writing to the temporary key directory."""
    return KeyManager(ssh_dir)


@pytest.fixture
def mock_selector() -> MagicMock:
    """Selector that picks the first row."""
    return MagicMock(return_value=0)


@pytest.fixture
def mock_ssh_runner() -> MagicMock:
    """ssh runner that reports success without starting a process."""
    return MagicMock(return_value=0)


@pytest.fixture
def lifecycle(
    tins_config: TinsConfig,
    fake_provider: FakeComputeProvider,
    key_manager: KeyManager,
    mock_selector: MagicMock,
    mock_ssh_runner: MagicMock,
) -> LifecycleManager:
    """Lifecycle manager wired to fakes with a zero poll interval."""
    return LifecycleManager(
        config=tins_config,
        compute_provider=fake_provider,
        key_manager=key_manager,
        selector=mock_selector,
        ssh_runner=mock_ssh_runner,
        name_generator=lambda: "brave-turing",
        poll_interval=0,
        timeout=5,
        cancel_event=threading.Event(),
    )


@pytest.fixture
def os_env() -> dict[str, str]:
    """Complete OpenStack environment for ConfigLoader(environ=...)."""
    return {
        "OS_AUTH_URL": "https://keystone.example.com:5000/v3",
        "OS_USERNAME": "alice",
        "OS_PASSWORD": "secret",
        "OS_PROJECT_ID": "project-123",
        "OS_PROJECT_NAME": "sandbox",
        "OS_REGION_NAME": "RegionOne",
        "OS_AVAILABILITY_ZONE": "nova",
        "OS_IMAGE_NAME": "ubuntu-22.04",
        "OS_NETWORK_NAME": "private",
    }


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """Empty home directory for config lookups."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Empty working directory for config lookups."""
    cwd = tmp_path / "work"
    cwd.mkdir()
    return cwd
