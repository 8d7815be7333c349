import sys
from pathlib import Path

import pytest

# Add packages to path
_packages = Path(__file__).parent.parent / "packages"
for _pkg in ("common", "gazette"):
    if str(_packages / _pkg) not in sys.path:
        sys.path.insert(0, str(_packages / _pkg))


@pytest.fixture
def tmp_dir(tmp_path):
    """Provide a temporary directory for test databases and digests."""
    return tmp_path


@pytest.fixture
def db_path(tmp_dir):
    return str(tmp_dir / "test.db")


@pytest.fixture
def config(tmp_dir):
    from gazette.config import Config
    return Config(
        openai_api_key="test-key",
        output_dir=str(tmp_dir / "summaries"),
        telegram_bot_token="123456:test-token",
        telegram_chat_id="100",
        delivery_delay_s=0.0,
        watchtower_enabled=False,
    )
