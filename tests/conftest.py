import pytest

from pixel_grid.core.history import GridHistory
from pixel_grid.utils.config import Settings


@pytest.fixture
def engine():
    return GridHistory(Settings(rows=2, cols=2, default_color="#ffffff"))


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"
