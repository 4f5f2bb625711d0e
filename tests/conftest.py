import pytest

from ascend.config import settings


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path, monkeypatch):
    """Keep the history log and JSON documents out of the working tree."""
    monkeypatch.setattr(settings, "PROJECT_ROOT", tmp_path)
    return tmp_path
