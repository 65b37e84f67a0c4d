from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures_projects"


@pytest.fixture
def fixtures_dir():
    return FIXTURES


@pytest.fixture
def make_project(tmp_path):
    """Write a package with a single main.bal (and optional Cloud.toml) under tmp_path."""
    def _make(source, cloud_toml=None, name="hello", files=None):
        project = tmp_path / name
        project.mkdir()
        (project / "Ballerina.toml").write_text(
            f'[package]\norg = "example"\nname = "{name}"\nversion = "0.1.0"\n'
        )
        (project / "main.bal").write_text(source)
        if cloud_toml is not None:
            (project / "Cloud.toml").write_text(cloud_toml)
        for rel, content in (files or {}).items():
            path = project / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return project
    return _make
