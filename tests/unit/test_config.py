"""Unit tests for the YAML settings loader."""

from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from car_lot.config import load_settings


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """Return a sample configuration dictionary."""
    return {
        "photos_dir": "/srv/car-lot/photos",
        "public_photo_url": "https://cdn.example.com/photos",
        "max_photo_bytes": 2048,
        "allowed_photo_extensions": ["jpg", "png"],
        "admin_user_ids": ["admin1", "admin2"],
        "staging_max_age_hours": 6,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config_dict: dict[str, Any]) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "settings.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config_dict, f)
    return config_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CAR_LOT_CONFIG", raising=False)
    monkeypatch.delenv("CAR_LOT_PHOTOS_DIR", raising=False)
    monkeypatch.delenv("CAR_LOT_DB_PATH", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_load_from_path(self, temp_config_file: Path) -> None:
        settings = load_settings(temp_config_file)

        assert settings.photos_dir == Path("/srv/car-lot/photos")
        assert settings.public_photo_url == "https://cdn.example.com/photos"
        assert settings.max_photo_bytes == 2048
        assert settings.allowed_photo_extensions == ["jpg", "png"]
        assert settings.admin_user_ids == ["admin1", "admin2"]
        assert settings.staging_max_age_hours == 6

    def test_load_from_env_path(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CAR_LOT_CONFIG", str(temp_config_file))

        assert load_settings().admin_user_ids == ["admin1", "admin2"]

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_missing_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CAR_LOT_CONFIG", str(tmp_path / "missing.yaml"))

        with pytest.raises(FileNotFoundError):
            load_settings()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        settings = load_settings(config_path)

        assert settings.public_photo_url == "/photos"
        assert settings.admin_user_ids == []

    def test_photos_dir_env_override(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("CAR_LOT_PHOTOS_DIR", str(tmp_path / "elsewhere"))

        settings = load_settings(temp_config_file)

        assert settings.photos_dir == tmp_path / "elsewhere"

    def test_database_settings_from_file(self, tmp_path: Path) -> None:
        config_path = tmp_path / "db.yaml"
        config_path.write_text(
            "db_path: /var/lib/car-lot/lot.db\ndatabase_url: postgresql://localhost/lot\n"
        )

        settings = load_settings(config_path)

        assert settings.db_path == Path("/var/lib/car-lot/lot.db")
        assert settings.database_url == "postgresql://localhost/lot"

    def test_database_env_overrides(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("CAR_LOT_DB_PATH", str(tmp_path / "env.db"))
        monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

        settings = load_settings(temp_config_file)

        assert settings.db_path == tmp_path / "env.db"
        assert settings.database_url == "sqlite:///:memory:"

    def test_numeric_admin_ids(self, tmp_path: Path) -> None:
        """Unquoted numeric IDs in YAML still match the string X-User-Id header."""
        config_path = tmp_path / "numeric.yaml"
        config_path.write_text("admin_user_ids:\n  - 1001\n  - admin\n")

        settings = load_settings(config_path)

        assert settings.admin_user_ids == ["1001", "admin"]

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("max_photo_bytes: 0\n")

        with pytest.raises(ValidationError):
            load_settings(config_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("admin_user_ids: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_settings(config_path)

    def test_bundled_config_loads(self) -> None:
        """The shipped config/settings.yaml is valid."""
        settings = load_settings()

        assert settings.admin_user_ids == ["admin"]
