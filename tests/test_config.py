from pathlib import Path

import pytest
from pydantic import ValidationError

from lpjdesa.config import Settings


def test_defaults_without_environment(monkeypatch):
    for name in ("LPJ_DATABASE_URL", "LPJ_UPLOADS_DIR", "LPJ_BACKUP_DIR", "LPJ_EXPORT_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.database_url == "sqlite:///lpjdesa/lpj_dev.db"
    assert settings.words_locale == "id"
    assert settings.currency_name == "Rupiah"
    assert settings.file_storage_backend == "local"
    assert settings.backup_before_restore is True
    assert settings.uploads_root_path == Path("uploads")


def test_environment_uses_lpj_prefix(monkeypatch):
    monkeypatch.setenv("LPJ_WORDS_LOCALE", "en")
    monkeypatch.setenv("LPJ_CURRENCY_NAME", "Dollar")
    monkeypatch.setenv("LPJ_BACKUP_BEFORE_RESTORE", "false")
    monkeypatch.setenv("WORDS_LOCALE", "id")

    settings = Settings(_env_file=None)

    assert settings.words_locale == "en"
    assert settings.currency_name == "Dollar"
    assert settings.backup_before_restore is False


def test_unknown_locale_rejected(monkeypatch):
    monkeypatch.setenv("LPJ_WORDS_LOCALE", "fr")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
