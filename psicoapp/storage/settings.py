from __future__ import annotations

from dataclasses import asdict, fields
from pathlib import Path

from psicoapp.domain.models import UserSettings
from psicoapp.storage.store import JsonDocumentStore

DEFAULT_SETTINGS_PATH = Path("data/settings.json")
SETTINGS_FIELDS = {item.name for item in fields(UserSettings)}


class SettingsStore:
    """Settings and local credentials of the single practitioner."""

    def __init__(self, store: JsonDocumentStore | None = None) -> None:
        self.store = store or JsonDocumentStore(DEFAULT_SETTINGS_PATH)

    def save(self, settings: UserSettings) -> None:
        self.store.save(asdict(settings))

    def load(self) -> UserSettings | None:
        document = self.store.load()
        if document is None:
            return None
        try:
            return UserSettings(
                **{key: value for key, value in document.items() if key in SETTINGS_FIELDS}
            )
        except TypeError:
            return None

    def reset(self) -> None:
        self.store.clear()

    def authenticate(self, email: str, password: str) -> bool:
        settings = self.load()
        if settings is None or not settings.email or not settings.password:
            return False
        return email.strip() == settings.email and password == settings.password
