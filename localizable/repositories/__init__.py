from localizable.repositories.base_repository import BaseRepository
from localizable.repositories.localization_repository import LocalizationRepository

__all__ = ["BaseRepository", "LocalizationRepository"]
