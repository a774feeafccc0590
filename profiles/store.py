"""Profile persistence seam, implemented by the host's save layer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class ProfileSaveError(Exception):
    """The save layer could not write a balance."""


@dataclass(frozen=True)
class SavedBalance:
    """One recorded ``save_balance`` call."""

    location: str
    balance: int
    lifetime_collected: int


class ProfileStore(ABC):
    """Abstract profile store."""

    @abstractmethod
    def save_balance(
        self,
        location: str,
        new_balance: int,
        new_lifetime_collected: int,
    ) -> None:
        """Persist a balance; raise ProfileSaveError on failure."""
        ...


class InMemoryProfileStore(ProfileStore):
    """In-memory profile store for tests and headless hosts."""

    def __init__(self) -> None:
        self._saves: list[SavedBalance] = []
        self._balances: dict[str, SavedBalance] = {}

    def save_balance(
        self,
        location: str,
        new_balance: int,
        new_lifetime_collected: int,
    ) -> None:
        if new_balance < 0 or new_lifetime_collected < 0:
            raise ProfileSaveError(f"Refusing negative balance for {location}")
        record = SavedBalance(location, new_balance, new_lifetime_collected)
        self._saves.append(record)
        self._balances[location] = record

    def get(self, location: str) -> SavedBalance | None:
        """Latest saved balance for a location."""
        return self._balances.get(location)

    @property
    def saves(self) -> list[SavedBalance]:
        """Every save, oldest first."""
        return self._saves.copy()
