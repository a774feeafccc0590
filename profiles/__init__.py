"""Save-profile seam between the host application and the table."""

from profiles.models import Profile
from profiles.store import InMemoryProfileStore, ProfileSaveError, ProfileStore, SavedBalance
from profiles.session import TableSession

__all__ = [
    "Profile",
    "InMemoryProfileStore",
    "ProfileSaveError",
    "ProfileStore",
    "SavedBalance",
    "TableSession",
]
