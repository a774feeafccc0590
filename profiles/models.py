"""Pydantic models for save-profile data handed over by the host."""

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """A player profile as loaded by the external save layer."""

    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., min_length=1, description="Account or profile identifier")
    current_balance: int = Field(..., ge=0, description="Coins available to wager")
    lifetime_collected: int = Field(default=0, ge=0, description="Coins ever collected")
    location: str = Field(..., min_length=1, description="Where the save layer keeps this profile")

    def with_balance(self, balance: int, lifetime_collected: int) -> "Profile":
        """Return a copy reflecting a successful save."""
        return self.model_copy(
            update={"current_balance": balance, "lifetime_collected": lifetime_collected}
        )
