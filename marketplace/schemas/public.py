from pydantic import BaseModel, ConfigDict, Field

from marketplace.schemas.user import UserOut


# Missing fields fall back to zero values and are forwarded as-is, the owning
# service decides whether they are valid.
class CreateListingRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    user_id: int = 0
    listing_type: str = ""
    price: int = 0


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    name: str = ""


class EnrichedListing(BaseModel):
    id: int
    listing_type: str
    price: int
    created_at: int
    updated_at: int
    user: UserOut


class PublicListingsOut(BaseModel):
    result: bool = True
    listings: list[EnrichedListing] = Field(default_factory=list)
