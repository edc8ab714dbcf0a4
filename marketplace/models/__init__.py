from marketplace.models.base import Base  # noqa: F401

from marketplace.models.listing import Listing  # noqa: F401
from marketplace.models.user import User  # noqa: F401
