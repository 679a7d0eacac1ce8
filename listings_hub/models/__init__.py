from listings_hub.models.base import Base  # noqa: F401

from listings_hub.models.user import User  # noqa: F401
from listings_hub.models.user_session import UserSession  # noqa: F401
from listings_hub.models.geo import Municipality, State  # noqa: F401
from listings_hub.models.listing import Listing  # noqa: F401
from listings_hub.models.listing_review import ListingReview  # noqa: F401
from listings_hub.models.notification import Notification  # noqa: F401
from listings_hub.models.audit_log import AuditLog  # noqa: F401
