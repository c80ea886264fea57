# Import every model so Base.metadata knows all tables
from flock.app.models.user import User
from flock.app.models.message import Message
from flock.app.models.follow import Follow
from flock.app.models.id_allocation import IdAllocation

__all__ = ["User", "Message", "Follow", "IdAllocation"]
