# ParkEase — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.user import User                      # noqa
from app.models.admin import Admin                    # noqa
from app.models.parking_slot import ParkingSlot       # noqa
from app.models.slot_request import SlotRequest       # noqa
from app.models.ticket import Ticket                  # noqa
from app.models.notification import Notification      # noqa
from app.models.otp import Otp                        # noqa
