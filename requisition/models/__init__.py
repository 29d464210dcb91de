# Vehicle Requisition Database Models
# Import all models here for SQLAlchemy discovery

from requisition.models.user import User                        # noqa
from requisition.models.vehicle import Vehicle                  # noqa
from requisition.models.vehicle_request import VehicleRequest   # noqa
from requisition.models.approval import Approval                # noqa
