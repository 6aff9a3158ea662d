# Lab attendance tracker: database models
# Import all models here for SQLAlchemy discovery

from labtrack.models.user import User                 # noqa
from labtrack.models.log_entry import LogEntry        # noqa
from labtrack.models.credential import Credential     # noqa
