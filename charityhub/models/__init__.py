from .user import User  # noqa: F401
from .charity import Charity  # noqa: F401
from .campaign import Campaign  # noqa: F401
from .donation import Donation  # noqa: F401
from .activity_log import ActivityLog, ImmutableRecordError  # noqa: F401
from .report import Report  # noqa: F401
