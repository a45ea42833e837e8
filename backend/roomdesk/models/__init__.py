from roomdesk.models.activity_log import ActivityLog  # noqa: F401
from roomdesk.models.event import Event  # noqa: F401
from roomdesk.models.faculty import Faculty  # noqa: F401
from roomdesk.models.notification import Notification, NotificationType  # noqa: F401
from roomdesk.models.profile import Profile, ProfileRole  # noqa: F401
from roomdesk.models.recording_check import RecordingCheck  # noqa: F401
from roomdesk.models.room import Room  # noqa: F401
from roomdesk.models.room_filter import RoomFilter  # noqa: F401
from roomdesk.models.schedule_revision import ScheduleRevision  # noqa: F401
from roomdesk.models.shift import Shift  # noqa: F401
from roomdesk.models.shift_block import ShiftBlock  # noqa: F401
