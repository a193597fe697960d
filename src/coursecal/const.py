DOMAIN = "coursecal"
CONFIG_DIR_ENV = "COURSECAL_CONFIG_DIR"
PROJECT_ID_ENV = "COURSECAL_PROJECT_ID"
ID_TOKEN_ENV = "COURSECAL_ID_TOKEN"

FIRESTORE_API = "https://firestore.googleapis.com/v1"
FIRESTORE_DEFAULT_DATABASE = "(default)"
# Firestore rejects commits with more than 500 writes
FIRESTORE_MAX_BATCH = 500

USER_AGENT = "coursecal/0.1.0"

# Collection names in the document store
KIND_YEARS = "years"
KIND_LECTURERS = "lecturers"
KIND_SITES = "sites"
KIND_COURSES = "courses"
KIND_HOLIDAYS = "holidays"
KIND_VACATIONS = "vacations"
KIND_EVENTS = "events"
KIND_TASKS = "tasks"
KIND_STUDENT_EVENTS = "studentEvents"
KIND_MEETINGS = "coursesMeetings"

MEETING_ID_PREFIX = "CM"

# Weekday names as stored in course hours, indexed by date.isoweekday() % 7
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

DEFAULT_DURATION_MINUTES = 60
DEFAULT_TASK_DUE_TIME = "23:59"

EVENT_ICONS = {
    "courseMeeting": "📚",
    "holiday": "🎉",
    "vacation": "🏖️",
    "event": "🗓️",
    "task": "📌",
    "studentEvent": "👤",
    "yearMarker": "🏁",
    "semesterMarker": "🚩",
}
