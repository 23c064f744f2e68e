"""Constants for the exam schedule parser."""

# File types accepted by the parser facade
FILE_TYPE_EXAM = "exam"
FILE_TYPE_ENROLL = "enroll"
FILE_TYPE_LECTURER = "lecturer"
FILE_TYPES = (FILE_TYPE_EXAM, FILE_TYPE_ENROLL, FILE_TYPE_LECTURER)

# Student ID shape (digit run)
STUDENT_ID_MIN_LENGTH = 6
STUDENT_ID_MAX_LENGTH = 10

# Student-ID anchors are searched in the first N columns only
ANCHOR_COLUMNS = 5

# Course codes: letter run and digit run, either order, loosely punctuated
COURSE_SEPARATOR = r"[\s.\-_/\\]*"
COURSE_LETTERS_FIRST_PATTERN = (
    r"(?<![A-Za-z])([A-Za-z]{2,6})" + COURSE_SEPARATOR + r"(\d{2,4})(?!\d)"
)
COURSE_DIGITS_FIRST_PATTERN = (
    r"(?<![\d:])(\d{2,4})(?![\d:])" + COURSE_SEPARATOR + r"([A-Za-z]{2,6})(?![A-Za-z])"
)

# Section numbers never overlap with student IDs (max 5 digits)
SECTION_NUMBER_PATTERN = r"^\d{1,5}$"

# Header markers. Order matters: the most specific label wins.
COURSE_NUMBER_MARKERS = [
    "رقم المقرر",
    "رمز المقرر",
    "course number",
    "course code",
    "course no",
    "المقرر",
]
CLASS_MARKERS = ["الشعبة", "شعبة", "شعب", "section", "class no", "class"]
STUDENT_ID_HEADER_MARKERS = ["رقم الطالب", "student id", "student no", "student number"]
NAME_MARKERS = ["اسم", "name"]

# Labels that are never student names
LABEL_SUFFIXES = (":", "：")

# Empty class cells
EMPTY_CLASS_VALUES = {"", "-", "--", "—"}
CLASS_PLACEHOLDER = "N/A"

# Hijri calendar
HIJRI_MIN_YEAR = 1200
HIJRI_MAX_YEAR = 1600  # exclusive
HIJRI_LEAP_POSITIONS = frozenset({2, 5, 7, 10, 13, 16, 18, 21, 24, 26, 29})
HIJRI_CYCLE_YEARS = 30
HIJRI_MONTH_LENGTHS = (30, 29, 30, 29, 30, 29, 30, 29, 30, 29, 30, 29)

# Arabic-Indic and Eastern Arabic-Indic digits
ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹", "01234567890123456789")

# Arabic time-of-day markers
ARABIC_AM = "ص"
ARABIC_PM = "م"

# Defaults for extraction settings
DEFAULT_SCAN_ROWS = 200
DEFAULT_HEADER_SEARCH_ROWS = 50
DEFAULT_MAX_CONSECUTIVE_MISSES = 3
DEFAULT_SECTION_MIN_ROWS = 2
DEFAULT_EXAM_DURATION_MINUTES = 120

# Calendar hints for exam dates
CALENDAR_AUTO = "auto"
CALENDAR_HIJRI = "hijri"
CALENDAR_GREGORIAN = "gregorian"
CALENDAR_HINTS = (CALENDAR_AUTO, CALENDAR_HIJRI, CALENDAR_GREGORIAN)
