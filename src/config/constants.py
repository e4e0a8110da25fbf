"""Column headers, month ordering, feed locations and thresholds."""

# =============================================================================
# Months
# =============================================================================

# Canonical month codes as they appear in the trip and fuel feeds.
# "july" is spelled out in the source sheets.
MONTHS_ORDER = ("jan", "feb", "mar", "apr", "may", "jun", "july", "aug", "sep", "oct", "nov", "dec")

# =============================================================================
# Source Columns (sheet headers)
# =============================================================================

VEHICLE_ID_COLUMN = "رقم المركبة"

TRIP_COLUMNS = {
    "vehicle_id": VEHICLE_ID_COLUMN,
    "net_load_kg": "صافي التحميل",
    "month": "الشهر",
    "weighed_at": "تاريخ التوزين الثاني",
    "driver": "السائق",
}

VEHICLE_COLUMNS = {
    "vehicle_id": VEHICLE_ID_COLUMN,
    "manufacture_year": "سنة التصنيع",
    "capacity_m3": "سعة المركبة بالمتر المكعب",
    "load_density": "كثافة التحميل",
}

MAINTENANCE_COLUMNS = {
    "vehicle_id": VEHICLE_ID_COLUMN,
    "cost": "كلفة الصيانة",
}

AREA_COLUMNS = {
    "vehicle_id": VEHICLE_ID_COLUMN,
    "zone": "المنطقة",
}

# =============================================================================
# Feeds
# =============================================================================

_SHEET = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vSFzqaKeM6Il-c1ubOzGHSzDWgfbW3URTWvTcF76Xx3HP-W5o_SDRozUeO_v5z-xits7UFpNxjdfC3w"
    "/pub?gid={gid}&single=true&output=csv"
)

FEED_URLS = {
    "trips": _SHEET.format(gid=0),
    "vehicles": _SHEET.format(gid=2001178330),
    "fuel": _SHEET.format(gid=1380959426),
    "maintenance": _SHEET.format(gid=2095309457),
    "areas": _SHEET.format(gid=158998441),
}

# Local file names used with --data-dir
FEED_FILES = {name: f"{name}.csv" for name in FEED_URLS}

FEED_TIMEOUT_SEC = 30

# =============================================================================
# Aggregation
# =============================================================================

KG_PER_TON = 1000.0
UNSPECIFIED_ZONE = "unspecified"
DRIVER_SEPARATOR = ", "

# Vehicles averaging below this share of rated tonnage are flagged
UNDERUTILIZATION_THRESHOLD_PCT = 50.0

# =============================================================================
# Presentation / Reporting
# =============================================================================

FILTERING_DEBOUNCE_SECONDS = 0.3
MISSING_VALUE = "—"

REPORT_MODEL = "gemini-2.5-flash"
REPORT_API_KEY_ENV = ("GEMINI_API_KEY", "API_KEY")
