"""
Shared constants for the restaurant screens
"""

# ===== BRAND COLORS =====
ACCENT = "#E9190A"
BUTTON_COLOR = "#FEB23F"
LIGHT_GRAY = "#D9D9D9"
DARK_GRAY = "#8A8A8A"
WHITE = "#FFFFFF"
BACKGROUND_GRADIENT = ["#FFF6F6", "#F7C171", "#D49535"]

# ===== RESPONSIVE LAYOUT CONSTANTS =====
BREAKPOINT = 800  # Mobile vs Desktop threshold (px)
MOBILE_WIDTH = 350

# Grid settings for desktop
DESKTOP_COLUMNS = 3
GRID_SPACING = 10
GRID_RUN_SPACING = 10

STATUS_COLORS = {
    "PENDING": "orange",
    "PREPARING": "blue",
    "READY": "purple",
    "DELIVERED": "teal",
    "COMPLETED": "green",
    "CANCELLED": "red",
}

BUCKET_LABELS = {
    "pending": "Pending",
    "preparing": "Preparing",
    "ready": "Ready",
    "delivered": "Delivered",
    "completed": "Completed",
}
