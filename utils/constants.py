"""
Application-wide constants.
Centralizes rates, limits and default offsets used by the booking flow.
"""

# Pricing
PLATFORM_FEE_RATE = 0.05  # 5% platform fee on the base service price
TAX_RATE = 0.085  # 8.5% tax on base price plus platform fee

# Card field limits
CARD_NUMBER_MAX_DIGITS = 16
CARD_NUMBER_MIN_DIGITS = 13
CARD_NUMBER_GROUP_SIZE = 4
EXPIRY_DISPLAY_LENGTH = 5  # MM/YY
CVV_MAX_LENGTH = 4
CVV_MIN_LENGTH = 3
HOLDER_NAME_MIN_LENGTH = 2

# Validation limits
MAX_NOTES_LENGTH = 1000

# Time constants
DEFAULT_REMINDER_OFFSET_MINUTES = 60
DATE_OPTIONS_DAYS = 14  # Upcoming days offered on the date step
BOOKING_ID_DISPLAY_LENGTH = 8  # Length of booking ID to show in UI

# Availability
PROVIDER_DONE_FOR_TODAY = "Provider is done for today"  # single-slot marker for a closed day
