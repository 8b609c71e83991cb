"""Application-wide constants for the Lessonbook platform."""

BRAND_NAME = "Lessonbook"

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "1.0.0"
API_DESCRIPTION = (
    "Booking lifecycle for a tutoring marketplace: students request sessions, "
    "teachers confirm and complete them, and every change lands in the "
    "counterparty's notification inbox."
)

API_V1_PREFIX = "/api/v1"
