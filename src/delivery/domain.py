"""Delivery bounded context — Slot Capacity and Order Admission.

Handles supplier delivery-slot configuration, race-safe admission of orders into
slots, the order lifecycle from placement to delivery, and SLA classification of
delivered orders against the slot window they were booked into.
"""

from protean.domain import Domain

from delivery.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_file_prefix="slotbook")

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
delivery = Domain(name="delivery")
