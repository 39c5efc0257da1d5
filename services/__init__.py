"""services package"""

__all__ = [
    "attachments",
    "contact_resolver",
    "enrollment_directory",
    "errors",
    "identity",
    "message_id_generator",
    "message_service",
    "ws_manager",
]
