"""Building context for log correlation across one webhook invocation."""

from contextvars import ContextVar
from typing import Optional

# Context variable for building_id
building_id_var: ContextVar[Optional[int]] = ContextVar("building_id", default=None)


def set_building_context(building_id: int | None) -> None:
    """Set the current building context.

    Args:
        building_id: Building ID to set in context
    """
    building_id_var.set(building_id)


def get_building_context() -> int | None:
    """Get the current building context.

    Returns:
        Current building ID or None
    """
    return building_id_var.get()


def clear_building_context() -> None:
    """Clear the current building context."""
    building_id_var.set(None)
