"""Background job tasks.

Each task module defines async functions that are registered in the
worker.
"""

from storefront.core.jobs.tasks.notifications import deliver_notification


__all__ = [
    "deliver_notification",
]
