"""Background job processing with ARQ.

Notification events are handed to the worker through Redis so that
delivery is retried independently of the request that produced them.
"""

from storefront.core.jobs.registry import close_arq_pool, enqueue, get_arq_pool, init_arq_pool


__all__ = [
    "close_arq_pool",
    "enqueue",
    "get_arq_pool",
    "init_arq_pool",
]
