"""Background workers module.

Hosts the Celery application whose beat schedule triggers the daily
retention sweep. Task bodies live next to the service they drive
(retention.tasks).
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
