"""Maintenance request lifecycle module.

Filing, triage, cancellation and rating of branch maintenance requests.

Use: from maintenance_requests.service import MaintenanceRequestService
Use: from maintenance_requests.router import router
"""

from .schemas import MaintenanceRequestResponse, RatingSubmission, StatusUpdate

__all__ = ["MaintenanceRequestResponse", "RatingSubmission", "StatusUpdate"]
