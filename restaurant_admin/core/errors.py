"""
Domain error types raised by the service layer.

Routers translate these into HTTP responses:
    - NotFoundError          -> 404
    - BusinessRuleError      -> 400
    - InvalidTransitionError -> 409
"""

from typing import Optional


class RestaurantError(Exception):
    """Base class for errors the API reports to the user."""

    status_code = 400

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(RestaurantError):
    """A referenced row does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} #{entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class BusinessRuleError(RestaurantError):
    """The request is well formed but the restaurant rules refuse it."""

    status_code = 400


class InvalidTransitionError(RestaurantError):
    """A status change that is not in the allowed actions table."""

    status_code = 409

    def __init__(self, kind: str, current: str, target: str, allowed: list[str]):
        super().__init__(
            f"Cannot change {kind} from '{current}' to '{target}'",
            detail=f"Allowed: {allowed}",
        )
        self.current = current
        self.target = target
        self.allowed = allowed
