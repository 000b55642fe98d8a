class ComplianceError(Exception):
    """Base class for errors raised by the service layer."""


class NotFoundError(ComplianceError):
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class ConflictError(ComplianceError):
    pass


class AuthenticationError(ComplianceError):
    pass


class InvalidScheduleError(ComplianceError, ValueError):
    """A due date that cannot be advanced by the requested recurrence."""
