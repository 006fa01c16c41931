"""Domain errors shared by services and the HTTP layer.

Services raise these; ``main.py`` maps them to HTTP status codes.
"""


class GridOSError(Exception):
    """Base class for GridOS domain errors."""


class NotFoundError(GridOSError):
    """Referenced grid node or alarm does not exist."""
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ValidationError(GridOSError):
    """Malformed or out-of-range input."""
    pass


class StorageUnavailableError(GridOSError):
    """Storage backend failed or is unreachable."""
    pass


class InvalidTransitionError(GridOSError):
    """Alarm transition rejected (strict transition mode only)."""
    def __init__(self, alarm_id: int, current: str, target: str):
        self.alarm_id = alarm_id
        self.current = current
        self.target = target
        super().__init__(f"Alarm {alarm_id}: cannot move from {current} to {target}")
