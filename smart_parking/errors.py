from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    DUPLICATE_SLOT_NUMBER = "DuplicateSlotNumber"
    VALIDATION_FAILED = "ValidationFailed"
    NO_SLOT_AVAILABLE = "NoSlotAvailable"
    SLOT_NOT_FOUND = "SlotNotFound"
    ALREADY_EMPTY = "AlreadyEmpty"
    INTERNAL_FAULT = "InternalFault"


class ParkingError(Exception):
    """Base class for failures reported back to the caller.

    Each subclass fixes the error kind, the default message and the HTTP
    status the boundary answers with.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_FAULT
    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ParkingError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Invalid input"


class DuplicateSlotNumber(ParkingError):
    kind = ErrorKind.DUPLICATE_SLOT_NUMBER
    status_code = 400
    default_message = "Slot number already exists"


class ValidationFailed(ParkingError):
    kind = ErrorKind.VALIDATION_FAILED
    status_code = 400
    default_message = "Please select at least one option: Is Covered or EV Charging Available"


class NoSlotAvailable(ParkingError):
    kind = ErrorKind.NO_SLOT_AVAILABLE
    status_code = 404
    default_message = "No slot available"


class SlotNotFound(ParkingError):
    kind = ErrorKind.SLOT_NOT_FOUND
    status_code = 404
    default_message = "Slot not found"


class AlreadyEmpty(ParkingError):
    kind = ErrorKind.ALREADY_EMPTY
    status_code = 404
    default_message = "Slot is already empty"
