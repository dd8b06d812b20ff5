"""
Typed Exception Hierarchy for Plant Operations.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PlantOpsError:

    PlantOpsError (base)
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   +-- DuplicateRecordError
    |
    +-- ValidationError
    |   +-- RequiredFieldError
    |   +-- InvalidIndicatorDigitError
    |   +-- CorrectiveActionRequiredError
    |   +-- ArchiveConfirmationRequiredError
    |
    +-- StorageError
    |   +-- FileUploadError
    |   +-- FileDeleteError
    |   +-- InvalidFileUrlError
    |
    +-- TimeClockError
    |   +-- EmployeeNotFoundError
    |   +-- AlreadyClockedInError
    |   +-- NotClockedInError
    |   +-- BreakStateError
    |
    +-- ProductionError
    |   +-- ProductionRunNotReadyError
    |
    +-- DayCloseError
        +-- DayCloseBlockedError
        +-- DayAlreadyClosedError
        +-- FutureDayCloseError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Record          | RECORD_NOT_FOUND              | Row ID doesn't exist
                | DUPLICATE_RECORD              | Unique key already taken
----------------|-------------------------------|---------------------------------------
Validation      | REQUIRED_FIELD                | Mandatory form field missing
                | INVALID_INDICATOR_DIGIT       | Packaging indicator not one digit 0-9
                | CORRECTIVE_ACTION_REQUIRED    | Failed QA test without corrective action
                | ARCHIVE_CONFIRMATION_REQUIRED | Archiving a document that has not expired
----------------|-------------------------------|---------------------------------------
Storage         | FILE_UPLOAD_FAILED            | Bucket rejected an upload
                | FILE_DELETE_FAILED            | Bucket rejected a removal
                | INVALID_FILE_URL              | URL does not belong to the bucket
----------------|-------------------------------|---------------------------------------
Time clock      | EMPLOYEE_NOT_FOUND            | No active employee with that number
                | ALREADY_CLOCKED_IN            | Open time entry exists
                | NOT_CLOCKED_IN                | No open time entry
                | BREAK_STATE                   | Break started twice / ended unstarted
----------------|-------------------------------|---------------------------------------
Production      | PRODUCTION_RUN_NOT_READY      | Finish before all ingredients weighed
----------------|-------------------------------|---------------------------------------
Day close       | DAY_CLOSE_BLOCKED             | Open transactions remain for the date
                | DAY_ALREADY_CLOSED            | Date was closed before
                | FUTURE_DAY_CLOSE              | Date is after today

Every service catches nothing it cannot handle: it rolls back its session and
re-raises, so the caller shows the message and the persisted state is
unchanged.
"""


class PlantOpsError(Exception):
    """
    Base exception for all plant operations errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "PLANT_OPS_ERROR"


# Record exceptions


class RecordError(PlantOpsError):
    """Base exception for record lookup/persistence errors."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Row with the given ID was not found in the table."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = str(record_id)
        super().__init__(f"{table} record not found: {record_id}")


class DuplicateRecordError(RecordError):
    """A row with the same unique key already exists."""

    code: str = "DUPLICATE_RECORD"

    def __init__(self, table: str, key: str):
        self.table = table
        self.key = key
        super().__init__(f"{table} already has a record for {key}")


# Validation exceptions


class ValidationError(PlantOpsError):
    """Base exception for rejected form input."""

    code: str = "VALIDATION_ERROR"


class RequiredFieldError(ValidationError):
    """A required field was empty."""

    code: str = "REQUIRED_FIELD"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} is required")


class InvalidIndicatorDigitError(ValidationError):
    """Packaging indicator must be a single digit 0-9."""

    code: str = "INVALID_INDICATOR_DIGIT"

    def __init__(self, indicator_digit: str):
        self.indicator_digit = indicator_digit
        super().__init__(
            f"Indicator digit must be a single digit 0-9, got {indicator_digit!r}"
        )


class CorrectiveActionRequiredError(ValidationError):
    """A failed QA test was recorded without a corrective action."""

    code: str = "CORRECTIVE_ACTION_REQUIRED"

    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(
            f"Corrective action is required for failed test: {test_name}"
        )


class ArchiveConfirmationRequiredError(ValidationError):
    """Archiving a document that has not expired needs explicit confirmation."""

    code: str = "ARCHIVE_CONFIRMATION_REQUIRED"

    def __init__(self, document_id: str, document_name: str):
        self.document_id = str(document_id)
        self.document_name = document_name
        super().__init__(
            f'This document has not expired yet. Confirm archiving "{document_name}"'
        )


# Storage exceptions


class StorageError(PlantOpsError):
    """Base exception for storage bucket errors."""

    code: str = "STORAGE_ERROR"


class FileUploadError(StorageError):
    """Upload to a storage bucket failed."""

    code: str = "FILE_UPLOAD_FAILED"

    def __init__(self, bucket: str, path: str, reason: str):
        self.bucket = bucket
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to upload {path} to {bucket}: {reason}")


class FileDeleteError(StorageError):
    """Removal from a storage bucket failed."""

    code: str = "FILE_DELETE_FAILED"

    def __init__(self, bucket: str, path: str, reason: str):
        self.bucket = bucket
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to delete {path} from {bucket}: {reason}")


class InvalidFileUrlError(StorageError):
    """The URL does not point into the expected bucket."""

    code: str = "INVALID_FILE_URL"

    def __init__(self, bucket: str, url: str):
        self.bucket = bucket
        self.url = url
        super().__init__(f"Invalid file URL for bucket {bucket}: {url}")


# Time clock exceptions


class TimeClockError(PlantOpsError):
    """Base exception for kiosk punches."""

    code: str = "TIME_CLOCK_ERROR"


class EmployeeNotFoundError(TimeClockError):
    """No active employee matches the entered number."""

    code: str = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_number: str):
        self.employee_number = employee_number
        super().__init__("Employee not found")


class AlreadyClockedInError(TimeClockError):
    """Employee already has an open time entry."""

    code: str = "ALREADY_CLOCKED_IN"

    def __init__(self, employee_id: str, entry_id: str):
        self.employee_id = str(employee_id)
        self.entry_id = str(entry_id)
        super().__init__(f"Employee {employee_id} is already clocked in")


class NotClockedInError(TimeClockError):
    """Punch requires an open time entry and there is none."""

    code: str = "NOT_CLOCKED_IN"

    def __init__(self, entry_id: str):
        self.entry_id = str(entry_id)
        super().__init__(f"Time entry {entry_id} is not open")


class BreakStateError(TimeClockError):
    """Break started twice, or ended before it started."""

    code: str = "BREAK_STATE"

    def __init__(self, entry_id: str, reason: str):
        self.entry_id = str(entry_id)
        self.reason = reason
        super().__init__(f"Time entry {entry_id}: {reason}")


# Production exceptions


class ProductionError(PlantOpsError):
    """Base exception for production execution errors."""

    code: str = "PRODUCTION_ERROR"


class ProductionRunNotReadyError(ProductionError):
    """Production run cannot finish yet."""

    code: str = "PRODUCTION_RUN_NOT_READY"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Production run not ready: {reason}")


# Day close exceptions


class DayCloseError(PlantOpsError):
    """Base exception for day close errors."""

    code: str = "DAY_CLOSE_ERROR"


class DayCloseBlockedError(DayCloseError):
    """Open transactions must be resolved before the day can close."""

    code: str = "DAY_CLOSE_BLOCKED"

    def __init__(self, business_date: str, total_blockers: int):
        self.business_date = str(business_date)
        self.total_blockers = total_blockers
        super().__init__(
            "Cannot close day with open transactions. "
            f"{total_blockers} blocker(s) on {business_date}"
        )


class DayAlreadyClosedError(DayCloseError):
    """The date already has a day-close record."""

    code: str = "DAY_ALREADY_CLOSED"

    def __init__(self, business_date: str):
        self.business_date = str(business_date)
        super().__init__(f"Day already closed: {business_date}")


class FutureDayCloseError(DayCloseError):
    """Days in the future cannot be closed."""

    code: str = "FUTURE_DAY_CLOSE"

    def __init__(self, business_date: str):
        self.business_date = str(business_date)
        super().__init__(f"Cannot close a future day: {business_date}")
