from __future__ import annotations


class FileOpError(Exception):
    """Base for failures the HTTP layer maps to a fixed status code."""

    status_code = 500
    kind = 'io_failure'
    default_message = 'Internal server error. Please try again.'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ForbiddenPath(FileOpError):
    status_code = 403
    kind = 'forbidden_path'
    default_message = 'Forbidden path'


class NotFound(FileOpError):
    status_code = 404
    kind = 'not_found'
    default_message = 'File or directory not found'


class AlreadyExists(FileOpError):
    status_code = 400
    kind = 'already_exists'
    default_message = 'A file or directory with this name already exists'


class InvalidName(FileOpError):
    status_code = 400
    kind = 'invalid_name'
    default_message = 'Invalid name'


class NoFileProvided(FileOpError):
    status_code = 400
    kind = 'no_file_provided'
    default_message = 'No file was uploaded'


class PayloadTooLarge(FileOpError):
    status_code = 413
    kind = 'payload_too_large'
    default_message = 'Request is too large'


class IOFailure(FileOpError):
    pass
