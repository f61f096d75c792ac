"""
Custom exceptions for the BeeRoute recommendation engine
"""


class BeeRoutingError(Exception):
    """Base exception for the BeeRoute engine"""
    http_status = 500
    public_message = 'Error calculating routes'


class InputError(BeeRoutingError):
    """Raised when the request is missing an origin/destination or carries invalid values"""
    http_status = 400
    public_message = 'Origin and destination are required'

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class DataGapError(BeeRoutingError):
    """Raised internally when a location, line or route is missing from the reference data.

    Always recovered locally with default coordinates/areas/constants.
    """
    pass


class NoCandidateError(BeeRoutingError):
    """Raised when filtering removes every candidate and no backstop could be built"""
    http_status = 404
    public_message = 'No routes match the requested constraints'


class UpstreamError(BeeRoutingError):
    """Raised when the transit context provider fails or times out"""
    pass


class InternalError(BeeRoutingError):
    """Raised on unexpected failures during scoring or path synthesis"""
    pass


class ReferenceDataError(BeeRoutingError):
    """Raised when bundled reference data cannot be loaded"""
    pass
