# datastore/exceptions.py

"""
RECORD STORE ERRORS

Error surface of the durable relational collaborator:
- TransportError: network / HTTP / database connectivity failure
- ConstraintViolation: the store rejected the row (unique, FK, check)
- ConfigurationMissing: connection credentials are not set
- ConfigurationInvalid: connection settings are present but unusable
- NotificationUnavailable: change-feed subscription could not be established

Configuration errors are operator-recoverable without touching data, so they
share a dedicated base class and are never folded into TransportError.
"""


class RecordStoreError(Exception):
    """Base record store exception"""


class TransportError(RecordStoreError):
    pass


class ConstraintViolation(RecordStoreError):
    pass


class ConfigurationError(RecordStoreError):
    """Store is unusable until an operator fixes the connection settings."""


class ConfigurationMissing(ConfigurationError):
    pass


class ConfigurationInvalid(ConfigurationError):
    pass


class NotificationUnavailable(RecordStoreError):
    pass
