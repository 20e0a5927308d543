"""Custom exception classes for medidash."""


class MedidashError(Exception):
    """Base exception for medidash."""
    pass


class InvalidInput(MedidashError):
    """Input rejected before any network call."""
    pass


class InvalidMonth(InvalidInput):
    """Month token is not a valid YYYY-MM month."""
    pass


class InvalidCredentialsInput(InvalidInput):
    """Email or password is empty."""
    pass


class ConfigError(InvalidInput):
    """Configuration is missing or unreadable."""
    pass


class AuthenticationFailed(MedidashError):
    """Medibill login did not return a token."""
    pass


class DirectoryFetchFailed(MedidashError):
    """Practitioner directory could not be fetched or parsed."""
    pass
