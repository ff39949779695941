"""Error taxonomy shared by the agents, the session layer and the API."""


class LegalLensError(Exception):
    """Base class for all LegalLens failures."""

    code = "LEGALLENS_ERROR"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ConfigurationError(LegalLensError):
    """The service is missing required configuration."""

    code = "CONFIGURATION_ERROR"


class IngestionError(LegalLensError):
    """An uploaded file could not be read or is not a supported document."""

    code = "INGESTION_ERROR"


class ValidationError(LegalLensError):
    """A caller violated a precondition of the requested operation."""

    code = "VALIDATION_ERROR"


class SessionBusyError(ValidationError):
    """Another request for this session is still in flight."""

    code = "SESSION_BUSY"


class SessionNotFoundError(ValidationError):
    """No active session exists with the given id."""

    code = "SESSION_NOT_FOUND"


class TransportError(LegalLensError):
    """The model endpoint could not be reached or rejected the call."""

    code = "TRANSPORT_ERROR"


class EmptyResponseError(LegalLensError):
    """The model call succeeded but returned no content."""

    code = "EMPTY_RESPONSE"


class DecodeError(LegalLensError):
    """The model response does not conform to the analysis schema."""

    code = "DECODE_ERROR"
