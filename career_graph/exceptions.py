"""Error taxonomy for the career graph pipeline."""


class CareerGraphError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(CareerGraphError):
    """Required configuration (credential, connection string) is missing."""


class ProviderError(CareerGraphError):
    """The generative provider call failed or returned an unusable response."""


class PersistenceError(CareerGraphError):
    """A single record could not be written to the document store."""


class ReferentialIntegrityError(CareerGraphError):
    """An edge or artifact references an entity that does not exist.

    Only raised when strict reference checking is enabled; otherwise the
    gap is logged and the record skipped.
    """

    def __init__(self, label: str, missing: str):
        super().__init__(f"{label}: referenced {missing} does not exist")
        self.label = label
        self.missing = missing
