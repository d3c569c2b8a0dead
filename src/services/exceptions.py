"""Service-layer error taxonomy."""


class ServiceError(RuntimeError):
    """Base class for service-layer errors."""


class ValidationError(ServiceError):
    """Caller-supplied input violates a precondition; nothing was attempted."""


class PersistenceError(ServiceError):
    """The database was unreachable or rejected a write."""


class ItemNotFoundError(PersistenceError):
    """The identified inventory row does not exist."""

    def __init__(self, item_id: int):
        super().__init__(f"Inventory item {item_id} not found")
        self.item_id = item_id


class ExtractionError(ServiceError):
    """Receipt extraction failed."""

    user_message = "Could not read the receipt. Please try again."


class ExtractionRequestError(ExtractionError):
    """The call to the vision model itself failed (network, auth, quota, timeout)."""

    user_message = "The receipt service is unavailable right now. Please try again."


class NoItemsExtractedError(ExtractionError):
    """The model answered but no valid food rows could be parsed."""

    user_message = "No food items found in the receipt. Try a clearer photo."


class ParseError(ServiceError):
    """Model output did not match the expected recipe shape."""


class LLMRequestError(ServiceError):
    """A text model request failed or returned an unusable envelope."""


class RecipeGenerationError(ServiceError):
    """The recipe could not be requested from the text model."""
