class RecommendationUnavailableError(RuntimeError):
    """Raised when the data source fails while recommendations are being computed."""

    pass


class BookNotFoundError(LookupError):
    """Raised when a referenced book does not exist."""

    pass


class ReviewNotFoundError(LookupError):
    """Raised when a referenced review does not exist."""

    pass


class ReviewPermissionError(PermissionError):
    """Raised when a user tries to change a review they did not write."""

    pass


class DuplicateReviewError(ValueError):
    """Raised when a user reviews the same book twice."""

    pass
