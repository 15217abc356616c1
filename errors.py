class SourceUnavailable(Exception):
    """An external data source could not be reached or answered with an error status."""

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details


class NotFound(Exception):
    def __init__(self, error: str = "Country not found"):
        super().__init__(error)
        self.error = error
