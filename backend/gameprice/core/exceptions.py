"""Custom exception classes for the application."""


class GamePriceException(Exception):
    """Base exception for all scraper service errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(GamePriceException):
    """Raised when static site configuration is inconsistent."""


class ScraperError(GamePriceException):
    """Raised when a scraper encounters an error for a site."""

    def __init__(self, domain: str, message: str):
        self.domain = domain
        super().__init__(f"Scraper error for {domain}: {message}")


class ProxyServiceError(ScraperError):
    """Raised when the Cloudflare bypass service rejects a request."""

    def __init__(self, domain: str, message: str):
        super().__init__(domain, f"FlareSolverr error: {message}")


class RenderingEngineError(GamePriceException):
    """Raised when the headless browser cannot be started.

    This is a setup failure, not a per-URL failure, so it is allowed to
    abort a batch.
    """


class DeliveryError(GamePriceException):
    """Raised when the downstream webhook answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        super().__init__(f"Webhook {url} responded with status {status_code}")
