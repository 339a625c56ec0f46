"""
URL Generation

Builds public URLs for files published under the application's web root.
"""

from urllib.parse import urlsplit


class UrlGenerator:
    """Generates absolute asset URLs relative to a configured application URL."""

    def __init__(self, root_url: str = "http://localhost"):
        self.root_url = root_url.rstrip('/')

    def asset(self, path: str, secure: bool = False) -> str:
        """
        Generate a URL to a public asset.

        Args:
            path: Path relative to the web root
            secure: Force the https scheme

        Returns:
            Absolute URL for the asset
        """
        parts = urlsplit(self.root_url)
        scheme = "https" if secure else (parts.scheme or "http")
        base = parts.path.rstrip('/')
        return f"{scheme}://{parts.netloc}{base}/{path.lstrip('/')}"
