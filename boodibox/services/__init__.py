"""Services for the BoodiBox client."""
from .api_client import HTTPAPIClient, safe_json
from .files import LocalFileReader, coerce_file_input, guess_content_type, resolve_file

__all__ = [
    "HTTPAPIClient",
    "safe_json",
    "LocalFileReader",
    "coerce_file_input",
    "guess_content_type",
    "resolve_file",
]
