from pathlib import Path
from urllib.parse import unquote, urlparse


def image_file_path(image_uri: str) -> Path:
    """Resolve a ``file://`` URI or plain filesystem path to a Path."""
    parsed = urlparse(image_uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(image_uri)


class ImageLoader:
    """Reads the bytes of a source image. Does not own the image's lifetime."""

    SUPPORTED_SCHEMES: tuple[str, ...] = ("", "file")

    def load(self, image_uri: str) -> bytes:
        """Read image bytes from disk.

        Raises:
            FileNotFoundError: if the file does not exist at the resolved path.
            ValueError: if the URI scheme is not a local file.
        """
        scheme = urlparse(image_uri).scheme
        # Single letters are Windows drive letters, not schemes.
        if len(scheme) > 1 and scheme not in self.SUPPORTED_SCHEMES:
            raise ValueError(f"Image URI scheme '{scheme}' is not supported")
        path = image_file_path(image_uri)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")
        return path.read_bytes()
