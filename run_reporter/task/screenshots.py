"""Screenshot store for multi-lane test runs.

Keeps track of which tests have a captured screenshot. The reporter only
asks at the moment a test is finalized; captures registered afterwards are
not attached to that test's report.
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .schema import Test

logger = logging.getLogger(__name__)


class ScreenshotStore:
    """Registers screenshot paths per test and saves captured images."""

    def __init__(self, output_dir: Optional[Path] = None):
        """Initialize screenshot store.

        Args:
            output_dir: Directory to save captured images. None = captures
                        can only be registered by path, not saved.
        """
        self.output_dir = Path(output_dir) if output_dir else None
        self._paths: dict[Test, str] = {}

    def has_captured_for(self, test: Test) -> bool:
        """Whether a screenshot has been registered for the test."""
        return test in self._paths

    def get_path_for(self, test: Test) -> Optional[str]:
        """Path of the screenshot registered for the test, if any."""
        return self._paths.get(test)

    def register(self, test: Test, path: str) -> None:
        """Register an already-saved screenshot for a test.

        Only the first registration for a test is kept.
        """
        if test in self._paths:
            logger.debug("Screenshot already registered for %s, ignoring %s", test.full_name, path)
            return
        self._paths[test] = str(path)

    def capture(self, test: Test, data: str, name: Optional[str] = None) -> str:
        """Decode a base64 image, save it as PNG and register it.

        Args:
            test: Test the screenshot belongs to.
            data: Base64-encoded image data (any format Pillow reads).
            name: File name stem. Default: fixture and test name.

        Returns:
            Path of the saved PNG file.

        Raises:
            RuntimeError: If no output directory is configured.
            ValueError: If the data is not a decodable image.
        """
        if self.output_dir is None:
            raise RuntimeError("ScreenshotStore has no output_dir; cannot save captures.")

        try:
            image_bytes = base64.b64decode(data, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 screenshot data for {test.full_name}: {e}") from e

        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                image.load()
                stem = name or _safe_stem(test.full_name)
                self.output_dir.mkdir(parents=True, exist_ok=True)
                file_path = self.output_dir / f"{stem}.png"
                image.save(file_path, format="PNG")
        except UnidentifiedImageError as e:
            raise ValueError(f"Screenshot data for {test.full_name} is not an image") from e

        self.register(test, str(file_path))
        return str(file_path)


def _safe_stem(name: str) -> str:
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in name)
