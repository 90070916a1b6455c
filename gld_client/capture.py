"""
Debug capture of GLD trailers and fetched documents.
"""
import logging
import os
import re
import shutil

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_.-]')


class TrailerCapture:
    """
    Writes trailing bytes and fetched GLD documents to disk for inspection.

    File naming:
    - trailer_INDEX_seedSEED.bin: raw bytes found after the fixed-format data
    - document_INDEX_IDENTIFIER.gld: GLD text as returned by the server

    INDEX is a 4-digit zero-padded counter, separate for each kind.

    Example: trailer_0001_seed42.bin, document_0001_1500.gld
    """

    def __init__(self, debug_dir: str):
        """
        Initialize capture and create output directory.

        An existing directory is removed first so each run starts clean.

        Args:
            debug_dir: Directory path to store captured files
        """
        if os.path.exists(debug_dir):
            logger.info(f"Capture directory '{debug_dir}' already exists. Removing it.")
            shutil.rmtree(debug_dir)

        os.makedirs(debug_dir)
        self._debug_dir = debug_dir
        self._trailer_counter = 0
        self._document_counter = 0

    @property
    def debug_dir(self) -> str:
        return self._debug_dir

    def write_trailer(self, raw_bytes: bytes, seed: int) -> str:
        """
        Write the trailing bytes of one deserialization.

        Returns:
            Path of the written file

        Raises:
            RuntimeError: If file write verification fails
        """
        self._trailer_counter += 1
        filename = f"trailer_{self._trailer_counter:04d}_seed{seed}.bin"
        return self._write(filename, raw_bytes)

    def write_document(self, document: str, identifier) -> str:
        """
        Write a fetched GLD document.

        Returns:
            Path of the written file

        Raises:
            RuntimeError: If file write verification fails
        """
        self._document_counter += 1
        safe_identifier = _UNSAFE_FILENAME_CHARS.sub('_', str(identifier))
        filename = f"document_{self._document_counter:04d}_{safe_identifier}.gld"
        return self._write(filename, document.encode('utf-8'))

    def _write(self, filename: str, payload: bytes) -> str:
        filepath = os.path.join(self._debug_dir, filename)
        expected_size = len(payload)

        with open(filepath, 'wb') as f:
            f.write(payload)

        # Verify write completed successfully
        actual_size = os.path.getsize(filepath)

        if actual_size != expected_size:
            raise RuntimeError(
                f"Capture write verification failed for {filename}: "
                f"expected {expected_size} bytes, wrote {actual_size} bytes"
            )
        return filepath
