"""
Template source loading

Reads a template file and decodes it with the requested encoding. All
failures surface as SourceLoadError.
"""

from pathlib import Path
from typing import Optional, Union

from ..config import appsettings
from .errors import SourceLoadError
from .log import LOG


def source_load(path: Union[str, Path], encoding: Optional[str] = None) -> str:
    """
    Read template source from disk

    Args:
        path: Template file path
        encoding: Text encoding; defaults to the configured default_encoding

    Returns:
        Full decoded file content

    Raises:
        SourceLoadError: File missing, unreadable, not decodable, or the
                         encoding name is unknown
    """
    encoding = encoding or appsettings.default_encoding
    filepath = Path(path)
    try:
        data = filepath.read_bytes()
    except OSError as e:
        raise SourceLoadError(str(path), e.strerror or str(e)) from e

    try:
        source = data.decode(encoding)
    except LookupError as e:
        raise SourceLoadError(str(path), f"unknown encoding '{encoding}'") from e
    except UnicodeDecodeError as e:
        raise SourceLoadError(str(path), f"not valid {encoding}: {e.reason} at byte {e.start}") from e

    LOG(f"Read {len(source)} characters from {filepath.name} ({encoding})", level=2)
    return source
