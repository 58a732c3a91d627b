"""Key listing for stored blobs. Values never leave this module."""

import io
from typing import List

from dotenv import dotenv_values


def key_names(blob: str) -> List[str]:
    """
    Names of the variables a KEY=VALUE blob defines, in file order.

    Parsing follows python-dotenv, so comments, blank lines and
    ``export`` prefixes are handled the way child tools usually see them.
    """
    return list(dotenv_values(stream=io.StringIO(blob)).keys())
