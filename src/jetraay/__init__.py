"""
Jetraay - Local, versioned store for HTTP request presets.

Jetraay keeps saved requests in a SQLite file under the user's application
data directory. It provides:
- Create, list, rename, clone and delete of presets
- An append-only history with one version per content change
- Revert to any recorded version without rewriting history
- Sending a preset through curl

Example usage:
    $ jetraay new GET https://example.com -H "Accept: */*"
    $ jetraay history <id>
    $ jetraay revert <id> 1
"""

__version__ = "0.1.0"
__author__ = "Jetraay Contributors"

from jetraay.engine import PresetEngine
from jetraay.schema import HistoryEntry, JetraayConfig, Record

__all__ = [
    "HistoryEntry",
    "JetraayConfig",
    "PresetEngine",
    "Record",
    "__version__",
    "__author__",
]
