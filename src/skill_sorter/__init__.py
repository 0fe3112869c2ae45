from skill_sorter.catalog import FULL_CATALOG, SHORT_CATALOG, get_catalog
from skill_sorter.session import SkillSorterSession
from skill_sorter.snapshot import SnapshotError, decode_token, encode_summary

__version__ = "0.1.0"

__all__ = [
    "FULL_CATALOG",
    "SHORT_CATALOG",
    "SkillSorterSession",
    "SnapshotError",
    "decode_token",
    "encode_summary",
    "get_catalog",
]
