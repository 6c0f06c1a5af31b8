"""
Entity Identifiers.

Document and folder ids are ``<prefix>_<unix millis>_<6 base36 chars>``.
No uniqueness check is made against existing records.
"""

import re
import secrets
import time

DOCUMENT_PREFIX = "doc"
FOLDER_PREFIX = "folder"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_LENGTH = 6

# Ids become file names, so only a conservative charset is accepted.
_DOCUMENT_ID = re.compile(r"doc_[A-Za-z0-9_-]+")
_FOLDER_ID = re.compile(r"folder_[A-Za-z0-9_-]+")


def _new_id(prefix: str) -> str:
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}_{millis}_{suffix}"


def new_document_id() -> str:
    return _new_id(DOCUMENT_PREFIX)


def new_folder_id() -> str:
    return _new_id(FOLDER_PREFIX)


def is_document_id(value: object) -> bool:
    return isinstance(value, str) and _DOCUMENT_ID.fullmatch(value) is not None


def is_folder_id(value: object) -> bool:
    return isinstance(value, str) and _FOLDER_ID.fullmatch(value) is not None
