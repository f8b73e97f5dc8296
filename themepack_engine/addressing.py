"""Content addressing for parsed templates.

Template identifiers can contain path separators, so each parsed template is
stored under a flat digest of its identifier instead. The hosting platform
looks templates up by the MD5 of the identifier, which keeps names stable
across runs for the same theme.
"""

import hashlib

PARSED_TEMPLATES_PREFIX = "parsed/templates"


def address_of(logical_identifier: str) -> str:
    """Return the 32-char hex digest naming a template inside the archive."""
    return hashlib.md5(logical_identifier.encode("utf-8")).hexdigest()


def template_archive_path(logical_identifier: str) -> str:
    return f"{PARSED_TEMPLATES_PREFIX}/{address_of(logical_identifier)}.json"
