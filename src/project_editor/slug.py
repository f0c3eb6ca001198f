"""Project name to slug normalization."""

from __future__ import annotations

import re

ROOT_SLUG = "/"

_SEPARATORS = re.compile(r"[\W_]+")


def normalize_slug(name: str) -> str:
    """Return the identity slug for a project name.

    Runs of anything other than letters and digits collapse to a single
    underscore and the result always ends in ``/``. A name with no letters
    or digits normalizes to :data:`ROOT_SLUG`.

    >>> normalize_slug("Quality Assurance!")
    'quality_assurance/'
    """
    slug = _SEPARATORS.sub("_", name.lower()).strip("_")
    return f"{slug}/" if slug else ROOT_SLUG
