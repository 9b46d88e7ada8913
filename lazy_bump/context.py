"""Variables available to search, replace, commit and tag templates."""

from __future__ import annotations

import os
from datetime import datetime, timezone

from .models import TagAndRevision
from .versions import Version


def base_context(tag_and_revision: TagAndRevision | None = None) -> dict[str, str]:
    """Timestamps, environment variables (as ``$NAME``) and VCS details."""
    now = datetime.now()
    ctx: dict[str, str] = {
        "now": now.isoformat(),
        "utcnow": datetime.now(timezone.utc).isoformat(),
    }
    ctx.update({f"${name}": value for name, value in os.environ.items()})

    if tag_and_revision is not None:
        for key, value in tag_and_revision.model_dump().items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = str(value).lower()
            ctx[key] = str(value)
        # the tag's version is not the configured current version
        ctx.pop("current_version", None)
        if tag_and_revision.current_version is not None:
            ctx["current_tag_version"] = tag_and_revision.current_version
    return ctx


def get_context(
    tag_and_revision: TagAndRevision | None = None,
    current_version: Version | None = None,
    new_version: Version | None = None,
    current_version_serialized: str | None = None,
    new_version_serialized: str | None = None,
) -> dict[str, str]:
    """Build the full template context.

    On top of base_context(), every component is exposed as
    ``current_<name>`` and ``new_<name>``, and the serialized versions as
    ``current_version`` and ``new_version``, for whichever are known.
    """
    ctx = base_context(tag_and_revision)
    if current_version is not None:
        ctx.update({f"current_{k}": v for k, v in current_version.values().items()})
    if new_version is not None:
        ctx.update({f"new_{k}": v for k, v in new_version.values().items()})
    if current_version_serialized is not None:
        ctx["current_version"] = current_version_serialized
    if new_version_serialized is not None:
        ctx["new_version"] = new_version_serialized
    return ctx
