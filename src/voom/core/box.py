"""The box: a directory of symlinks to dependency checkouts.

Each entry ``<box_dir>/<name>`` links to the project directory of a resolved
dependency inside its repository checkout, so work on the dependency and
its dependent can proceed side by side.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from voom.core.resolver.models import ResolutionRequest, ResolvedVersion
from voom.core.resolver.resolver import VersionResolver
from voom.exceptions import VoomError

logger = logging.getLogger(__name__)


def box_add(
    request: ResolutionRequest, resolver: VersionResolver, box_dir: Path
) -> tuple[Path, ResolvedVersion]:
    """Link the checkout of ``request.coordinate`` into ``box_dir``.

    Returns:
        The link created and the resolution it points at.

    Raises:
        NoMatchingVersionError: If the coordinate does not resolve.
        AmbiguousResolutionError: If it resolves more than once.
        VoomError: If a different entry of that name is already present.
    """
    resolved = resolver.resolve_unique(request)
    target = Path(resolved.location) / resolved.path if resolved.path else Path(resolved.location)
    link = Path(box_dir) / request.coordinate.name

    if link.is_symlink() or link.exists():
        if link.is_symlink() and Path(os.readlink(link)) == target:
            logger.info("%s already in box", link.name)
            return link, resolved
        raise VoomError(
            f"Box entry {link} already exists", link=str(link), target=str(target),
        )

    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(target, target_is_directory=True)
    logger.info("Boxed %s -> %s", link, target)
    return link, resolved


def box_remove(name: str, box_dir: Path) -> Path:
    """Remove box entry ``name``. Only symlinks are ever removed.

    Raises:
        VoomError: If there is no such entry or it is not a symlink.
    """
    link = Path(box_dir) / name
    if not link.is_symlink():
        raise VoomError(f"No box entry named {name}", link=str(link))
    link.unlink()
    logger.info("Removed %s from box", name)
    return link


def box_list(box_dir: Path) -> dict[str, str]:
    """Box entry names mapped to their link targets."""
    box_dir = Path(box_dir)
    if not box_dir.is_dir():
        return {}
    return {
        entry.name: os.readlink(entry)
        for entry in sorted(box_dir.iterdir())
        if entry.is_symlink()
    }
