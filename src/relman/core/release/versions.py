"""Version arithmetic for release and development versions."""

import re

SNAPSHOT_SUFFIX = "-SNAPSHOT"

_LAST_NUMBER = re.compile(r"(\d+)(?!.*\d)")


def is_snapshot(version: str) -> bool:
    """Whether ``version`` is a development (snapshot) version."""
    return version.endswith(SNAPSHOT_SUFFIX)


def to_release_version(version: str) -> str:
    """Strip the snapshot suffix: ``1.2-SNAPSHOT`` -> ``1.2``.

    Raises:
        ValueError: If the version is not a snapshot
    """
    if not is_snapshot(version):
        raise ValueError(f"Version is not a snapshot: {version}")
    release = version[: -len(SNAPSHOT_SUFFIX)]
    if not release:
        raise ValueError(f"Version has no release part: {version}")
    return release


def next_development_version(release_version: str) -> str:
    """Increment the last number and add the snapshot suffix.

    ``1.2`` -> ``1.3-SNAPSHOT``, ``2.0-beta-3`` -> ``2.0-beta-4-SNAPSHOT``.

    Raises:
        ValueError: If the version has no number to increment
    """
    if is_snapshot(release_version):
        release_version = to_release_version(release_version)

    match = _LAST_NUMBER.search(release_version)
    if match is None:
        raise ValueError(f"Cannot compute next version of '{release_version}': no number found")

    incremented = str(int(match.group(1)) + 1)
    head, tail = release_version[: match.start()], release_version[match.end() :]
    return head + incremented + tail + SNAPSHOT_SUFFIX
