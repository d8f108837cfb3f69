"""Read and rewrite the parts of a Maven POM that a release touches."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

ET.register_namespace("", POM_NAMESPACE)
ET.register_namespace("xsi", XSI_NAMESPACE)


class PomError(Exception):
    """A POM could not be read or rewritten."""


@dataclass
class PomProject:
    """Project information extracted from a POM.

    Attributes:
        path: The POM file
        group_id: groupId, inherited from the parent when not declared
        artifact_id: artifactId
        version: Project version, inherited from the parent when not declared
        scm_connection: ``<scm><connection>`` if present
        scm_developer_connection: ``<scm><developerConnection>`` if present
    """

    path: Path
    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    scm_connection: Optional[str] = None
    scm_developer_connection: Optional[str] = None

    @property
    def scm_url(self) -> Optional[str]:
        """SCM URL to release with, preferring the developer connection."""
        return self.scm_developer_connection or self.scm_connection


def _namespace(root: ET.Element) -> str:
    if root.tag.startswith("{"):
        return root.tag[1 : root.tag.index("}")]
    return ""


def _child(parent: Optional[ET.Element], name: str, ns: str) -> Optional[ET.Element]:
    if parent is None:
        return None
    return parent.find(f"{{{ns}}}{name}" if ns else name)


def _text(parent: Optional[ET.Element], name: str, ns: str) -> Optional[str]:
    element = _child(parent, name, ns)
    if element is None or element.text is None:
        return None
    return element.text.strip() or None


def _parse(path: Path) -> ET.ElementTree:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    try:
        return ET.parse(str(path), parser=parser)
    except FileNotFoundError as e:
        raise PomError(f"POM not found: {path}") from e
    except (ET.ParseError, OSError) as e:
        raise PomError(f"Unable to parse POM {path}: {e}") from e


def read_pom(path: Path) -> PomProject:
    """Read project coordinates and SCM information from a POM.

    Raises:
        PomError: If the file is missing or not a Maven POM
    """
    root = _parse(path).getroot()
    ns = _namespace(root)
    if root.tag != (f"{{{ns}}}project" if ns else "project"):
        raise PomError(f"Not a Maven POM (root element is {root.tag}): {path}")

    parent = _child(root, "parent", ns)
    scm = _child(root, "scm", ns)

    return PomProject(
        path=path,
        group_id=_text(root, "groupId", ns) or _text(parent, "groupId", ns),
        artifact_id=_text(root, "artifactId", ns),
        version=_text(root, "version", ns) or _text(parent, "version", ns),
        scm_connection=_text(scm, "connection", ns),
        scm_developer_connection=_text(scm, "developerConnection", ns),
    )


def rewrite_version(path: Path, new_version: str, destination: Optional[Path] = None) -> Path:
    """Set the project's own ``<version>`` to ``new_version``.

    Args:
        path: POM to read
        new_version: Version to write
        destination: File to write to (defaults to ``path``)

    Returns:
        The file that was written

    Raises:
        PomError: If the POM has no version of its own or cannot be written
    """
    tree = _parse(path)
    root = tree.getroot()
    ns = _namespace(root)

    version = _child(root, "version", ns)
    if version is None:
        raise PomError(f"POM declares no version of its own: {path}")

    old_version = (version.text or "").strip()
    version.text = new_version

    target = destination or path
    try:
        tree.write(str(target), encoding="UTF-8", xml_declaration=True)
    except OSError as e:
        raise PomError(f"Unable to write POM {target}: {e}") from e

    logger.debug("Rewrote %s version %s -> %s into %s", path, old_version, new_version, target)
    return target
