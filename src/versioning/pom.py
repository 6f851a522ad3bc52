"""pom.xml reading helpers.

Element names are matched on their local part so POMs with and without the
``http://maven.apache.org/POM/4.0.0`` default namespace read the same way.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from typing import List, Optional

from constants import Constants
from common.errors import DescriptorError

logger = logging.getLogger(__name__)

TAG_GROUP_ID = "groupId"
TAG_ARTIFACT_ID = "artifactId"
TAG_VERSION = "version"
TAG_DEPENDENCY = "dependency"


def descriptor_path(project_dir: str) -> str:
    return os.path.join(project_dir, Constants.POM_XML_FILE)


def read_descriptor(project_dir: str) -> Optional[ET.Element]:
    """Parse ``<project_dir>/pom.xml`` and return its root element.

    Returns None when the file is missing or cannot be read.

    Raises:
        DescriptorError: the file exists but is not well-formed XML.
    """
    path = descriptor_path(project_dir)
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        return None
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as e:
        raise DescriptorError(f"Malformed {path}: {e}") from e
    except OSError as e:
        logger.debug("Could not read %s: %s", path, e)
        return None


def local_name(tag: object) -> str:
    """``{namespace}name`` -> ``name``. Comments and PIs have no string tag."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def find_child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    """First direct child named ``name``, or None."""
    if element is None or not name:
        return None
    for child in element:
        if local_name(child.tag) == name:
            return child
    return None


def find_children(element: Optional[ET.Element], name: str) -> List[ET.Element]:
    """All direct children named ``name``."""
    if element is None or not name:
        return []
    return [child for child in element if local_name(child.tag) == name]


def child_text(element: Optional[ET.Element], name: str) -> Optional[str]:
    """Stripped text of the first ``name`` child; None if absent or empty."""
    child = find_child(element, name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None
