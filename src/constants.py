"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    EXIT_STALE = 3
    CONFIG_ERROR = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    POM_XML_FILE = "pom.xml"
    SNAPSHOT_SUFFIX = "-SNAPSHOT"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
    DEFAULT_WORKERS = 8

    # Environment variables
    ENV_GIT_HOME = "GIT_HOME"
    ENV_CONFIG = "VERSIONS_CONFIG"
    ENV_NEXUS_URL = "VERSIONS_NEXUS_URL"
    ENV_LOG_LEVEL = "VERSIONS_LOG_LEVEL"

    # Configuration file keys (shared by YAML and .properties files)
    PROPS_NEXUS = "versions.nexus.base-projects-url"
    PROPS_NEXUS_TIMEOUT = "versions.nexus.timeout"
    PROPS_REPORTFILE = "versions.report.output-file"
    PROPS_JSONFILE = "versions.report.json-file"
    PROPS_2NDLEVEL = "versions.projects.second-level"
    PROPS_WORKERS = "versions.scan.workers"
    DEFAULT_CONFIG_FILES = ["versions.yml", "versions.yaml", "versions.properties"]

    # Report layout
    LINE_LEN = 79
    TAB_LEN = 4
