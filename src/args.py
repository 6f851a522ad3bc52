"""Argument parsing functionality for pomversions."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="pomversions",
        description=(
            "Report explicit version references found in the pom.xml files of "
            "every project cloned under GIT_HOME, and flag the stale ones."
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--directory",
                        dest="FROM_SRC",
                        help="Directory holding the cloned projects (default: $GIT_HOME)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or .properties)",
                        action="store",
                        type=str)
    parser.add_argument("--nexus-url",
                        dest="NEXUS_URL",
                        help="Base Nexus projects search URL (overrides the config file)",
                        action="store",
                        type=str)
    parser.add_argument("--no-registry",
                        dest="NO_REGISTRY",
                        help="Do not check version existence in Nexus.",
                        action="store_true")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Also write the text report to this file",
                        action="store",
                        type=str)
    parser.add_argument("--json",
                        dest="JSON_OUTPUT",
                        help="Export the collected versions and their ages as JSON",
                        action="store",
                        type=str)
    parser.add_argument("--workers",
                        dest="WORKERS",
                        help="Number of project directories processed concurrently",
                        action="store",
                        type=int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Registry request timeout in seconds",
                        action="store",
                        type=float)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the report to the console.",
                        action="store_true")
    parser.add_argument("--error-on-stale",
                        dest="ERROR_ON_STALE",
                        help="Exit with a non-zero status code if stale versions are found.",
                        action="store_true")

    return parser.parse_args(argv)
