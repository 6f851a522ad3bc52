"""pomversions - report stale version references across local Maven projects.

    Returns:
        int: Exit code
"""
import logging
import os
import sys

from constants import ExitCodes
from args import parse_args
from config import load_config
from common.errors import ConfigError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled, Timer
from registry.nexus import NexusArtifactChecker
from reporter import export_json, print_report, render_report, write_report
from versioning.graph import VersionGraphBuilder
from versioning.resolver import find_stale


def build_checker(config):
    """Registry checker for the configured Nexus, or None when disabled."""
    if not config.check_registry:
        logging.info("Registry checks disabled; existence will not be reported.")
        return None
    return NexusArtifactChecker(config.nexus_url, timeout=config.registry_timeout)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        config = load_config(args)
    except ConfigError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    scan_root = os.path.abspath(config.git_home)
    if not os.path.isdir(scan_root):
        logging.error("Directory not found: %s, aborting", scan_root)
        sys.exit(ExitCodes.FILE_ERROR.value)

    builder = VersionGraphBuilder(checker=build_checker(config), workers=config.workers)
    with Timer() as timer:
        tree = builder.build(scan_root, config.extra_projects)
    logging.info("Collected versions for %d projects in %d ms.", len(tree), timer.duration_ms())

    diagnostics = builder.diagnostics.snapshot()
    builder.diagnostics.log_all(logger)

    report = render_report(tree, scan_root, diagnostics)
    if not args.QUIET:
        print_report(report)
    if config.report_file:
        write_report(report, config.report_file)
    if config.json_file:
        export_json(tree, config.json_file)

    stale = find_stale(tree)
    if stale:
        logging.warning("%d version references are stale.", len(stale))
        if args.ERROR_ON_STALE:
            logging.error("Stale versions present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_STALE.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main",
                                outcome="success", count=len(tree))
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
