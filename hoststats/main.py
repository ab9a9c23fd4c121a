#!/usr/bin/env python3
"""
hoststats - Main Entry Point

Loads the configuration, runs one collection pass over every configured
endpoint and maps each failure kind to a process exit code.
"""

import signal
import sys
import threading
import traceback

from hoststats.cli_parser import parse_arguments
from hoststats.config import EXIT_CODE, HOSTSTATS_DEBUG, LOGGER_NAME, load_config
from hoststats.coordinator import Coordinator
from hoststats.error_messages import format_error
from hoststats.errors import ConfigError, ErrorCode, HostStatsException, SinkWriteError
from hoststats.hs_logging import apply_logging_options, setup_logging
from hoststats.sink import create_sink
from hoststats.summary import print_summary
from hoststats.vsphere import VSphereHostCollector, VSphereSessionFactory

logger = setup_logging(LOGGER_NAME)
cancel_event = threading.Event()


def signal_handler(sig, frame):
    """Handle SIGINT (Ctrl+C) and SIGTERM.

    The first signal stops new connections and collections; endpoints already
    in flight finish and every open session is released. A second signal
    stops waiting for them: the main thread unwinds with EXIT_CODE.INTERRUPTED
    and the previous handlers are restored, but the process only ends once
    workers blocked in a connect or collect call return. A further Ctrl+C at
    that point gets the default KeyboardInterrupt handling and ends it.
    """
    signal_name = signal.Signals(sig).name
    if cancel_event.is_set():
        logger.warning(f"Received signal {signal_name} again, no longer waiting for results; "
                       "exiting when blocked workers return (Ctrl+C again to stop without waiting)")
        sys.exit(EXIT_CODE.INTERRUPTED)

    logger.warning(f"Received signal {signal_name} ({sig}), finishing endpoints in flight")
    cancel_event.set()


def show_what_if(config) -> int:
    logger.status(f"Output would be written to: {config.output_path}")
    for i, endpoint in enumerate(config.endpoints):
        logger.status(f"  [{i}] {endpoint.identity} as {endpoint.username or '<none>'}")
    logger.status(f"{len(config.endpoints)} endpoints would be contacted")
    return EXIT_CODE.SUCCESS


def run_collection(args) -> int:
    """Run one collection pass based on the parsed arguments.

    Returns:
        Exit code for the run.

    Raises:
        ConfigError: If the configuration cannot be loaded.
        SinkWriteError: If the output cannot be written.
    """
    config = load_config(args.config_file)
    if getattr(args, 'output', None):
        config.output_path = args.output

    if getattr(args, 'what_if', False):
        return show_what_if(config)

    sink = create_sink(config.output_path)
    coordinator = Coordinator(
        config,
        VSphereSessionFactory(logger),
        VSphereHostCollector(logger),
        sink,
        logger,
        workers=getattr(args, 'workers', None),
        cancel_event=cancel_event,
    )
    summary = coordinator.run()

    if not getattr(args, 'no_summary_table', False):
        print_summary(summary)

    if summary.cancelled:
        logger.warning(format_error('INTERRUPTED'))
        return EXIT_CODE.INTERRUPTED

    if summary.failed_jobs:
        logger.warning(format_error(
            'ENDPOINTS_FAILED',
            failed=len(summary.failed_jobs),
            total=summary.endpoint_count,
            endpoints="\n".join(f"  - {job.name}: {job.error}" for job in summary.failed_jobs),
            path=summary.output_path,
        ))
        return EXIT_CODE.PARTIAL_FAILURE

    return EXIT_CODE.SUCCESS


def _main_impl(argv=None):
    """
    Main implementation with error handling.

    This is the actual implementation of main(), separated out
    so that main() can wrap it with exception handling.
    """
    args = parse_arguments(argv)
    apply_logging_options(logger, args)

    previous_handlers = {
        sig: signal.signal(sig, signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        return run_collection(args)
    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)


def main(argv=None):
    """
    Main entry point with comprehensive error handling.

    This function wraps _main_impl() to catch and handle all
    exceptions with user-friendly error messages.
    """
    try:
        return _main_impl(argv)

    except ConfigError as e:
        if e.code == ErrorCode.CONFIG_FILE_NOT_FOUND:
            logger.error(format_error('CONFIG_FILE_NOT_FOUND', path=e.error.context.get('path')))
        else:
            logger.error(format_error('CONFIG_INVALID', path=e.error.context.get('path'), error=str(e)))
        if e.suggestion:
            logger.info(f"Suggestion: {e.suggestion}")
        return EXIT_CODE.CONFIG_ERROR

    except SinkWriteError as e:
        logger.error(format_error('SINK_WRITE_FAILED', path=e.error.context.get('path'), error=str(e)))
        if e.suggestion:
            logger.info(f"Suggestion: {e.suggestion}")
        return EXIT_CODE.SINK_ERROR

    except HostStatsException as e:
        logger.error(str(e))
        if e.suggestion:
            logger.info(f"Suggestion: {e.suggestion}")
        return EXIT_CODE.ERROR

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_CODE.INTERRUPTED

    except SystemExit:
        raise

    except Exception as e:
        logger.error(format_error('INTERNAL_ERROR', error=str(e)))
        logger.debug(f"Stack trace:\n{traceback.format_exc()}")
        if HOSTSTATS_DEBUG:
            traceback.print_exc()
        return EXIT_CODE.ERROR


if __name__ == "__main__":
    sys.exit(main())
