"""
CLI argument parsing for hoststats.
"""

import argparse

from hoststats import VERSION
from hoststats.config import DEFAULT_CONFIG_FILE


HELP_MESSAGES = {
    'config_file': (
        "Path to the YAML or JSON configuration file holding the output path and the list "
        f"of vCenter endpoints. Defaults to '{DEFAULT_CONFIG_FILE}'."
    ),
    'output': (
        "Output file. Overrides the path from the configuration file. The format is chosen "
        "from the extension: .csv (default) or .xlsx"
    ),
    'workers': (
        "Number of endpoints collected in parallel. Defaults to the 'workers' key of the "
        "configuration file, then to one worker per endpoint."
    ),
    'what_if': "Show the endpoints that would be contacted and the output path, then exit.",
    'no_summary_table': "Do not print the per-endpoint summary table at the end of the run.",
    'log_file': "Also write a full debug log to this file.",
}

PROGRAM_DESCRIPTION = (
    "Collect host statistics (CPU, memory, model, version) from multiple vCenter "
    "instances and consolidate them into a single file."
)


def _positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def add_universal_arguments(parser):
    """Add the arguments controlling input, output and logging.

    Args:
        parser: Argparse parser to add arguments to.
    """
    standard_args = parser.add_argument_group("Standard Arguments")
    standard_args.add_argument(
        '--config-file', '-c',
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=HELP_MESSAGES['config_file']
    )
    standard_args.add_argument(
        '--output', '-o',
        type=str,
        help=HELP_MESSAGES['output']
    )
    standard_args.add_argument(
        '--workers', '-w',
        type=_positive_int,
        help=HELP_MESSAGES['workers']
    )

    output_control = parser.add_argument_group("Output Control")
    output_control.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    output_control.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose mode"
    )
    output_control.add_argument(
        "--stream-log-level",
        type=str,
        default=None
    )
    output_control.add_argument(
        "--log-file",
        type=str,
        help=HELP_MESSAGES['log_file']
    )
    output_control.add_argument(
        "--no-summary-table",
        action="store_true",
        help=HELP_MESSAGES['no_summary_table']
    )

    view_only_args = parser.add_argument_group("View Only")
    view_only_args.add_argument(
        "--what-if",
        action="store_true",
        help=HELP_MESSAGES['what_if']
    )


def build_parser():
    parser = argparse.ArgumentParser(prog="hoststats", description=PROGRAM_DESCRIPTION)
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    add_universal_arguments(parser)
    return parser


def parse_arguments(argv=None):
    """Parse command-line arguments.

    Args:
        argv: Argument list; sys.argv[1:] when None.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    return build_parser().parse_args(argv)
