#!/usr/bin/env python3
"""Command-line entry point of recoflow jobs."""

import argparse
import os
import pathlib
import sys
from typing import List

from recoflow.config import load_config_file, resolve_config_path
from recoflow.config.operations import parse_value, set_nested_value


def main(
    config: str,
    source: List[str],
    source_list: str,
    output: str,
    n: int,
    nskip: int,
    log_dir: str,
    hist_file: str,
    config_overrides: List[str],
):
    """Main driver for event processing.

    Performs these basic functions:
    - Update the configuration with the command-line arguments
    - Run the event loop

    Parameters
    ----------
    config : str
        Path to the configuration file
    source : List[str]
        List of paths to the input files
    source_list : str
        Path to a text file containing a list of data file paths
    output : str
        Path to the output file
    n : int
        Number of events to process
    nskip : int
        Number of events to skip
    log_dir : str
        Path to the directory for storing the event log
    hist_file : str
        Path to the file where to save the QA histograms
    config_overrides : List[str]
        List of config overrides in the form "key.path=value"
    """
    cfg = build_config(
        config,
        source,
        source_list,
        output,
        n,
        nskip,
        log_dir,
        hist_file,
        config_overrides,
    )

    # Import the event loop only when it is needed
    from recoflow.main import run

    run(cfg)


def build_config(
    config,
    source=None,
    source_list=None,
    output=None,
    n=None,
    nskip=None,
    log_dir=None,
    hist_file=None,
    config_overrides=None,
):
    """Load a configuration file and apply the command-line overrides.

    Parameters are the same as :func:`main`.

    Returns
    -------
    dict
        Complete job configuration
    """
    # Find the configuration file, load it
    cfg_file = resolve_config_path(config, current_dir=os.getcwd())
    cfg = load_config_file(cfg_file)

    # If there is no base block, build one
    if cfg.get("base") is None:
        cfg["base"] = {}

    # Propagate the configuration parent directory to enable relative paths
    cfg["base"]["parent_path"] = str(pathlib.Path(cfg_file).parent)

    # Override the input command-line information into the configuration
    io_mapping = {
        "file_keys": source,
        "list_files": source_list,
        "n_entry": n,
        "n_skip": nskip,
    }
    for io_key, io_value in io_mapping.items():
        if io_value is not None:
            if cfg.get("io") is None or cfg["io"].get("reader") is None:
                if io_key == "n_entry":
                    cfg["base"]["iterations"] = io_value
                    continue
                raise KeyError("Must specify a `reader` in the `io` block.")
            cfg["io"]["reader"][io_key] = io_value

    # Override the output path if provided
    if output is not None:
        if cfg.get("io") is None or cfg["io"].get("writer") is None:
            raise KeyError("Must specify a `writer` in the `io` block.")
        cfg["io"]["writer"]["file_name"] = output

    # Override the logging and histogram paths if provided
    if log_dir is not None:
        cfg["base"]["log_dir"] = log_dir
    if hist_file is not None:
        cfg["base"]["hist_file"] = hist_file

    # Apply any generic config overrides from --set arguments
    for override in config_overrides or []:
        if "=" not in override:
            raise ValueError(
                f"Invalid --set format: '{override}'. "
                f"Expected format: 'key.path=value'"
            )

        key_path, value_str = override.split("=", 1)
        value = parse_value(value_str.strip())
        cfg, _ = set_nested_value(cfg, key_path.strip(), value)

    return cfg


def get_version():
    """Get the release version without importing the event loop."""
    from recoflow.version import __version__

    return __version__


def cli(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="recoflow - event-by-event reconstruction modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  recoflow --version                              Show version information
  recoflow -c config.yaml -s events.h5            Process a file
  recoflow -c config.yaml -S files.list -n 100    Process 100 events of a list
  recoflow -c config.yaml --set base.verbosity=debug
""",
    )

    # Add a version command
    parser.add_argument(
        "--version", "-v", action="version", version=f"recoflow {get_version()}"
    )

    # Add config file argument
    parser.add_argument(
        "-c", "--config", required=True, help="Path to the configuration file"
    )

    # Add mutually exclusive group for source input
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-s", "--source", nargs="+", type=str, help="List of paths to the input files"
    )
    group.add_argument(
        "-S",
        "--source-list",
        help="Path to a text file containing a list of data file paths",
    )

    # Add output argument
    parser.add_argument("-o", "--output", help="Path to the output file")

    # Add entry and skip arguments
    parser.add_argument("-n", "--iterations", type=int, help="Number of events")
    parser.add_argument("--nskip", type=int, help="Number of events to skip")

    # Add logging arguments
    parser.add_argument("--log-dir", help="Path to the directory for the event log")
    parser.add_argument("--hist-file", help="Path to the QA histogram file")

    # Add option to dynamically override any config parameter using dot notation
    parser.add_argument(
        "--set",
        action="append",
        dest="config_overrides",
        metavar="KEY=VALUE",
        help="Override any config parameter using dot notation "
        "(e.g., --set base.iterations=10). "
        "Can be used multiple times for multiple overrides.",
    )

    # If no arguments provided, show help
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return

    args = parser.parse_args(argv)

    main(
        config=args.config,
        source=args.source,
        source_list=args.source_list,
        output=args.output,
        n=args.iterations,
        nskip=args.nskip,
        log_dir=args.log_dir,
        hist_file=args.hist_file,
        config_overrides=args.config_overrides,
    )


if __name__ == "__main__":
    cli()
