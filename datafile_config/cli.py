"""
Datafile Inspector - Command Line Interface

Validates a datafile and prints what it contains. Designed for both
interactive use and CI/CD pipelines: the exit code is 0 for a datafile this
package can load and 1 otherwise.

Usage:
    datafile-config path/to/datafile.json
    datafile-config path/to/datafile.json --list-experiments --list-features
    datafile-config --bundled example_datafile.json --experiment checkout_button_test
    datafile-config --help
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .errors import DatafileConfigError
from .loader import (
    get_package_version,
    list_bundled_datafiles,
    load_bundled_project_config,
    load_project_config,
)
from .project_config import DatafileProjectConfig


def setup_argument_parser() -> argparse.ArgumentParser:
    """Set up command line argument parsing"""
    parser = argparse.ArgumentParser(
        prog="datafile-config",
        description="Validate and inspect experimentation datafiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Validate a datafile and print a summary
    datafile-config datafile.json

    # List experiments (grouped ones included) and feature flags
    datafile-config datafile.json --list-experiments --list-features

    # Show one experiment and its variations
    datafile-config datafile.json --experiment checkout_button_test

    # Inspect a datafile bundled with the package
    datafile-config --bundled example_datafile.json

    # Save the summary to a JSON file
    datafile-config datafile.json --output summary.json
        """,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="Path to the datafile to inspect",
    )

    parser.add_argument(
        "--bundled",
        metavar="NAME",
        help="Inspect a datafile bundled with the package instead of a path",
    )

    parser.add_argument(
        "--list-bundled",
        action="store_true",
        help="List the datafiles bundled with the package and exit",
    )

    parser.add_argument(
        "--list-experiments",
        action="store_true",
        help="List every experiment, including grouped experiments",
    )

    parser.add_argument(
        "--list-features",
        action="store_true",
        help="List every feature flag with its experiments",
    )

    parser.add_argument(
        "--experiment",
        metavar="KEY",
        help="Show details for one experiment key",
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Save the summary to a JSON file",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output",
    )

    return parser


def build_summary(config: DatafileProjectConfig) -> Dict[str, Any]:
    """Machine-readable summary of a loaded datafile"""
    return {
        "package_version": get_package_version(),
        "datafile": {
            "version": config.version,
            "revision": config.revision,
            "account_id": config.account_id,
            "project_id": config.project_id,
            "environment_key": config.environment_key,
        },
        "counts": {
            "groups": len(config.group_id_map),
            "experiments": len(config.experiment_id_map),
            "events": len(config.event_key_map),
            "attributes": len(config.attribute_key_map),
            "audiences": len(config.audience_id_map),
            "feature_flags": len(config.feature_key_map),
            "rollouts": len(config.rollout_id_map),
        },
        "experiments": sorted(config.experiment_key_map),
        "feature_flags": {
            key: list(feature.experiment_ids)
            for key, feature in sorted(config.feature_key_map.items())
        },
    }


def format_summary(summary: Dict[str, Any]) -> List[str]:
    """Format a summary for human-readable output"""
    datafile = summary["datafile"]
    lines = [
        "=" * 60,
        "DATAFILE SUMMARY",
        "=" * 60,
        f"Version: {datafile['version']}",
        f"Revision: {datafile['revision']}",
        f"Project: {datafile['project_id'] or '<unknown>'}",
        "",
        "Entities:",
    ]
    for kind, count in summary["counts"].items():
        lines.append(f"   {kind}: {count}")
    return lines


def format_experiment(config: DatafileProjectConfig, experiment_key: str) -> List[str]:
    experiment = config.get_experiment_from_key(experiment_key)
    if not experiment.id:
        return [f"Experiment '{experiment_key}' not found"]

    lines = [
        f"Experiment: {experiment.key} (id {experiment.id})",
        f"   Status: {experiment.status or '<none>'}",
    ]
    if experiment.is_in_group:
        lines.append(f"   Group: {experiment.group_id} (policy {experiment.group_policy})")

    features = config.get_experiment_feature_list(experiment.id)
    if features is not None:
        lines.append(f"   Features: {', '.join(features)}")

    lines.append("   Variations:")
    for variation in experiment.variations:
        lines.append(f"      • {variation.key} (id {variation.id})")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.list_bundled:
        datafiles = list_bundled_datafiles()
        print("Bundled datafiles:")
        for name in datafiles:
            print(f"   • {name}")
        return 0

    if not args.path and not args.bundled:
        print("Error: a datafile path or --bundled NAME is required")
        parser.print_help()
        return 1

    try:
        if args.bundled:
            config = load_bundled_project_config(args.bundled)
        else:
            config = load_project_config(args.path)
    except DatafileConfigError as e:
        print(f"Invalid datafile: {e}")
        return 1

    summary = build_summary(config)
    print("\n".join(format_summary(summary)))

    if args.list_experiments:
        print("\nExperiments:")
        for key in summary["experiments"]:
            print(f"   • {key}")

    if args.list_features:
        print("\nFeature flags:")
        for key, experiment_ids in summary["feature_flags"].items():
            print(f"   • {key}: {', '.join(experiment_ids) or '<no experiments>'}")

    if args.experiment:
        print()
        print("\n".join(format_experiment(config, args.experiment)))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
        print(f"\nSummary saved to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
