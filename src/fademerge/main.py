"""Subcommand dispatcher for fademerge.

Usage:
    fademerge merge  1.mp4 2.mp4 ... --output merged.mp4
    fademerge merge  --manifest merge.yaml --output merged.mp4
    fademerge probe  1.mp4 2.mp4 ... [--thumbnails DIR]
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="fademerge",
        description="Merge video clips with fade-to-black transitions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("merge", help="Merge clips into one MP4 with fades")
    subparsers.add_parser("probe", help="List clips in merge order with durations")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "merge":
        from .merge_cli import main as merge_main
        merge_main(remaining)
    elif parsed.command == "probe":
        from .probe_cli import main as probe_main
        probe_main(remaining)


if __name__ == "__main__":
    main()
