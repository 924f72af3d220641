#!/usr/bin/env python3
"""Main Entry Point and CLI Integration.

Diagnostic command line over a catalog snapshot file. It loads
configuration, reads the snapshot, builds the dependency manager and prints
the requested view: validation, ordering, availability, suggestions, the
dependency tree, a module's path, a graph visualization or a full report.
"""

import argparse
import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.catalog.snapshot import CatalogSnapshot
from src.config import AppConfig, get_config
from src.graph.manager import ModuleDependencyManager
from src.graph.report import generate_dependency_report
from src.graph.tree import format_dependency_tree
from src.log_config import configure_logging, logging_context

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_GRAPH = 2

COMMANDS = ("validate", "order", "available", "suggest", "tree", "path", "graph", "report")


def _module_lines(modules) -> list[str]:
    return [f"{module.id}\t{module.code}\t{module.display_name}" for module in modules]


def run_command(
    args: argparse.Namespace,
    snapshot: CatalogSnapshot,
    config: AppConfig,
) -> tuple[int, str]:
    """Execute one command against a snapshot.

    Args:
        args: Parsed command-line arguments
        snapshot: Loaded catalog snapshot
        config: Application configuration

    Returns:
        Tuple of (exit code, text to print)
    """
    manager = ModuleDependencyManager(snapshot.modules, snapshot.dependencies, config)
    completed = snapshot.completed | set(args.completed)
    in_progress = snapshot.in_progress | set(args.in_progress)

    if args.command == "validate":
        result = manager.validate_dependencies()
        output = json.dumps(result.to_dict(), indent=2) if args.json else result.summary()
        return (EXIT_OK if result.is_valid else EXIT_INVALID_GRAPH), output

    if args.command == "order":
        ordering = manager.get_topological_order()
        if not ordering.is_ordered:
            lines = ["No order available:"]
            lines.extend(f"  - {error.message}" for error in ordering.errors)
            return EXIT_INVALID_GRAPH, "\n".join(lines)
        return EXIT_OK, "\n".join(_module_lines(ordering.ordered_modules))

    if args.command == "available":
        return EXIT_OK, "\n".join(_module_lines(manager.get_available_modules(completed)))

    if args.command == "suggest":
        suggestions = manager.suggest_next_modules(completed, in_progress, args.max)
        return EXIT_OK, "\n".join(_module_lines(suggestions))

    if args.command == "tree":
        return EXIT_OK, format_dependency_tree(manager.build_dependency_tree(completed)).rstrip("\n")

    if args.command == "path":
        if not args.module:
            msg = "The path command requires --module"
            raise ValueError(msg)
        path = manager.build_dependency_tree(completed).path_to(args.module)
        return EXIT_OK, " -> ".join(path)

    if args.command == "graph":
        return EXIT_OK, manager.generate_visualization(args.format)

    return EXIT_OK, generate_dependency_report(manager, completed, in_progress).rstrip("\n")


def main_cli(args: argparse.Namespace) -> int:
    """Load configuration and snapshot, then run the command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure, 2 for an invalid graph)
    """
    # Set up logging first so config loading already logs to stderr
    configure_logging(args.log_level or "INFO")

    with logging_context(snapshot=args.snapshot, command=args.command):
        try:
            config = get_config(args.config, reload=True)
            if args.log_level:
                config.logging.level = args.log_level
            configure_logging(config.logging.level, json_logs=config.logging.json_logs)

            for warning in config.validate_config():
                logger.warning("configuration_warning", message=warning)

            snapshot = CatalogSnapshot.from_file(args.snapshot)
            exit_code, output = run_command(args, snapshot, config)

        except FileNotFoundError as e:
            logger.exception("file_not_found", error=str(e))
            return EXIT_FAILURE

        except ValidationError as e:
            logger.exception("snapshot_or_config_invalid", error=str(e))
            return EXIT_FAILURE

        except ValueError as e:
            logger.exception("invalid_input", error=str(e))
            return EXIT_FAILURE

    if output:
        print(output)
    return exit_code


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Module dependency graph diagnostics - validate, order and schedule modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate a strategy snapshot
  python main.py strategy.yaml validate

  # Prerequisite-first execution order
  python main.py strategy.yaml order

  # What can be started once m1 and m2 are done
  python main.py strategy.yaml available --completed m1 m2

  # Mermaid diagram
  python main.py strategy.yaml graph --format mermaid
        """,
    )

    parser.add_argument("snapshot", type=str, help="Path to snapshot YAML/JSON file")
    parser.add_argument("command", choices=COMMANDS, help="What to compute")

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to configuration YAML file (default: modgraph.yaml if present)",
    )
    parser.add_argument(
        "--completed",
        nargs="*",
        default=[],
        help="Additional completed module IDs",
    )
    parser.add_argument(
        "--in-progress",
        nargs="*",
        default=[],
        help="Additional in-progress module IDs",
    )
    parser.add_argument(
        "--max",
        type=int,
        default=None,
        help="Maximum suggestions (default: engine.max_suggestions)",
    )
    parser.add_argument(
        "--format",
        choices=["mermaid", "dot"],
        default=None,
        help="Visualization format for the graph command",
    )
    parser.add_argument("--module", type=str, default=None, help="Module ID for the path command")
    parser.add_argument("--json", action="store_true", help="Emit validation results as JSON")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override the configured logging level",
    )

    return parser.parse_args(argv)


def main() -> None:
    """Main entry point."""
    args = parse_args()

    if not Path(args.snapshot).exists():
        print(f"Snapshot file not found: {args.snapshot}", file=sys.stderr)
        sys.exit(EXIT_FAILURE)

    sys.exit(main_cli(args))


if __name__ == "__main__":
    main()
