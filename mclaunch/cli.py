import argparse
import atexit
import shlex
import signal
import sys
from dataclasses import replace
from typing import List, Optional

from .validation import (
    validate_jar_filename,
    validate_server_jar,
)
from .core.config import ConfigManager, LauncherConfig, get_config
from .core.error_handling import ErrorHandler
from .core.exceptions import LauncherError, NotFoundError
from .core.exit_codes import ExitCode, ExitCodeManager
from .core.logging_config import get_logger, setup_logging
from .core.user_feedback import UserFeedback
from .server.launcher import ServerLauncher
from .settings.editor import ConsoleInput, InputSource, SettingsEditor
from .settings.store import SettingsStore

# Global reference to the running launcher for signal handler cleanup
_launcher: Optional[ServerLauncher] = None

logger = get_logger("cli")


def _cleanup_on_exit() -> None:
    """Stop the server process if we are going away while it runs."""
    if _launcher:
        try:
            _launcher.shutdown()
        except OSError as e:
            print(f"⚠️  Error while stopping the server: {e}", file=sys.stderr)


def _signal_handler(signum: int, frame) -> None:
    """Handle termination signals by stopping the server first."""
    signal_name = signal.Signals(signum).name
    print(f"\n🛑 Received {signal_name}, stopping the server...", file=sys.stderr)

    _cleanup_on_exit()

    sys.exit(128 + signum)


def _setup_signal_handlers() -> None:
    """Setup signal handlers for graceful shutdown.

    SIGINT stays a KeyboardInterrupt so that prompts and the relay can react
    to it themselves.
    """
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            signal.signal(signum, _signal_handler)
        except (ValueError, OSError):
            # Not on the main thread, or not supported on this platform
            pass
    atexit.register(_cleanup_on_exit)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mclaunch",
        description="Edit Minecraft server launch settings, then run the server "
        "with its console attached to this terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mclaunch server.jar
  mclaunch paper-1.21.jar ~/servers/survival
  mclaunch --skip-editor server.jar /srv/minecraft
        """,
    )

    parser.add_argument(
        "jar_filename",
        type=str,
        nargs="?",
        help="Server jar, relative to the server directory",
    )

    parser.add_argument(
        "server_directory",
        type=str,
        nargs="?",
        help="Server directory (default: ~/.minecraft/server, "
        "or %%APPDATA%%\\.minecraft\\server on Windows)",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="Path to a TOML configuration file",
    )

    parser.add_argument(
        "--create-config",
        type=str,
        help="Create a default configuration file at the specified path and exit",
    )

    parser.add_argument(
        "--skip-editor",
        action="store_true",
        help="Start with the stored settings without prompting",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the server command instead of saving settings and starting it",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only show prompts, warnings and errors",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: from config, INFO)",
    )

    parser.add_argument("--log-file", type=str, help="Write logs to file")

    return parser


def run_launcher(
    args: argparse.Namespace,
    config: LauncherConfig,
    feedback: UserFeedback,
    input_source: Optional[InputSource] = None,
    launcher: Optional[ServerLauncher] = None,
    store: Optional[SettingsStore] = None,
) -> int:
    """Load and edit the settings, save them, then run the server."""
    global _launcher

    source = input_source or ConsoleInput()
    feedback.input_func = source.read
    launcher = launcher or ServerLauncher(java=config.java)
    error_handler = ErrorHandler()
    exit_codes = ExitCodeManager()

    try:
        store = store or SettingsStore(
            filename=config.settings.filename, encoding=config.settings.encoding
        )
        directory = launcher.resolve_directory(
            args.server_directory or config.server_directory
        )
        jar_ok, jar_errors = validate_server_jar(directory, args.jar_filename)
        if not jar_ok:
            raise NotFoundError(
                jar_errors[0], path=str(directory / args.jar_filename)
            )

        if args.verbose:
            feedback.debug(f"Server directory: {directory}")
            feedback.debug(f"Server jar: {args.jar_filename}")

        settings = store.load(directory)
        if settings.created:
            feedback.info(f"No {store.filename} found, starting from defaults")

        if not args.skip_editor:
            editor = SettingsEditor(store, source, feedback)
            result = editor.run(settings)
            if result.aborted:
                feedback.info("Server not started")
                return ExitCode.SUCCESS

            if result.has_changes:
                feedback.show_summary(
                    "Changes", [change.describe() for change in result.changes]
                )
                question = (
                    "Print the server command with these changes? (nothing is saved)"
                    if args.dry_run
                    else "Save these changes and start the server?"
                )
                if not feedback.confirm(question, default=True):
                    feedback.info("Changes discarded, server not started")
                    return ExitCode.SUCCESS

        if args.dry_run:
            spec = launcher.resolve(
                args.jar_filename, directory, store.launch_values(settings)
            )
            print(shlex.join(spec.argv))
            return ExitCode.SUCCESS

        if settings.created or settings.dirty:
            store.save(settings, directory)

        spec = launcher.resolve(
            args.jar_filename, directory, store.launch_values(settings)
        )

        _launcher = launcher
        exit_code = launcher.launch(spec)

        if exit_code == 0:
            feedback.success("Server stopped")
        else:
            feedback.error(exit_codes.describe_process_exit(exit_code))
        return exit_code

    except LauncherError as e:
        feedback.display_error_info(error_handler.handle_error(e, e.category))
        return exit_codes.get_exit_code_for_error(
            e.category, e.severity, str(e), e.context
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        feedback.warning("Interrupted")
        return ExitCode.INTERRUPTED
    finally:
        _launcher = None


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    feedback = UserFeedback(verbose=args.verbose, quiet=args.quiet)

    if args.create_config:
        try:
            ConfigManager().save_config_template(args.create_config)
            print(f"✅ Configuration template created: {args.create_config}")
            return ExitCode.SUCCESS
        except OSError as e:
            print(f"❌ Failed to create config file: {e}")
            return ExitCode.CONFIGURATION_ERROR

    if not args.jar_filename:
        parser.print_usage(sys.stderr)
        feedback.error("A server jar filename is required")
        return ExitCode.INVALID_ARGUMENTS

    jar_ok, jar_errors = validate_jar_filename(args.jar_filename)
    if not jar_ok:
        for error in jar_errors:
            feedback.error(error)
        return ExitCode.INVALID_ARGUMENTS

    try:
        config = get_config(args.config)
    except LauncherError as e:
        feedback.display_error_info(ErrorHandler().handle_error(e, e.category))
        return ExitCodeManager().get_exit_code_for_error(
            e.category, e.severity, str(e), e.context
        )

    log_level = "DEBUG" if args.verbose else (args.log_level or config.logging.level)
    logging_config = replace(
        config.logging,
        level=log_level,
        file_path=args.log_file or config.logging.file_path,
    )
    setup_logging(logging_config)

    _setup_signal_handlers()

    return run_launcher(args, config, feedback, ConsoleInput())


if __name__ == "__main__":
    sys.exit(main())
