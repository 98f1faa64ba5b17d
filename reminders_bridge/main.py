#!/usr/bin/env python3
"""
reminders-bridge - Asynchronous Apple Reminders access for host applications.

Exposes the reminders facade over a JSON-lines stdio channel and offers a few
direct commands for inspecting and editing lists from a terminal.
"""

import argparse
import logging
import os
import sys

from reminders_bridge.core.config import BACKENDS, load_config, get_default_config_path
from reminders_bridge.core.exceptions import ConfigurationError
from reminders_bridge.utils.macos import set_process_name
from reminders_bridge.commands import (
    StatusCommand,
    ListsCommand,
    RemindersCommand,
    ServeCommand,
)


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _configure_logging(config, verbose: bool, to_file: bool) -> None:
    level = logging.DEBUG if verbose else config.numeric_log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # stdout carries the protocol while serving; keep a log file as well.
    if to_file and config.log_file:
        try:
            os.makedirs(os.path.dirname(config.log_file), exist_ok=True)
            handler = logging.FileHandler(config.log_file, encoding='utf-8')
        except OSError as e:
            logging.getLogger(__name__).warning(f"Cannot open log file {config.log_file}: {e}")
            return
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def main(argv=None):
    """Main entry point for reminders-bridge."""
    set_process_name("reminders-bridge")

    parser = argparse.ArgumentParser(
        description="Asynchronous Apple Reminders bridge",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reminders-bridge status --request          # Ask for Reminders access
  reminders-bridge lists                     # Show reminder lists
  reminders-bridge lists --create Groceries  # Create a list
  reminders-bridge reminders --list ID       # Show reminders in a list
  reminders-bridge serve                     # Serve the JSON-lines channel
        """
    )

    default_config = get_default_config_path()

    parser.add_argument(
        '--config',
        help=f'Path to configuration file (default: {default_config})',
        default=None
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--backend',
        choices=BACKENDS,
        help='Override the configured backing store'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    status_parser = subparsers.add_parser('status', help='Show Reminders permission status')
    status_parser.add_argument(
        '--request',
        action='store_true',
        help='Prompt for access if it has not been decided yet'
    )

    lists_parser = subparsers.add_parser('lists', help='Show or edit reminder lists')
    lists_group = lists_parser.add_mutually_exclusive_group()
    lists_group.add_argument('--create', metavar='TITLE', help='Create a list')
    lists_group.add_argument('--rename', nargs=2, metavar=('ID', 'TITLE'), help='Rename a list')
    lists_group.add_argument('--delete', metavar='ID', help='Delete a list and its reminders')

    reminders_parser = subparsers.add_parser('reminders', help='Show or edit reminders')
    reminders_parser.add_argument('--list', dest='list_id', metavar='ID', help='Reminder list id')
    reminders_action = reminders_parser.add_mutually_exclusive_group()
    reminders_action.add_argument('--add', metavar='TITLE', help='Add a reminder to --list')
    reminders_action.add_argument('--complete', metavar='ID', help='Mark a reminder completed')
    reminders_action.add_argument('--delete', metavar='ID', help='Delete a reminder')
    reminders_parser.add_argument('--due', metavar='YYYY-MM-DD', help='Due date for --add')
    reminders_parser.add_argument(
        '--priority',
        type=int,
        choices=range(10),
        default=0,
        help='Priority for --add (0 = none, 1 = high ... 9 = low)'
    )
    reminders_parser.add_argument('--notes', help='Notes for --add')

    subparsers.add_parser('serve', help='Serve the method channel on stdin/stdout')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.backend:
        config.backend = args.backend

    _configure_logging(config, args.verbose, to_file=args.command == 'serve')

    if args.verbose and args.command != 'serve':
        actual_config_path = args.config if args.config else default_config
        print(f"Using config: {actual_config_path}")

    try:
        if args.command == 'status':
            cmd = StatusCommand(config, verbose=args.verbose)
            success = cmd.run(request=args.request)

        elif args.command == 'lists':
            cmd = ListsCommand(config, verbose=args.verbose)
            success = cmd.run(create=args.create, rename=args.rename, delete=args.delete)

        elif args.command == 'reminders':
            cmd = RemindersCommand(config, verbose=args.verbose)
            success = cmd.run(
                list_id=args.list_id,
                add=args.add,
                due=args.due,
                priority=args.priority,
                notes=args.notes,
                complete=args.complete,
                delete=args.delete,
            )

        elif args.command == 'serve':
            cmd = ServeCommand(config, verbose=args.verbose)
            success = cmd.run()

        else:
            print(f"Unknown command '{args.command}'.")
            return 1

        return 0 if success else 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if not args.verbose:
            print("Re-run with --verbose for more detail.", file=sys.stderr)
        else:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
