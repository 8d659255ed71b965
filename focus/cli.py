#!/usr/bin/python3
import argparse
import sys
from datetime import datetime

from focus import daemon, schedule
from focus.display import DisplayController, XrandrDisplay
from focus.errors import ExternalCommandError, FileAccessError, FocusError, PersistenceError
from focus.hosts import HostsFile
from focus.rules import Configuration, format_time
from focus.settings import Settings
from focus.store import load_config, save_config


def format_time_remaining(seconds):
    """Format seconds into human-readable time."""
    if seconds < 60:
        return f"{int(seconds)} seconds"
    minutes = int(seconds / 60)
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours = int(minutes / 60)
    minutes = minutes % 60
    if minutes > 0:
        return f"{hours} hour{'s' if hours != 1 else ''} {minutes} minute{'s' if minutes != 1 else ''}"
    return f"{hours} hour{'s' if hours != 1 else ''}"


def fail(message):
    print(f"Error: {message}")
    sys.exit(1)


def load_rules(settings: Settings) -> Configuration:
    try:
        return load_config(settings.config_path)
    except PersistenceError as e:
        fail(e)


def save_rules(settings: Settings, config: Configuration):
    try:
        save_config(config, settings.config_path)
    except PersistenceError as e:
        fail(e)


def sync_hosts(settings: Settings, config: Configuration):
    """Apply the new rules right away instead of waiting for the daemon."""
    blocked = schedule.compute_blocked_domains(config.rules, datetime.now())
    try:
        HostsFile(settings.hosts_path).apply(blocked)
    except FileAccessError as e:
        print(f"Warning: {e}")


def make_display(settings: Settings):
    if not settings.display_enabled:
        return None
    return DisplayController(XrandrDisplay(settings.display_command, settings.display_env))


def apply_display(settings: Settings, enabled: bool):
    controller = make_display(settings)
    if controller is None:
        return
    try:
        controller.force(enabled)
    except ExternalCommandError as e:
        print(f"Warning: {e}")


def cmd_add(settings: Settings, args):
    """Add a block window for a domain."""
    config = load_rules(settings)
    try:
        rule = schedule.add_rule(config, args.domain, args.start, args.end)
    except FocusError as e:
        fail(e)

    save_rules(settings, config)
    print(f"Rule added: {rule.domain} ({format_time(rule.start_time)}-{format_time(rule.end_time)})")
    sync_hosts(settings, config)


def cmd_remove(settings: Settings, args):
    """Remove every rule for a domain."""
    config = load_rules(settings)
    try:
        removed = schedule.remove_rules(config, args.domain)
    except FocusError as e:
        fail(e)

    save_rules(settings, config)
    print(f"Removed {removed[0].domain} ({len(removed)} rule(s))")
    sync_hosts(settings, config)


def cmd_exception(settings: Settings, args):
    """Grant a temporary exception or change the daily limit."""
    config = load_rules(settings)

    if args.action == 'set-limit':
        try:
            schedule.set_exception_limit(config, args.limit)
        except FocusError as e:
            fail(e)
        save_rules(settings, config)
        print(f"Daily exception limit set to {args.limit}")
        return

    now = datetime.now()
    try:
        remaining = schedule.consume_exception(config, args.domain, args.minutes, now)
    except FocusError as e:
        fail(e)

    save_rules(settings, config)
    print(f"Exception granted for {format_time_remaining(args.minutes * 60)}")
    print(f"Exceptions left today: {remaining}")
    sync_hosts(settings, config)


def cmd_display(settings: Settings, args):
    """Control grayscale mode."""
    config = load_rules(settings)

    if args.action == 'on':
        schedule.set_manual_display(config, True)
        save_rules(settings, config)
        print("Grayscale mode on")
        apply_display(settings, True)
    elif args.action == 'off':
        schedule.set_manual_display(config, False)
        save_rules(settings, config)
        print("Grayscale mode off")
        # A scheduled window keeps the screen gray; the daemon agrees with this
        target = schedule.compute_display_target(config, datetime.now())
        if target:
            print("A grayscale time rule is active, screen stays gray until it ends")
        apply_display(settings, target)
    elif args.action == 'rule':
        try:
            rule = schedule.add_display_rule(config, args.start, args.end)
        except FocusError as e:
            fail(e)
        save_rules(settings, config)
        print(f"Grayscale window added: {format_time(rule.start_time)} - {format_time(rule.end_time)}")
    elif args.action == 'clear':
        schedule.clear_display_rules(config)
        save_rules(settings, config)
        print("All grayscale rules cleared")
        apply_display(settings, False)


def cmd_list(settings: Settings, args):
    """Show rules and exception status."""
    config = load_rules(settings)
    now = datetime.now()

    print("BLOCK RULES:")
    if not config.rules:
        print("  No rules yet")
    else:
        print(f"  {'DOMAIN':<24} {'START':<6} {'END':<6} EXCEPTION")
        for rule in config.rules:
            expiry = schedule.active_exception(rule, now)
            exception = f"until {expiry.strftime('%H:%M:%S')}" if expiry else "-"
            print(f"  {rule.domain:<24} {format_time(rule.start_time):<6} "
                  f"{format_time(rule.end_time):<6} {exception}")

    blocked = schedule.compute_blocked_domains(config.rules, now)
    if blocked:
        print(f"\nCurrently blocked: {', '.join(blocked)}")

    print(f"\nExceptions left today: {schedule.remaining_exceptions(config, now)}"
          f" of {config.exception_daily_limit}")

    print("\nGRAYSCALE:")
    if config.manual_display_override:
        print("  Manual mode: on")
    if not config.display_rules:
        print("  No time rules")
    for rule in config.display_rules:
        state = "" if rule.enabled else " (disabled)"
        print(f"  {format_time(rule.start_time)} - {format_time(rule.end_time)}{state}")


def cmd_daemon(settings: Settings, args):
    daemon.main(settings.path)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Focus - block distracting sites and go grayscale on a schedule",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sudo focus add youtube 09:00 17:00          # Block youtube.com during work hours
  sudo focus add reddit 22:00 06:00           # Windows may wrap past midnight
  sudo focus exception allow youtube 15       # Unblock for 15 minutes
  sudo focus exception set-limit 3            # Allow 3 exceptions per day
  sudo focus display rule 21:00 07:00         # Grayscale every night
  sudo focus list                             # Show rules
"""
    )
    parser.add_argument('--settings', help='Path to settings file')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    parser_add = subparsers.add_parser('add', aliases=['a'], help='Add a block window for a domain')
    parser_add.add_argument('domain', help='Domain to block (youtube means youtube.com)')
    parser_add.add_argument('start', help='Start time, HH:MM')
    parser_add.add_argument('end', help='End time, HH:MM')
    parser_add.set_defaults(handler=cmd_add)

    parser_remove = subparsers.add_parser('remove', aliases=['rm', 'r'], help='Remove all rules for a domain')
    parser_remove.add_argument('domain')
    parser_remove.set_defaults(handler=cmd_remove)

    parser_exception = subparsers.add_parser('exception', aliases=['exc', 'e'], help='Temporary exceptions')
    exception_actions = parser_exception.add_subparsers(dest='action', required=True)
    parser_allow = exception_actions.add_parser('allow', aliases=['a'], help='Unblock a domain for a while')
    parser_allow.add_argument('domain')
    parser_allow.add_argument('minutes', type=int)
    parser_allow.set_defaults(action='allow')
    parser_limit = exception_actions.add_parser('set-limit', help='Set the daily exception limit')
    parser_limit.add_argument('limit', type=int)
    parser_exception.set_defaults(handler=cmd_exception)

    parser_display = subparsers.add_parser('display', aliases=['bw'], help='Grayscale mode')
    display_actions = parser_display.add_subparsers(dest='action', required=True)
    display_actions.add_parser('on', help='Turn grayscale on until turned off')
    display_actions.add_parser('off', help='Turn manual grayscale off')
    parser_rule = display_actions.add_parser('rule', help='Grayscale between two times every day')
    parser_rule.add_argument('start')
    parser_rule.add_argument('end')
    display_actions.add_parser('clear', help='Remove all grayscale rules and manual mode')
    parser_display.set_defaults(handler=cmd_display)

    parser_list = subparsers.add_parser('list', aliases=['ls'], help='Show rules')
    parser_list.set_defaults(handler=cmd_list)

    parser_daemon = subparsers.add_parser('daemon', help='Run the enforcement loop')
    parser_daemon.set_defaults(handler=cmd_daemon)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        settings = Settings(args.settings)
    except (FileNotFoundError, FocusError) as e:
        fail(e)

    args.handler(settings, args)


if __name__ == '__main__':
    main()
