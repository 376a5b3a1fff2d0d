import argparse
import json
import os
import sys

from ssh_kitchen.driver.errors import KitchenError
from ssh_kitchen.driver.factory import load_project_config
from ssh_kitchen.lifecycle.instance import build_instance

_ACTIONS = ("create", "converge", "setup", "verify", "destroy", "test")


def _load_instance(args):
    project_config = load_project_config(args.config)
    return build_instance(project_config, args.instance, args.state_dir)


def _report(result: dict) -> None:
    print(json.dumps(result))
    sys.exit(0 if result["status"] == "success" else 1)


def cmd_action(args):
    """Handle create/converge/setup/verify/destroy/test subcommands."""
    try:
        instance = _load_instance(args)
        duration = getattr(instance, args.command)()
    except KitchenError as e:
        print(f"{args.command.capitalize()} failed: {e}", file=sys.stderr)
        _report({"instance": args.instance, "action": args.command, "status": "failure", "error": str(e)})
    else:
        print(f"Finished {args.command} on {args.instance}.", file=sys.stderr)
        _report({"instance": args.instance, "action": args.command, "status": "success", "duration_seconds": duration})


def cmd_exec(args):
    """Handle exec subcommand."""
    try:
        instance = _load_instance(args)
        duration = instance.remote_exec(args.command_string)
    except KitchenError as e:
        print(f"Exec failed: {e}", file=sys.stderr)
        _report({"instance": args.instance, "action": "exec", "status": "failure", "error": str(e)})
    else:
        _report({"instance": args.instance, "action": "exec", "status": "success", "duration_seconds": duration})


def cmd_login(args):
    """Handle login subcommand by replacing this process with an interactive ssh session."""
    try:
        login_command = _load_instance(args).login()
    except KitchenError as e:
        print(f"Login failed: {e}", file=sys.stderr)
        sys.exit(1)
    else:
        os.execvp(login_command.program, login_command.argv)


def _add_common_arguments(parser):
    parser.add_argument("--config", default="kitchen.yml", help="Path to project JSON/YAML config (default: kitchen.yml)")
    parser.add_argument("--instance", default="default", help="Instance name (default: default)")
    parser.add_argument("--state-dir", default=".kitchen", help="Directory holding instance state files (default: .kitchen)")


def main():
    parser = argparse.ArgumentParser(description="Provision and test instances over SSH")
    subparsers = parser.add_subparsers(dest="command", help="Subcommand to run")

    for action in _ACTIONS:
        action_parser = subparsers.add_parser(action, help=f"Run the {action} action on an instance")
        _add_common_arguments(action_parser)

    exec_parser = subparsers.add_parser("exec", help="Execute a command on an instance")
    _add_common_arguments(exec_parser)
    exec_parser.add_argument("-c", "--command", dest="command_string", required=True, help="Command to execute")

    login_parser = subparsers.add_parser("login", help="Log in to an instance")
    _add_common_arguments(login_parser)

    args = parser.parse_args()

    if args.command in _ACTIONS:
        cmd_action(args)
    elif args.command == "exec":
        cmd_exec(args)
    elif args.command == "login":
        cmd_login(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
