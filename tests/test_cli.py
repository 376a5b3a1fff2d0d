import json
import sys
from unittest.mock import MagicMock, patch

import pytest

from ssh_kitchen.cli import main
from ssh_kitchen.driver.errors import InstanceFailure, UserError
from ssh_kitchen.driver.ssh.login_command import LoginCommand


def _stdout_json(mock_stdout):
    output = "".join(call.args[0] for call in mock_stdout.call_args_list)
    return json.loads(output)


def test_cli_action_success():
    instance = MagicMock()
    instance.converge.return_value = 1.5

    with patch("ssh_kitchen.cli.load_project_config", return_value={"driver": {"name": "proxy"}}) as load_config, \
         patch("ssh_kitchen.cli.build_instance", return_value=instance) as build, \
         patch("sys.stdout.write") as mock_stdout, \
         patch("sys.stderr.write"), \
         patch("sys.exit") as mock_exit:

        sys.argv = ["cli.py", "converge", "--config", "kitchen.yml", "--instance", "web", "--state-dir", "/tmp/state"]
        main()

        load_config.assert_called_once_with("kitchen.yml")
        build.assert_called_once_with({"driver": {"name": "proxy"}}, "web", "/tmp/state")
        assert _stdout_json(mock_stdout) == {
            "instance": "web",
            "action": "converge",
            "status": "success",
            "duration_seconds": 1.5,
        }
        mock_exit.assert_called_once_with(0)


def test_cli_action_failure_reports_error():
    instance = MagicMock()
    instance.verify.side_effect = InstanceFailure("could not complete verify on default: SSH exited (1) for command: [rspec]")

    with patch("ssh_kitchen.cli.load_project_config", return_value={}), \
         patch("ssh_kitchen.cli.build_instance", return_value=instance), \
         patch("sys.stdout.write") as mock_stdout, \
         patch("sys.stderr.write"), \
         patch("sys.exit") as mock_exit:

        sys.argv = ["cli.py", "verify"]
        main()

        result = _stdout_json(mock_stdout)
        assert result["status"] == "failure"
        assert result["instance"] == "default"
        assert "SSH exited (1)" in result["error"]
        mock_exit.assert_called_once_with(1)


def test_cli_config_error_is_a_failure():
    with patch("ssh_kitchen.cli.load_project_config", side_effect=UserError("Config file not found: kitchen.yml")), \
         patch("sys.stdout.write") as mock_stdout, \
         patch("sys.stderr.write"), \
         patch("sys.exit") as mock_exit:

        sys.argv = ["cli.py", "create"]
        main()

        assert _stdout_json(mock_stdout)["error"] == "Config file not found: kitchen.yml"
        mock_exit.assert_called_once_with(1)


def test_cli_exec_passes_command():
    instance = MagicMock()
    instance.remote_exec.return_value = 0.25

    with patch("ssh_kitchen.cli.load_project_config", return_value={}), \
         patch("ssh_kitchen.cli.build_instance", return_value=instance), \
         patch("sys.stdout.write") as mock_stdout, \
         patch("sys.exit") as mock_exit:

        sys.argv = ["cli.py", "exec", "-c", "uptime"]
        main()

        instance.remote_exec.assert_called_once_with("uptime")
        assert _stdout_json(mock_stdout)["action"] == "exec"
        mock_exit.assert_called_once_with(0)


def test_cli_login_replaces_process_with_ssh():
    instance = MagicMock()
    instance.login.return_value = LoginCommand(argv=["ssh", "-p", "22", "vagrant@box.local"])

    with patch("ssh_kitchen.cli.load_project_config", return_value={}), \
         patch("ssh_kitchen.cli.build_instance", return_value=instance), \
         patch("ssh_kitchen.cli.os.execvp") as execvp:

        sys.argv = ["cli.py", "login", "--instance", "web"]
        main()

        execvp.assert_called_once_with("ssh", ["ssh", "-p", "22", "vagrant@box.local"])


def test_cli_login_failure_exits_non_zero():
    with patch("ssh_kitchen.cli.load_project_config", side_effect=UserError("bad config")), \
         patch("ssh_kitchen.cli.os.execvp") as execvp, \
         patch("sys.stderr.write"):

        sys.argv = ["cli.py", "login"]
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
    execvp.assert_not_called()


def test_cli_exec_requires_command():
    with patch("sys.stderr.write"):
        sys.argv = ["cli.py", "exec"]
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 2
