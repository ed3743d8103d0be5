"""Integration tests rendering definitions through the CLI into a fake tmux server."""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from precession.cli.main import main

VALUE_FLAGS = {"-s", "-n", "-c", "-t"}


class FakeTmuxError(Exception):
    """A command the fake server rejects, reported on stderr."""


def parse_args(args):
    """Split tmux command arguments into flags and positionals."""
    opts, positional = {}, []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            positional.extend(args[i + 1 :])
            break
        if arg in VALUE_FLAGS:
            opts[arg] = args[i + 1]
            i += 2
            continue
        if arg.startswith("-") and len(arg) == 2:
            opts[arg] = True
        else:
            positional.append(arg)
        i += 1
    return opts, positional


class FakeTmuxServer:
    """Just enough of tmux's window bookkeeping to check rendered state."""

    def __init__(self, base_index=0):
        self.base_index = base_index
        self.sessions = {}
        self.commands = []
        self.switched_to = None

    def cmd(self, *args):
        self.commands.append(args)
        opts, positional = parse_args(args[1:])
        handler = getattr(self, "_" + args[0].replace("-", "_"))
        result = MagicMock(stdout=[], stderr=[], returncode=0)
        try:
            handler(opts, positional)
        except FakeTmuxError as e:
            result.stderr = [str(e)]
            result.returncode = 1
        return result

    def window_names(self, session):
        windows = self.sessions[session]["windows"]
        return {index: window["name"] for index, window in sorted(windows.items())}

    def _session(self, name):
        if name not in self.sessions:
            raise FakeTmuxError(f"can't find session: {name}")
        return self.sessions[name]

    def _resolve(self, target):
        name, _, index = target.partition(":")
        session = self._session(name)
        index = session["current"] if index == "" else int(index)
        if index not in session["windows"]:
            raise FakeTmuxError(f"can't find window: {index}")
        return session, index

    def _new_window_record(self, name, root):
        return {"name": name, "root": root, "layout": None, "panes": [[]]}

    def _new_session(self, opts, positional):
        name = opts["-s"]
        if name in self.sessions:
            raise FakeTmuxError(f"duplicate session: {name}")
        self.sessions[name] = {
            "base_index": self.base_index,
            "current": self.base_index,
            "windows": {
                self.base_index: self._new_window_record(opts.get("-n"), opts.get("-c"))
            },
        }

    def _set_option(self, opts, positional):
        option, value = positional
        assert option == "base-index"
        self._session(opts["-t"])["base_index"] = int(value)

    def _move_window(self, opts, positional):
        if opts.get("-r"):
            name = opts["-t"].partition(":")[0]
            if name not in self.sessions and self.sessions:
                # tmux resolves a missing session target to another one
                return
            session = self._session(name)
            windows = [session["windows"][i] for i in sorted(session["windows"])]
            session["windows"] = {
                session["base_index"] + offset: window for offset, window in enumerate(windows)
            }
            session["current"] = session["base_index"]
            return

        session, source = self._resolve(opts["-s"])
        destination = int(opts["-t"].partition(":")[2])
        if destination in session["windows"]:
            raise FakeTmuxError(f"index in use: {destination}")
        session["windows"][destination] = session["windows"].pop(source)
        session["current"] = destination

    def _new_window(self, opts, positional):
        name, _, index = opts["-t"].partition(":")
        session = self._session(name)
        index = int(index)
        if index in session["windows"]:
            raise FakeTmuxError(f"create window failed: index {index} in use")
        session["windows"][index] = self._new_window_record(opts.get("-n"), opts.get("-c"))
        session["current"] = index

    def _split_window(self, opts, positional):
        session, index = self._resolve(opts["-t"])
        session["windows"][index]["panes"].append([])

    def _send_keys(self, opts, positional):
        session, index = self._resolve(opts["-t"])
        # Keys land in the active pane, which is the newest split
        active = session["windows"][index]["panes"][-1]
        active.extend(positional)

    def _select_layout(self, opts, positional):
        session, index = self._resolve(opts["-t"])
        session["windows"][index]["layout"] = positional[0]

    def _kill_window(self, opts, positional):
        session, index = self._resolve(opts["-t"])
        del session["windows"][index]
        if not session["windows"]:
            # tmux ends a session with its last window
            del self.sessions[opts["-t"].partition(":")[0]]

    def _switch_client(self, opts, positional):
        self._resolve(opts["-t"])
        self.switched_to = opts["-t"]


DEV_YAML = """\
name: dev
windows:
  - name: edit
    cmd: vim
  - name: run
    panes:
      - npm start
      - npm test
"""


@pytest.fixture(autouse=True)
def _clean_logging(reset_logging):
    yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmux():
    """Route TmuxControl to a fake server and stub the attach subprocess."""
    server = FakeTmuxServer()
    with patch("precession.tmux.control.libtmux.Server", return_value=server), patch(
        "precession.tmux.control.shutil.which", return_value="/usr/bin/tmux"
    ), patch("precession.tmux.control.subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0)
        server.attach_run = mock_run
        yield server


@pytest.fixture
def dev_file(tmp_path):
    path = tmp_path / "dev.yaml"
    path.write_text(DEV_YAML)
    return path


class TestRenderIntegration:
    """End-to-end renders against the fake tmux server."""

    def test_dev_session(self, runner, tmux, dev_file):
        """Test the dev session ends with contiguous windows in declaration order."""
        result = runner.invoke(main, ["start", "-f", str(dev_file)])

        assert result.exit_code == 0, result.output
        assert tmux.commands == [
            ("new-session", "-d", "-s", "dev", "-n", "999"),
            ("set-option", "-t", "dev", "base-index", "1"),
            ("move-window", "-s", "dev:", "-t", "dev:999"),
            ("new-window", "-t", "dev:1", "-n", "edit"),
            ("send-keys", "-t", "dev:1", "-l", "--", "vim"),
            ("send-keys", "-t", "dev:1", "Enter"),
            ("select-layout", "-t", "dev:1", "even-horizontal"),
            ("new-window", "-t", "dev:2", "-n", "run"),
            ("send-keys", "-t", "dev:2", "-l", "--", "npm start"),
            ("send-keys", "-t", "dev:2", "Enter"),
            ("split-window", "-t", "dev:2"),
            ("send-keys", "-t", "dev:2", "-l", "--", "npm test"),
            ("send-keys", "-t", "dev:2", "Enter"),
            ("select-layout", "-t", "dev:2", "even-horizontal"),
            ("kill-window", "-t", "dev:999"),
            ("move-window", "-r", "-t", "dev:"),
        ]
        tmux.attach_run.assert_called_once_with(
            ["/usr/bin/tmux", "attach-session", "-t", "dev:1"], check=False
        )

        assert tmux.window_names("dev") == {1: "edit", 2: "run"}
        windows = tmux.sessions["dev"]["windows"]
        assert windows[1]["panes"] == [["vim", "Enter"]]
        assert windows[2]["panes"] == [["npm start", "Enter"], ["npm test", "Enter"]]
        assert windows[2]["layout"] == "even-horizontal"

    def test_base_index_applied_to_session(self, runner, tmux, dev_file):
        """Test the session renumbers from the configured base, not the server's."""
        tmux.base_index = 0

        result = runner.invoke(main, ["start", "-f", str(dev_file), "--detach"])

        assert result.exit_code == 0, result.output
        assert tmux.window_names("dev") == {1: "edit", 2: "run"}
        assert "tmux attach -t dev:1" in result.output

    def test_zero_base_index(self, runner, tmux, dev_file):
        """Test a zero base index end to end."""
        result = runner.invoke(main, ["--base-index", "0", "start", "-f", str(dev_file)])

        assert result.exit_code == 0, result.output
        assert tmux.window_names("dev") == {0: "edit", 1: "run"}
        tmux.attach_run.assert_called_once_with(
            ["/usr/bin/tmux", "attach-session", "-t", "dev:0"], check=False
        )

    def test_roots(self, runner, tmux, tmp_path):
        """Test session and window roots reach tmux."""
        path = tmp_path / "roots.yaml"
        path.write_text(
            "name: app\n"
            "root: /srv/app\n"
            "windows:\n"
            "  - name: code\n"
            "  - name: docs\n"
            "    root: /srv/docs\n"
            "    panes: [a, b]\n"
        )

        result = runner.invoke(main, ["start", "-f", str(path), "-d"])

        assert result.exit_code == 0, result.output
        assert tmux.commands[0] == (
            "new-session", "-d", "-s", "app", "-n", "999", "-c", "/srv/app"
        )
        assert ("new-window", "-t", "app:1", "-n", "code", "-c", "/srv/app") in tmux.commands
        assert ("split-window", "-t", "app:2", "-c", "/srv/docs") in tmux.commands
        assert tmux.sessions["app"]["windows"][2]["root"] == "/srv/docs"

    def test_many_windows_stay_in_order(self, runner, tmux, tmp_path):
        """Test a larger session keeps declaration order after renumbering."""
        names = [f"w{i}" for i in range(12)]
        path = tmp_path / "many.yaml"
        path.write_text("name: many\nwindows:\n" + "".join(f"  - name: {n}\n" for n in names))

        result = runner.invoke(main, ["start", "-f", str(path), "-d"])

        assert result.exit_code == 0, result.output
        assert list(tmux.window_names("many").values()) == names
        assert list(tmux.window_names("many")) == list(range(1, 13))

    def test_zero_windows_is_an_error(self, runner, tmux, tmp_path):
        """Test an empty session cannot be attached to."""
        path = tmp_path / "empty.yaml"
        path.write_text("name: empty\n")

        result = runner.invoke(main, ["start", "-f", str(path)])

        assert result.exit_code == 1
        assert "Session 'empty' has no windows" in result.output
        assert "empty" not in tmux.sessions
        assert tmux.commands[-1] == ("kill-window", "-t", "empty:999")
        tmux.attach_run.assert_not_called()

    def test_zero_windows_with_other_sessions(self, runner, tmux, tmp_path):
        """Test an empty session fails even while other sessions keep tmux running."""
        tmux.cmd("new-session", "-d", "-s", "other")
        path = tmp_path / "empty.yaml"
        path.write_text("name: empty\n")

        result = runner.invoke(main, ["start", "-f", str(path), "--detach"])

        assert result.exit_code == 1
        assert "has no windows" in result.output
        assert "Started session" not in result.output
        assert list(tmux.sessions) == ["other"]

    def test_duplicate_session(self, runner, tmux, dev_file):
        """Test an existing session name aborts before any window is created."""
        tmux.cmd("new-session", "-d", "-s", "dev")
        tmux.commands.clear()

        result = runner.invoke(main, ["start", "-f", str(dev_file)])

        assert result.exit_code == 1
        assert "duplicate session: dev" in result.output
        assert tmux.commands == [("new-session", "-d", "-s", "dev", "-n", "999")]

    def test_switch_client_inside_tmux(self, runner, tmux, dev_file, monkeypatch):
        """Test rendering from inside tmux switches the client."""
        monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1234,0")

        result = runner.invoke(main, ["start", "-f", str(dev_file)])

        assert result.exit_code == 0, result.output
        assert tmux.switched_to == "dev:1"
        tmux.attach_run.assert_not_called()
