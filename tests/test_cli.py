import signal
from io import StringIO
from unittest.mock import Mock, patch

import pytest

import mclaunch.cli as cli
from mclaunch.cli import create_parser, main, run_launcher
from mclaunch.core.config import LauncherConfig
from mclaunch.core.exit_codes import ExitCode
from mclaunch.core.user_feedback import UserFeedback
from mclaunch.settings.editor import ScriptedInput

ALL_KEEP = [""] * 11


def parse(*argv):
    return create_parser().parse_args(list(argv))


def run(args, server_launcher, responses=ALL_KEEP):
    return run_launcher(
        args,
        LauncherConfig(),
        UserFeedback(),
        input_source=ScriptedInput(responses),
        launcher=server_launcher,
    )


class TestCreateParser:
    def test_parser_creation(self):
        parser = create_parser()
        assert parser.prog == "mclaunch"

    def test_positional_arguments(self):
        args = parse("server.jar", "/srv/minecraft")

        assert args.jar_filename == "server.jar"
        assert args.server_directory == "/srv/minecraft"
        assert args.skip_editor is False
        assert args.dry_run is False
        assert args.verbose is False
        assert args.log_level is None

    def test_directory_is_optional(self):
        args = parse("server.jar")

        assert args.server_directory is None

    def test_optional_flags(self):
        args = parse(
            "--skip-editor",
            "--dry-run",
            "-v",
            "--config",
            "mclaunch.toml",
            "--log-level",
            "DEBUG",
            "server.jar",
        )

        assert args.skip_editor is True
        assert args.dry_run is True
        assert args.verbose is True
        assert args.quiet is False
        assert args.config == "mclaunch.toml"
        assert args.log_level == "DEBUG"

    def test_parser_help_output(self):
        parser = create_parser()

        with patch("sys.stdout", new=StringIO()) as fake_out:
            with pytest.raises(SystemExit) as exc_info:
                parser.parse_args(["--help"])

            help_output = fake_out.getvalue()

        assert exc_info.value.code == 0
        assert "jar_filename" in help_output
        assert "--skip-editor" in help_output


class TestRunLauncher:
    """Test the load, edit, save and launch sequence."""

    def test_unchanged_settings_are_not_rewritten(
        self, fake_launcher, fake_spawn, server_dir
    ):
        settings_path = server_dir / "settings.txt"
        settings_path.write_bytes(b"difficulty=easy\n")

        exit_code = run(parse("server.jar", str(server_dir)), fake_launcher)

        assert exit_code == 0
        assert settings_path.read_bytes() == b"difficulty=easy\n"
        argv = fake_spawn.call_args.args[0]
        assert "server.jar" in argv
        assert fake_spawn.call_args.kwargs["cwd"] == str(server_dir.resolve())

    def test_missing_settings_file_is_created(
        self, fake_launcher, fake_spawn, server_dir
    ):
        exit_code = run(parse("server.jar", str(server_dir)), fake_launcher)

        assert exit_code == 0
        content = (server_dir / "settings.txt").read_text()
        assert "bonusChest=true\n" in content
        argv = fake_spawn.call_args.args[0]
        assert argv[-2:] == ["--bonusChest", "--nogui"]

    def test_changes_are_saved_before_launch(
        self, fake_launcher, fake_spawn, server_dir
    ):
        (server_dir / "settings.txt").write_text("# mine\ndemo=false\n")
        responses = ["", "true"] + [""] * 9 + ["y"]

        assert run(parse("server.jar", str(server_dir)), fake_launcher, responses) == 0

        assert (server_dir / "settings.txt").read_text() == "# mine\ndemo=true\n"
        assert "--demo" in fake_spawn.call_args.args[0]

    def test_declined_confirmation(self, fake_launcher, fake_spawn, server_dir):
        (server_dir / "settings.txt").write_text("demo=false\n")
        responses = ["", "true"] + [""] * 9 + ["n"]

        assert run(parse("server.jar", str(server_dir)), fake_launcher, responses) == 0

        assert (server_dir / "settings.txt").read_text() == "demo=false\n"
        fake_spawn.assert_not_called()

    def test_input_closed_at_confirmation(self, fake_launcher, fake_spawn, server_dir):
        (server_dir / "settings.txt").write_text("demo=false\n")
        responses = ["", "true"] + [""] * 9

        assert run(parse("server.jar", str(server_dir)), fake_launcher, responses) == 0

        assert (server_dir / "settings.txt").read_text() == "demo=false\n"
        fake_spawn.assert_not_called()

    def test_dry_run_with_changes(self, fake_launcher, fake_spawn, server_dir, capsys):
        (server_dir / "settings.txt").write_text("demo=false\n")
        source = ScriptedInput(["", "true"] + [""] * 9 + ["y"])

        exit_code = run_launcher(
            parse("--dry-run", "server.jar", str(server_dir)),
            LauncherConfig(),
            UserFeedback(),
            input_source=source,
            launcher=fake_launcher,
        )

        assert exit_code == 0
        assert "Print the server command" in source.prompts[-1]
        assert "Save" not in source.prompts[-1]
        assert (server_dir / "settings.txt").read_text() == "demo=false\n"
        fake_spawn.assert_not_called()
        assert "--demo" in capsys.readouterr().out

    def test_abort(self, fake_launcher, fake_spawn, server_dir):
        (server_dir / "settings.txt").write_text("demo=false\n")

        exit_code = run(
            parse("server.jar", str(server_dir)), fake_launcher, ["", "true", ":abort"]
        )

        assert exit_code == 0
        assert (server_dir / "settings.txt").read_text() == "demo=false\n"
        fake_spawn.assert_not_called()

    def test_skip_editor(self, fake_launcher, fake_spawn, server_dir):
        (server_dir / "settings.txt").write_text("port=25570\n")
        source = ScriptedInput([])

        exit_code = run_launcher(
            parse("--skip-editor", "server.jar", str(server_dir)),
            LauncherConfig(),
            UserFeedback(),
            input_source=source,
            launcher=fake_launcher,
        )

        assert exit_code == 0
        assert source.prompts == []
        assert fake_spawn.call_args.args[0][-2:] == ["--port", "25570"]

    def test_dry_run(self, fake_launcher, fake_spawn, server_dir, capsys):
        exit_code = run(
            parse("--dry-run", "--skip-editor", "server.jar", str(server_dir)),
            fake_launcher,
        )

        assert exit_code == 0
        fake_spawn.assert_not_called()
        assert not (server_dir / "settings.txt").exists()
        out = capsys.readouterr().out
        assert "java -Xms1G -Xmx2G -jar server.jar --bonusChest --nogui" in out

    def test_missing_jar(self, fake_launcher, fake_spawn, server_dir):
        exit_code = run(parse("missing.jar", str(server_dir)), fake_launcher)

        assert exit_code == ExitCode.FILE_NOT_FOUND
        fake_spawn.assert_not_called()
        assert not (server_dir / "settings.txt").exists()

    def test_error_shows_suggestions(self, fake_launcher, server_dir, capsys):
        run(parse("missing.jar", str(server_dir)), fake_launcher)

        captured = capsys.readouterr()
        assert "Not Found:" in captured.err
        assert "Suggested actions:" in captured.out

    def test_unknown_settings_encoding(self, fake_launcher, fake_spawn, server_dir):
        config = LauncherConfig()
        config.settings.encoding = "no-such-codec"

        exit_code = run_launcher(
            parse("server.jar", str(server_dir)),
            config,
            UserFeedback(),
            input_source=ScriptedInput(ALL_KEEP),
            launcher=fake_launcher,
        )

        assert exit_code == ExitCode.CONFIGURATION_ERROR
        fake_spawn.assert_not_called()

    def test_missing_directory(self, fake_launcher, fake_spawn, tmp_path):
        exit_code = run(parse("server.jar", str(tmp_path / "nope")), fake_launcher)

        assert exit_code == ExitCode.FILE_NOT_FOUND
        fake_spawn.assert_not_called()

    def test_unparseable_settings(self, fake_launcher, fake_spawn, server_dir):
        (server_dir / "settings.txt").write_text("demo=true\ndemo=false\n")

        exit_code = run(parse("server.jar", str(server_dir)), fake_launcher)

        assert exit_code == ExitCode.SETTINGS_PARSE_ERROR
        fake_spawn.assert_not_called()

    def test_java_missing(self, fake_launcher, fake_spawn, server_dir):
        fake_spawn.side_effect = FileNotFoundError(2, "No such file", "java")

        args = parse("--skip-editor", "server.jar", str(server_dir))
        exit_code = run(args, fake_launcher)

        assert exit_code == ExitCode.RUNTIME_NOT_FOUND
        assert cli._launcher is None

    def test_server_exit_code(self, fake_launcher, fake_process, server_dir, capsys):
        fake_process.wait.return_value = 7

        args = parse("--skip-editor", "server.jar", str(server_dir))
        exit_code = run(args, fake_launcher)

        assert exit_code == 7
        assert "Server exited with code 7" in capsys.readouterr().err

    def test_config_server_directory(self, fake_launcher, fake_spawn, server_dir):
        config = LauncherConfig(server_directory=str(server_dir))

        exit_code = run_launcher(
            parse("--skip-editor", "server.jar"),
            config,
            UserFeedback(),
            input_source=ScriptedInput([]),
            launcher=fake_launcher,
        )

        assert exit_code == 0
        assert fake_spawn.call_args.kwargs["cwd"] == str(server_dir.resolve())


class TestMain:
    """Test argument handling in main."""

    def test_missing_jar_argument(self, capsys):
        assert main([]) == ExitCode.INVALID_ARGUMENTS
        assert "usage: mclaunch" in capsys.readouterr().err

    def test_blank_jar_argument(self):
        assert main([" server.jar"]) == ExitCode.INVALID_ARGUMENTS

    def test_create_config(self, tmp_path):
        path = tmp_path / "conf" / "mclaunch.toml"

        assert main(["--create-config", str(path)]) == ExitCode.SUCCESS
        assert "[java]" in path.read_text()

    def test_missing_config_file(self, tmp_path):
        exit_code = main(["--config", str(tmp_path / "missing.toml"), "server.jar"])

        assert exit_code == ExitCode.INVALID_CONFIG_FILE

    @patch("mclaunch.cli.run_launcher", return_value=0)
    @patch("mclaunch.cli._setup_signal_handlers")
    def test_runs_launcher(self, mock_signals, mock_run, server_dir):
        assert main(["server.jar", str(server_dir)]) == 0

        mock_signals.assert_called_once()
        args, config, feedback, source = mock_run.call_args.args
        assert args.jar_filename == "server.jar"
        assert config.java.executable == "java"
        assert feedback.verbose is False
        assert feedback.quiet is False

    @patch("mclaunch.cli.run_launcher", return_value=0)
    @patch("mclaunch.cli._setup_signal_handlers")
    def test_quiet_flag(self, mock_signals, mock_run, server_dir):
        assert main(["-q", "server.jar", str(server_dir)]) == 0

        feedback = mock_run.call_args.args[2]
        assert feedback.quiet is True

    def test_unknown_encoding_in_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("MCLAUNCH_SETTINGS_ENCODING", "no-such-codec")

        assert main(["server.jar"]) == ExitCode.CONFIGURATION_ERROR
        assert "Unknown settings file encoding" in capsys.readouterr().err

    @patch("mclaunch.cli.run_launcher", return_value=0)
    @patch("mclaunch.cli._setup_signal_handlers")
    def test_environment_config(self, mock_signals, mock_run, monkeypatch):
        monkeypatch.setenv("MCLAUNCH_JAVA", "/opt/java/bin/java")

        main(["server.jar"])

        config = mock_run.call_args.args[1]
        assert config.java.executable == "/opt/java/bin/java"


class TestSignalHandling:
    def test_signal_stops_server(self, monkeypatch):
        launcher = Mock()
        monkeypatch.setattr(cli, "_launcher", launcher)

        with pytest.raises(SystemExit) as exc_info:
            cli._signal_handler(signal.SIGTERM, None)

        assert exc_info.value.code == 128 + signal.SIGTERM
        launcher.shutdown.assert_called_once()

    def test_cleanup_without_server(self, monkeypatch):
        monkeypatch.setattr(cli, "_launcher", None)

        cli._cleanup_on_exit()
