import pytest

from mclaunch.validation import validate_jar_filename, validate_server_jar


class TestValidateJarFilename:
    def test_valid(self):
        assert validate_jar_filename("paper-1.21.jar") == (True, [])

    def test_nested_path(self):
        is_valid, errors = validate_jar_filename("builds/server.jar")

        assert is_valid
        assert errors == []

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_empty(self, name):
        is_valid, errors = validate_jar_filename(name)

        assert not is_valid
        assert errors == ["Jar filename cannot be empty"]

    def test_surrounding_whitespace(self):
        is_valid, errors = validate_jar_filename("server.jar ")

        assert not is_valid
        assert "whitespace" in errors[0]

    def test_control_characters(self):
        is_valid, errors = validate_jar_filename("server\n.jar")

        assert not is_valid
        assert "control characters" in errors[0]


class TestValidateServerJar:
    def test_existing_jar(self, server_dir):
        assert validate_server_jar(server_dir, "server.jar") == (True, [])

    def test_missing_jar(self, server_dir):
        is_valid, errors = validate_server_jar(server_dir, "missing.jar")

        assert not is_valid
        assert "Server jar not found" in errors[0]

    def test_directory_instead_of_jar(self, server_dir):
        (server_dir / "libraries").mkdir()

        is_valid, errors = validate_server_jar(server_dir, "libraries")

        assert not is_valid
        assert "not a file" in errors[0]
