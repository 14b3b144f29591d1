"""Tests for YAML configuration files."""

import pytest

pytest.importorskip("yaml")

from buildifchanged.config.yaml_config import parse_yaml_file, parse_yaml_string
from buildifchanged.exceptions import (
    DuplicateTaskError,
    EmptyConfigError,
    NoPatternsError,
    YAMLConfigError,
)


class TestParseYAMLString:

    def test_tasks_and_config(self):
        config = parse_yaml_string("""
config:
  cache_dir: .cache
  max_passes: 50
  jobs: 4

tasks:
  - command: "sass main.scss -o main.css"
    inputs:
      - "**/*.scss"
    outputs:
      - "main.css"
  - command: "notify-send built"
    inputs: "main.css"
""")
        assert config.config == {'cache_dir': '.cache', 'max_passes': 50, 'jobs': 4}
        assert len(config.tasks) == 2
        assert config.tasks[0].input_patterns == ('**/*.scss',)
        assert config.tasks[0].output_patterns == ('main.css',)
        assert config.tasks[1].input_patterns == ('main.css',)
        assert config.tasks[1].output_patterns == ()

    def test_empty_document(self):
        with pytest.raises(EmptyConfigError):
            parse_yaml_string("")

    def test_invalid_syntax(self):
        with pytest.raises(YAMLConfigError):
            parse_yaml_string("tasks: [unclosed")

    def test_root_must_be_mapping(self):
        with pytest.raises(YAMLConfigError):
            parse_yaml_string("- a\n- b\n")

    def test_tasks_must_be_list(self):
        with pytest.raises(YAMLConfigError):
            parse_yaml_string("tasks: {command: make}")

    def test_missing_command(self):
        with pytest.raises(YAMLConfigError, match="command"):
            parse_yaml_string("tasks:\n  - inputs: ['*.c']\n")

    def test_task_without_patterns(self):
        with pytest.raises(NoPatternsError):
            parse_yaml_string("tasks:\n  - command: make\n")

    def test_bad_pattern_type(self):
        with pytest.raises(YAMLConfigError):
            parse_yaml_string("tasks:\n  - command: make\n    inputs: [1, 2]\n")

    def test_duplicate_command(self):
        with pytest.raises(DuplicateTaskError):
            parse_yaml_string("""
tasks:
  - command: make
    inputs: ["*.c"]
  - command: make
    inputs: ["*.h"]
""")

    def test_unknown_config_option(self):
        with pytest.raises(YAMLConfigError, match="Unknown config option"):
            parse_yaml_string("config:\n  colour: true\ntasks:\n  - command: make\n    inputs: ['*.c']\n")

    @pytest.mark.parametrize('value', ['0', 'true', '"3"'])
    def test_invalid_max_passes(self, value):
        with pytest.raises(YAMLConfigError):
            parse_yaml_string(
                f"config:\n  max_passes: {value}\n"
                f"tasks:\n  - command: make\n    inputs: ['*.c']\n"
            )


class TestParseYAMLFile:

    def test_reads_file(self, tmp_path):
        path = tmp_path / 'buildconfig.yaml'
        path.write_text("tasks:\n  - command: make\n    inputs: ['*.c']\n")
        assert parse_yaml_file(path).tasks[0].command == 'make'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_yaml_file(tmp_path / 'buildconfig.yaml')


class TestUnreadableYAMLFile:

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / 'buildconfig.yaml'
        path.write_bytes(b'tasks:\n  - command: "\xff\xfe"\n')
        with pytest.raises(YAMLConfigError, match='cannot read'):
            parse_yaml_file(path)
