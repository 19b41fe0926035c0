from pathlib import Path

import pytest

from godot_gen import gen


def test_import_gen_module_smoke() -> None:
    assert callable(gen.main)


def test_build_argument_parser_exposes_surface_and_defaults() -> None:
    parser = gen.build_argument_parser()
    option_actions = {
        option: action for action in parser._actions for option in action.option_strings
    }

    expected_options = {
        "--api-json",
        "--header-binding",
        "--gen-root",
        "--res-dir",
        "--c-header",
        "--output",
        "--stats",
        "--directive-prefix",
        "--lenient-version",
        "--reuse-unchanged",
    }

    assert expected_options.issubset(option_actions.keys())
    assert option_actions["--gen-root"].default == gen.DEFAULT_GEN_ROOT
    assert option_actions["--res-dir"].default == gen.DEFAULT_RES_DIR
    assert option_actions["--directive-prefix"].default == ""


def test_parse_args_enforces_mode_mutual_exclusion() -> None:
    with pytest.raises(SystemExit) as exc_info:
        gen.parse_args(["--api-json", "--header-binding"])

    assert exc_info.value.code == 2


def test_validate_config_requires_a_mode() -> None:
    with pytest.raises(gen.PipelineError) as exc_info:
        gen.build_config([], env={})

    assert exc_info.value.code == "CONFLICT_MODES"


def test_validate_config_c_header_requires_header_mode(tmp_path: Path) -> None:
    header = tmp_path / "gdextension_interface.h"
    header.write_text("", encoding="utf-8")

    with pytest.raises(gen.PipelineError) as exc_info:
        gen.build_config(["--api-json", "--c-header", str(header)], env={})

    assert exc_info.value.code == "CONFLICT_MODES"


def test_validate_config_missing_c_header(tmp_path: Path) -> None:
    missing = tmp_path / "missing.h"

    with pytest.raises(gen.PipelineError) as exc_info:
        gen.build_config(["--header-binding", "--c-header", str(missing)], env={})

    assert exc_info.value.code == "PATH_NOT_FOUND"
    assert str(missing) in exc_info.value.message


def test_header_mode_defaults_output_into_gen_dir(tmp_path: Path) -> None:
    config = gen.build_config(
        ["--header-binding", "--gen-root", str(tmp_path), "--lenient-version"],
        env={"ENGINE_BIN": "godot"},
    )

    assert config.mode == "header-binding"
    assert config.output == tmp_path / "godot-gen" / "gdextension_interface.py"
    assert config.pipeline.version_parse_policy == "warn"
    assert config.pipeline.env == {"ENGINE_BIN": "godot"}


def test_json_mode_config(tmp_path: Path) -> None:
    config = gen.build_config(
        [
            "--api-json",
            "--gen-root",
            str(tmp_path),
            "--directive-prefix",
            "cargo:",
            "--reuse-unchanged",
        ],
        env={},
    )

    assert config.mode == "api-json"
    assert config.output is None
    assert config.pipeline.paths.json_file == tmp_path / "godot-gen" / "extension_api.json"
    assert config.pipeline.triggers.prefix == "cargo:"
    assert config.pipeline.reuse_unchanged


def test_main_api_json_writes_copy_and_stats(
    make_fake_godot,
    sample_api_json: str,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("ENGINE_BIN", str(make_fake_godot()))
    copy = tmp_path / "copy" / "api.json"
    stats = tmp_path / "stats.txt"

    gen.main(
        [
            "--api-json",
            "--gen-root",
            str(tmp_path / "target"),
            "--output",
            str(copy),
            "--stats",
            str(stats),
        ]
    )

    assert copy.read_text(encoding="utf-8") == sample_api_json
    stats_lines = stats.read_text(encoding="utf-8").splitlines()
    assert [line.split()[0] for line in stats_lines] == [
        "locate_godot",
        "dump_json",
        "read_json_file",
        "total",
    ]
    out = capsys.readouterr().out
    assert "rerun-if-env-changed=ENGINE_BIN" in out
    assert "Extension API:" in out


def test_main_header_binding_with_external_header(
    make_fake_git,
    sample_header: str,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    header = tmp_path / "ext" / "godot-gen" / "gdextension_interface.h"
    header.parent.mkdir(parents=True)
    header.write_text(sample_header, encoding="utf-8")
    monkeypatch.setenv("VCS_BIN", str(make_fake_git()))
    output = tmp_path / "binding.py"

    gen.main(
        [
            "--header-binding",
            "--gen-root",
            str(tmp_path / "target"),
            "--c-header",
            str(header),
            "--output",
            str(output),
        ]
    )

    assert output.exists()
    assert "Binding: 2 structs, 2 enums, 3 function types, 7 aliases" in capsys.readouterr().out


def test_main_reports_missing_godot_and_exits_1(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    monkeypatch.delenv("ENGINE_BIN", raising=False)
    monkeypatch.delenv("GODOT4_BIN", raising=False)
    monkeypatch.setenv("PATH", str(empty_bin))

    with pytest.raises(SystemExit) as exc_info:
        gen.main(["--api-json", "--gen-root", str(tmp_path / "target")])

    assert exc_info.value.code == 1
    out = capsys.readouterr().out
    assert "Error [TOOL_NOT_FOUND]" in out
    assert "ENGINE_BIN" in out
    assert "'engine4'" in out
    assert "Hint:" in out
