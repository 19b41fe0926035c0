"""Godot 4 API dump and GDExtension binding pipeline.

Locates a Godot 4 executable, checks its version, dumps the extension API
JSON or the GDExtension C header into a generated directory, applies the
bundled tweak patch to the header with git, and translates the patched
header into a ctypes module.

Usage:
    python -m godot_gen --api-json --gen-root target
    python -m godot_gen --header-binding --gen-root target --output gdext.py
"""

import argparse
import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, TextIO

from godot_gen.ctypes_binding import BindingResult, generate_ctypes_binding
from godot_gen.godot_version import GodotVersion, parse_godot_version
from godot_gen.stopwatch import StopWatch

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_RES_DIR = PACKAGE_DIR / "res"
DEFAULT_GEN_ROOT = Path("target")

GEN_DIR_NAME = "godot-gen"
VERSION_FILE_NAME = "godot_version.txt"
JSON_FILE_NAME = "extension_api.json"
HEADER_FILE_NAME = "gdextension_interface.h"
BINDING_FILE_NAME = "gdextension_interface.py"
PATCH_FILE_NAME = "tweak.patch"
VERSION_MARKER_SUFFIX = ".version"

ENGINE_ENV_VAR = "ENGINE_BIN"
ENGINE_EXE_NAME = "engine4"
VCS_ENV_VAR = "VCS_BIN"
VCS_EXE_NAME = "git"

# Older names, consulted after the primary ones.
ENGINE_ENV_ALIASES = ("GODOT4_BIN",)
ENGINE_EXE_ALIASES = ("godot4",)
VCS_ENV_ALIASES = ("GIT_BIN",)

SUPPORTED_MAJOR_VERSION = 4

# `git apply -v` exits 0 when it skips a hunk; this is the only signal.
PATCH_SKIP_MARKER = "Skipped"

VersionParsePolicy = Literal["fatal", "warn"]


# ===--- Errors ---=== #


VALID_ERROR_CODES = {
    "TOOL_NOT_FOUND",
    "PROCESS_SPAWN_FAILURE",
    "PROCESS_EXIT_FAILURE",
    "ENCODING_FAILURE",
    "VERSION_PARSE_FAILURE",
    "VERSION_INCOMPATIBLE",
    "PATCH_SKIPPED",
    "FILE_IO_FAILURE",
    "TRANSLATION_FAILURE",
    "PATH_NOT_FOUND",
    "CONFLICT_MODES",
}


class PipelineError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        suggestion: str | None = None,
        *,
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: int | None = None,
    ):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown pipeline error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode


# ===--- Configuration ---=== #


@dataclass(frozen=True)
class GeneratedArtifactPaths:
    """Well-known locations of generated artifacts.

    Everything lives under `<gen_root>/godot-gen/` except the patch, which is
    a source-controlled resource. None of these paths are assumed to exist.

    `version_file` holds the version of the last successful dump of either
    artifact. Each dumped artifact also gets its own `<name>.version`
    marker, which is what reuse decisions read.
    """

    version_file: Path
    json_file: Path
    header_file: Path
    patch_file: Path

    @classmethod
    def from_root(
        cls, gen_root: Path, res_dir: Path | None = None
    ) -> "GeneratedArtifactPaths":
        gen_dir = Path(gen_root) / GEN_DIR_NAME
        res_dir = DEFAULT_RES_DIR if res_dir is None else Path(res_dir)
        return cls(
            version_file=gen_dir / VERSION_FILE_NAME,
            json_file=gen_dir / JSON_FILE_NAME,
            header_file=gen_dir / HEADER_FILE_NAME,
            patch_file=res_dir / PATCH_FILE_NAME,
        )

    @property
    def gen_dir(self) -> Path:
        return self.json_file.parent

    @staticmethod
    def marker_for(artifact: Path) -> Path:
        return artifact.with_name(artifact.name + VERSION_MARKER_SUFFIX)

    @property
    def json_version_file(self) -> Path:
        return self.marker_for(self.json_file)

    @property
    def header_version_file(self) -> Path:
        return self.marker_for(self.header_file)


# ===--- Rebuild triggers ---=== #


@dataclass(frozen=True)
class RebuildTrigger:
    kind: Literal["file", "env"]
    identifier: str

    def directive(self, prefix: str = "") -> str:
        if self.kind == "file":
            return f"{prefix}rerun-if-changed={self.identifier}"
        return f"{prefix}rerun-if-env-changed={self.identifier}"


class RebuildTriggers:
    """Emits rebuild directives for the enclosing build orchestrator.

    Each trigger is printed once, when first registered. The list is kept
    only so callers can inspect what a run depended on.
    """

    def __init__(self, prefix: str = "", stream: TextIO | None = None):
        self.prefix = prefix
        self._stream = stream
        self.triggers: list[RebuildTrigger] = []

    def _record(self, trigger: RebuildTrigger) -> None:
        if trigger in self.triggers:
            return
        self.triggers.append(trigger)
        print(trigger.directive(self.prefix), file=self._stream or sys.stdout)

    def on_changed(self, path: Path) -> None:
        self._record(RebuildTrigger("file", str(path)))

    def on_env_changed(self, name: str) -> None:
        self._record(RebuildTrigger("env", name))

    def directives(self) -> list[str]:
        return [trigger.directive(self.prefix) for trigger in self.triggers]


@dataclass(frozen=True)
class PipelineConfig:
    paths: GeneratedArtifactPaths
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)
    triggers: RebuildTriggers = field(default_factory=RebuildTriggers)
    version_parse_policy: VersionParsePolicy = "fatal"
    reuse_unchanged: bool = False


# ===--- Executable locator ---=== #


def locate_executable(
    env_var: str,
    exe_name: str,
    *,
    env_aliases: tuple[str, ...] = (),
    exe_aliases: tuple[str, ...] = (),
    env: Mapping[str, str] | None = None,
    triggers: RebuildTriggers | None = None,
    watch_env: bool = True,
    which: Callable[[str], str | None] = shutil.which,
) -> Path:
    """Resolve an executable from an env override or the PATH.

    `env_var` is consulted before `env_aliases`, and `exe_name` is searched
    before `exe_aliases`. An override is used verbatim and never checked for
    existence; a bad override fails later, when the executable is invoked.

    When watched, the variable that supplied the override gets a rebuild
    trigger, as does every variable that outranks it.

    Raises:
        PipelineError: TOOL_NOT_FOUND when neither source yields a path.
    """
    env = os.environ if env is None else env
    env_vars = (env_var, *env_aliases)
    for index, name in enumerate(env_vars):
        override = env.get(name)
        if override is None:
            continue
        print(f"Found {name} with path to executable: '{override}'")
        if watch_env and triggers is not None:
            for watched in env_vars[: index + 1]:
                triggers.on_env_changed(watched)
        return Path(override)

    for name in (exe_name, *exe_aliases):
        found = which(name)
        if found:
            path = Path(found)
            print(f"Found '{name}' executable in PATH: {path}")
            return path

    raise PipelineError(
        "TOOL_NOT_FOUND",
        f"Requires '{exe_name}' executable in PATH or a {env_var} environment "
        "variable (with the path to the executable).",
        f"Install {exe_name} or export {env_var}=/path/to/{exe_name}.",
    )


def locate_godot_binary(config: PipelineConfig) -> Path:
    return locate_executable(
        ENGINE_ENV_VAR,
        ENGINE_EXE_NAME,
        env_aliases=ENGINE_ENV_ALIASES,
        exe_aliases=ENGINE_EXE_ALIASES,
        env=config.env,
        triggers=config.triggers,
    )


def locate_git_binary(config: PipelineConfig) -> Path:
    # VCS_BIN changes do not invalidate generated artifacts.
    return locate_executable(
        VCS_ENV_VAR,
        VCS_EXE_NAME,
        env_aliases=VCS_ENV_ALIASES,
        env=config.env,
        triggers=config.triggers,
        watch_env=False,
    )


# ===--- Process runner ---=== #


@dataclass(frozen=True)
class ExternalCommand:
    program: Path
    args: tuple[str, ...] = ()
    cwd: Path | None = None

    def argv(self) -> list[str]:
        return [str(self.program), *self.args]


@dataclass(frozen=True)
class CommandResult:
    stdout: bytes
    stderr: bytes
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


def _echo_output(label: str, data: bytes) -> None:
    """Write captured process output to stdout byte for byte."""
    stream = sys.stdout
    stream.write(f"[{label}] ")
    stream.flush()
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        # text-only stream, e.g. a StringIO redirect
        stream.write(data.decode("utf-8", errors="replace"))
    else:
        buffer.write(data)
        buffer.flush()
    stream.write("\n")
    stream.flush()


def run_command(command: ExternalCommand, context: str) -> CommandResult:
    """Run an external command to completion and echo everything it printed.

    Output is echoed on success as well as failure, so a CI log alone is
    enough to diagnose a broken build. There is no timeout.

    Args:
        command: Program, arguments and working directory.
        context: Short description of the step, used in error messages.

    Returns:
        CommandResult with raw captured bytes and exit status 0.

    Raises:
        PipelineError: PROCESS_SPAWN_FAILURE if the process cannot start,
            PROCESS_EXIT_FAILURE if it exits with a non-zero status.
    """
    try:
        completed = subprocess.run(
            command.argv(),
            cwd=command.cwd,
            capture_output=True,
            check=False,
        )
    except OSError as err:
        raise PipelineError(
            "PROCESS_SPAWN_FAILURE",
            f"failed to execute command: {context} ('{command.program}': {err})",
        ) from err

    result = CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )
    _echo_output("stdout", result.stdout)
    _echo_output("stderr", result.stderr)
    print(f"[status] {result.returncode}")

    if not result.success:
        raise PipelineError(
            "PROCESS_EXIT_FAILURE",
            f"command returned error: {context} (exit status {result.returncode})",
            stdout=result.stdout,
            stderr=result.stderr,
            returncode=result.returncode,
        )
    return result


def decode_output(data: bytes, what: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise PipelineError(
            "ENCODING_FAILURE", f"convert {what} to UTF-8: {err}"
        ) from err


# ===--- Version gate ---=== #


def check_godot_version(version: GodotVersion) -> GodotVersion:
    if version.major != SUPPORTED_MAJOR_VERSION:
        raise PipelineError(
            "VERSION_INCOMPATIBLE",
            f"Only Godot versions >= {SUPPORTED_MAJOR_VERSION}.0 are supported; "
            f"found version {version.full_string}.",
            f"Point {ENGINE_ENV_VAR} at a Godot {SUPPORTED_MAJOR_VERSION}.x executable.",
        )
    return version


def read_godot_version(
    godot_bin: Path, *, policy: VersionParsePolicy = "fatal"
) -> GodotVersion | None:
    """Query `godot --version` and enforce the supported major version.

    Args:
        godot_bin: Engine executable.
        policy: What to do with unparseable output. "fatal" raises;
            "warn" prints a warning and returns None, skipping the
            major-version check.

    Raises:
        PipelineError: ENCODING_FAILURE, VERSION_PARSE_FAILURE (policy
            "fatal") or VERSION_INCOMPATIBLE; process errors propagate.
    """
    result = run_command(
        ExternalCommand(godot_bin, ("--version",)), "query Godot version"
    )
    output = decode_output(result.stdout, "Godot version")
    print(f"Godot version: {output.strip()}")

    try:
        parsed = parse_godot_version(output)
    except ValueError as err:
        if policy == "warn":
            print(
                f"Warning: failed to parse Godot version '{output.strip()}': {err}",
                file=sys.stderr,
            )
            return None
        raise PipelineError(
            "VERSION_PARSE_FAILURE",
            f"failed to parse Godot version '{output.strip()}': {err}",
            "Pass --lenient-version to continue without a version check.",
        ) from err

    return check_godot_version(parsed)


def has_version_changed(marker: Path, version: GodotVersion) -> bool:
    try:
        last_version = Path(marker).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return True
    return last_version != version.full_string


def _write_marker(marker: Path, version: GodotVersion) -> None:
    try:
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text(version.full_string, encoding="utf-8")
    except OSError as err:
        raise PipelineError(
            "FILE_IO_FAILURE",
            f"write Godot version to file {marker}: {err}",
        ) from err


def update_version_file(
    paths: GeneratedArtifactPaths,
    version: GodotVersion,
    triggers: RebuildTriggers,
    artifact_marker: Path | None = None,
) -> None:
    """Persist the dumping engine's version.

    Always rewrites `paths.version_file`; `artifact_marker`, when given,
    records which version produced that particular artifact.
    """
    triggers.on_changed(paths.version_file)
    _write_marker(paths.version_file, version)
    if artifact_marker is not None:
        _write_marker(artifact_marker, version)


def clear_version_marker(marker: Path) -> None:
    try:
        Path(marker).unlink(missing_ok=True)
    except OSError as err:
        raise PipelineError(
            "FILE_IO_FAILURE", f"remove version marker {marker}: {err}"
        ) from err


# ===--- API dumper ---=== #


def _prepare_dump_dir(out_file: Path) -> Path:
    cwd = Path(out_file).parent
    try:
        cwd.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise PipelineError(
            "FILE_IO_FAILURE", f"create directory '{cwd}': {err}"
        ) from err
    return cwd


def dump_extension_api(godot_bin: Path, out_file: Path) -> None:
    cwd = _prepare_dump_dir(out_file)
    print(f"Dump GDExtension API JSON to dir '{cwd}'...")

    command = ExternalCommand(
        godot_bin, ("--headless", "--dump-extension-api"), cwd=cwd
    )
    run_command(command, "dump Godot JSON file")

    print(f"Generated {cwd / JSON_FILE_NAME}.")


def dump_header_file(godot_bin: Path, out_file: Path) -> None:
    cwd = _prepare_dump_dir(out_file)
    print(f"Dump GDExtension header file to dir '{cwd}'...")

    command = ExternalCommand(
        godot_bin, ("--headless", "--dump-gdextension-interface"), cwd=cwd
    )
    run_command(command, "dump Godot header file")

    print(f"Generated {cwd / HEADER_FILE_NAME}.")


# ===--- Header patcher ---=== #


def patch_c_header(
    c_header_path: Path,
    patch_file: Path,
    *,
    git_bin: Path,
    triggers: RebuildTriggers,
) -> None:
    """Apply the tweak patch to a dumped C header with `git apply -v`.

    The patch's paths are relative to the directory two levels above the
    header, so git runs from there.

    Raises:
        PipelineError: PATCH_SKIPPED when git reports a skipped patch while
            exiting successfully; process and encoding errors propagate.
    """
    cwd = Path(c_header_path).parent.parent
    print(f"cwd: {cwd}")

    triggers.on_changed(patch_file)

    command = ExternalCommand(
        git_bin, ("apply", "-v", str(patch_file)), cwd=cwd
    )
    result = run_command(command, "apply Git patch")
    stderr = decode_output(result.stderr, "Git patch output")

    if PATCH_SKIP_MARKER in stderr:
        raise PipelineError(
            "PATCH_SKIPPED",
            f"Git patch was skipped: {patch_file} does not apply to {c_header_path}",
            "Update the tweak patch for the header of this Godot version.",
            stdout=result.stdout,
            stderr=result.stderr,
            returncode=result.returncode,
        )


def is_patch_applied(c_header_path: Path, patch_file: Path, *, git_bin: Path) -> bool:
    """Check with `git apply --reverse --check` whether the header is patched.

    Only a clean reverse check counts; any failure or skipped hunk means
    the patch still has to be applied.
    """
    cwd = Path(c_header_path).parent.parent
    command = ExternalCommand(
        git_bin, ("apply", "--reverse", "--check", "-v", str(patch_file)), cwd=cwd
    )
    try:
        result = run_command(command, "check Git patch")
    except PipelineError as err:
        if err.code != "PROCESS_EXIT_FAILURE":
            raise
        return False
    return PATCH_SKIP_MARKER not in decode_output(result.stderr, "Git patch output")


# ===--- Pipeline entry points ---=== #


def _can_reuse_artifact(
    config: PipelineConfig, artifact: Path, version: GodotVersion | None
) -> bool:
    if not config.reuse_unchanged or version is None:
        return False
    marker = config.paths.marker_for(artifact)
    return artifact.exists() and not has_version_changed(marker, version)


def _record_dump_version(
    config: PipelineConfig, artifact: Path, version: GodotVersion | None
) -> None:
    marker = config.paths.marker_for(artifact)
    if version is None:
        # produced by an unknown engine version; never reuse it
        clear_version_marker(marker)
        return
    update_version_file(config.paths, version, config.triggers, marker)


def load_extension_api_json(config: PipelineConfig, watch: StopWatch) -> str:
    """Dump extension_api.json from the located Godot binary and return it.

    Stages: locate -> version check -> dump -> read. Every file consulted
    or produced is registered as a rebuild trigger when touched.

    Raises:
        PipelineError: Any stage failure; there is no partial result.
    """
    json_path = config.paths.json_file
    config.triggers.on_changed(json_path)

    godot_bin = locate_godot_binary(config)
    config.triggers.on_changed(godot_bin)
    watch.record("locate_godot")

    version = read_godot_version(godot_bin, policy=config.version_parse_policy)
    if _can_reuse_artifact(config, json_path, version):
        print(f"Godot version unchanged, reusing {json_path}.")
    else:
        dump_extension_api(godot_bin, json_path)
        _record_dump_version(config, json_path, version)
    watch.record("dump_json")

    try:
        result = json_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise PipelineError(
            "FILE_IO_FAILURE", f"failed to open file {json_path}: {err}"
        ) from err

    watch.record("read_json_file")
    return result


def load_gdextension_header_binding(
    config: PipelineConfig,
    c_header: Path | None,
    output_path: Path,
    watch: StopWatch,
) -> BindingResult:
    """Produce a ctypes binding module from the GDExtension C header.

    With `c_header` given, that header is used as-is: Godot is not invoked
    and no version check happens. Otherwise the header is dumped from the
    located Godot binary. Either way the header is patched in place and
    translated to `output_path`. A reused header that already carries the
    patch is not patched again.

    Raises:
        PipelineError: Any stage failure; there is no partial result.
    """
    reused = False
    if c_header is not None:
        c_header_path = Path(c_header)
    else:
        godot_bin = locate_godot_binary(config)
        config.triggers.on_changed(godot_bin)
        watch.record("locate_godot")

        version = read_godot_version(godot_bin, policy=config.version_parse_policy)
        c_header_path = config.paths.header_file

        if _can_reuse_artifact(config, c_header_path, version):
            print(f"Godot version unchanged, reusing {c_header_path}.")
            reused = True
        else:
            dump_header_file(godot_bin, c_header_path)
            _record_dump_version(config, c_header_path, version)
    config.triggers.on_changed(c_header_path)

    watch.record("dump_header_c")

    git_bin = locate_git_binary(config)
    patch_file = config.paths.patch_file
    if reused and is_patch_applied(c_header_path, patch_file, git_bin=git_bin):
        config.triggers.on_changed(patch_file)
        print(f"Tweak patch already applied to {c_header_path}.")
    else:
        patch_c_header(
            c_header_path,
            patch_file,
            git_bin=git_bin,
            triggers=config.triggers,
        )
    watch.record("patch_header_c")

    try:
        binding = generate_ctypes_binding(c_header_path, output_path)
    except OSError as err:
        raise PipelineError(
            "FILE_IO_FAILURE",
            f"generate binding {output_path} from {c_header_path}: {err}",
        ) from err
    except (ValueError, UnicodeDecodeError) as err:
        raise PipelineError(
            "TRANSLATION_FAILURE",
            f"failed to translate {c_header_path}: {err}",
        ) from err

    watch.record("generate_header_binding")
    return binding


load_api_description = load_extension_api_json
load_header_binding = load_gdextension_header_binding


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class RunConfig:
    mode: Literal["api-json", "header-binding"]
    pipeline: PipelineConfig
    c_header: Path | None
    output: Path | None
    stats: Path | None


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dump the Godot 4 extension API and generate GDExtension bindings"
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument("--api-json", action="store_true", default=False)
    mode_group.add_argument("--header-binding", action="store_true", default=False)

    parser.add_argument("--gen-root", type=Path, default=DEFAULT_GEN_ROOT)
    parser.add_argument("--res-dir", type=Path, default=DEFAULT_RES_DIR)
    parser.add_argument("--c-header", type=Path, default=None)
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument("--stats", type=Path, default=None)
    parser.add_argument("--directive-prefix", type=str, default="")
    parser.add_argument("--lenient-version", action="store_true", default=False)
    parser.add_argument("--reuse-unchanged", action="store_true", default=False)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(
    args: argparse.Namespace, env: Mapping[str, str] | None = None
) -> RunConfig:
    if not (args.api_json or args.header_binding):
        raise PipelineError(
            "CONFLICT_MODES",
            "One of --api-json or --header-binding is required.",
            "Use --api-json to dump extension_api.json, or --header-binding "
            "to generate the ctypes binding.",
        )

    if args.c_header is not None and not args.header_binding:
        raise PipelineError(
            "CONFLICT_MODES",
            "--c-header requires --header-binding.",
            "Add --header-binding or remove --c-header.",
        )

    if args.c_header is not None and not args.c_header.exists():
        raise PipelineError(
            "PATH_NOT_FOUND",
            f"Path for --c-header does not exist: {args.c_header}",
            "Provide an existing gdextension_interface.h.",
        )

    paths = GeneratedArtifactPaths.from_root(args.gen_root, args.res_dir)
    pipeline = PipelineConfig(
        paths=paths,
        env=os.environ if env is None else env,
        triggers=RebuildTriggers(prefix=args.directive_prefix),
        version_parse_policy="warn" if args.lenient_version else "fatal",
        reuse_unchanged=bool(args.reuse_unchanged),
    )

    if args.header_binding:
        output = args.output or paths.gen_dir / BINDING_FILE_NAME
        return RunConfig("header-binding", pipeline, args.c_header, output, args.stats)
    return RunConfig("api-json", pipeline, None, args.output, args.stats)


def build_config(
    argv: list[str] | None = None, env: Mapping[str, str] | None = None
) -> RunConfig:
    return validate_config(parse_args(argv), env)


# ===--- Main ---=== #


def run(config: RunConfig) -> None:
    watch = StopWatch.start()

    if config.mode == "api-json":
        text = load_extension_api_json(config.pipeline, watch)
        if config.output is not None:
            try:
                config.output.parent.mkdir(parents=True, exist_ok=True)
                config.output.write_text(text, encoding="utf-8")
            except OSError as err:
                raise PipelineError(
                    "FILE_IO_FAILURE", f"write {config.output}: {err}"
                ) from err
        print(f"Extension API: {len(text)} characters from {config.pipeline.paths.json_file}")
    else:
        binding = load_gdextension_header_binding(
            config.pipeline, config.c_header, config.output, watch
        )
        print(
            f"Binding: {binding.structs} structs, {binding.enums} enums, "
            f"{binding.functions} function types, {binding.aliases} aliases"
        )
        print(f"  Written: {binding.line_count} lines to {binding.path}")

    if config.stats is not None:
        try:
            watch.write_stats_to(config.stats)
        except OSError as err:
            raise PipelineError(
                "FILE_IO_FAILURE", f"write stats to {config.stats}: {err}"
            ) from err


def main(argv: list[str] | None = None) -> None:
    try:
        config = build_config(argv)
        run(config)
    except PipelineError as err:
        print(f"Error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
