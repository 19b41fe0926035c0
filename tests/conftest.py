import os
import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from godot_gen import gen  # noqa: E402

if sys.platform == "win32":
    collect_ignore_glob = ["test_*.py", "external/test_*.py"]


SAMPLE_API_JSON = """{
    "header": {
        "version_major": 4,
        "version_minor": 2,
        "version_patch": 0,
        "version_status": "stable",
        "version_build": "official",
        "version_full_name": "Godot Engine v4.2.stable.official"
    },
    "builtin_class_sizes": [],
    "classes": []
}
"""

SAMPLE_HEADER = """#ifndef GDEXTENSION_INTERFACE_H
#define GDEXTENSION_INTERFACE_H

/* Sample of the GDExtension interface header. */

#include <stddef.h>
#include <stdint.h>

#ifndef __cplusplus
typedef uint32_t char32_t;
typedef uint16_t char16_t;
#endif

#ifdef __cplusplus
extern "C" {
#endif

typedef enum {
\tGDEXTENSION_VARIANT_TYPE_NIL,
\tGDEXTENSION_VARIANT_TYPE_BOOL,
\tGDEXTENSION_VARIANT_TYPE_INT,
\tGDEXTENSION_VARIANT_TYPE_VARIANT_MAX = 39
} GDExtensionVariantType;

typedef void *GDExtensionVariantPtr;
typedef const void *GDExtensionConstVariantPtr;
typedef void *GDExtensionTypePtr;
typedef const void *GDExtensionConstTypePtr;
typedef int64_t GDExtensionInt;
typedef uint8_t GDExtensionBool;
typedef uint64_t GDObjectInstanceID;

typedef enum {
\tGDEXTENSION_CALL_OK,
\tGDEXTENSION_CALL_ERROR_INVALID_METHOD,
\tGDEXTENSION_CALL_ERROR_INVALID_ARGUMENT,
} GDExtensionCallErrorType;

typedef struct {
\tGDExtensionCallErrorType error; // which error
\tint32_t argument;
\tint32_t expected;
} GDExtensionCallError;

typedef void (*GDExtensionPtrBuiltInMethod)(GDExtensionTypePtr p_base, const GDExtensionConstTypePtr *p_args, GDExtensionTypePtr r_return, int p_argument_count);
typedef void (*GDExtensionInterfaceFunctionPtr)();
typedef GDExtensionInterfaceFunctionPtr (*GDExtensionInterfaceGetProcAddress)(const char *p_function_name);

typedef struct {
\tuint32_t major;
\tuint32_t minor;
\tuint32_t patch;
\tconst char *string;
} GDExtensionGodotVersion;

#ifdef __cplusplus
}
#endif

#endif
"""

GIT_APPLIED_STDERR = (
    "Checking patch godot-gen/gdextension_interface.h...\n"
    "Applied patch godot-gen/gdextension_interface.h cleanly.\n"
)
GIT_SKIPPED_STDERR = "Skipped patch 'godot-gen/gdextension_interface.h'.\n"


def _write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[[str, str], Path]:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make_script(name: str, body: str) -> Path:
        return _write_script(bin_dir / name, body)

    return _make_script


@pytest.fixture
def make_fake_godot(make_script: Callable[[str, str], Path]) -> Callable[..., Path]:
    """Fake `godot4` honouring --version and the two headless dump flags.

    Every invocation is appended to `godot_calls.log` next to the script.
    """

    def _make_fake_godot(
        *,
        version_output: str | bytes = "4.2.0.stable\n",
        api_json: str = SAMPLE_API_JSON,
        header: str = SAMPLE_HEADER,
        dump_exit_code: int = 0,
    ) -> Path:
        if isinstance(version_output, str):
            version_output = version_output.encode("utf-8")
        body = f"""import os
import pathlib
import sys

args = sys.argv[1:]
log = pathlib.Path(__file__).with_name("godot_calls.log")
with log.open("a", encoding="utf-8") as f:
    f.write(" ".join(args) + " @ " + os.getcwd() + "\\n")

if args == ["--version"]:
    sys.stdout.buffer.write({version_output!r})
elif args == ["--headless", "--dump-extension-api"]:
    if {dump_exit_code!r}:
        sys.stderr.write("ERROR: dump failed\\n")
        sys.exit({dump_exit_code!r})
    pathlib.Path("extension_api.json").write_bytes({api_json.encode("utf-8")!r})
    print("Dumping extension API")
elif args == ["--headless", "--dump-gdextension-interface"]:
    if {dump_exit_code!r}:
        sys.stderr.write("ERROR: dump failed\\n")
        sys.exit({dump_exit_code!r})
    pathlib.Path("gdextension_interface.h").write_bytes({header.encode("utf-8")!r})
    print("Dumping GDExtension interface header file")
else:
    sys.stderr.write("unknown arguments\\n")
    sys.exit(2)
"""
        return make_script("godot4", body)

    return _make_fake_godot


@pytest.fixture
def make_fake_git(make_script: Callable[[str, str], Path]) -> Callable[..., Path]:
    """Fake `git` writing fixed stderr; invocations go to `git_calls.log`.

    With `reverse_exit_code`, `apply --reverse --check` exits with that status.
    """

    def _make_fake_git(
        *,
        stderr: str = GIT_APPLIED_STDERR,
        exit_code: int = 0,
        reverse_exit_code: int | None = None,
    ) -> Path:
        body = f"""import json
import os
import pathlib
import sys

log = pathlib.Path(__file__).with_name("git_calls.log")
with log.open("a", encoding="utf-8") as f:
    f.write(json.dumps({{"argv": sys.argv[1:], "cwd": os.getcwd()}}) + "\\n")
if "--reverse" in sys.argv and {reverse_exit_code!r} is not None:
    sys.stderr.write("error: patch failed\\n")
    sys.exit({reverse_exit_code!r})
sys.stderr.write({stderr!r})
sys.exit({exit_code!r})
"""
        return make_script("git", body)

    return _make_fake_git


@pytest.fixture
def make_pipeline_config(tmp_path: Path) -> Callable[..., gen.PipelineConfig]:
    def _make_pipeline_config(**env: str) -> gen.PipelineConfig:
        for key, value in list(env.items()):
            env[key] = os.fspath(value)
        return gen.PipelineConfig(
            paths=gen.GeneratedArtifactPaths.from_root(tmp_path / "target"),
            env=env,
            triggers=gen.RebuildTriggers(),
        )

    return _make_pipeline_config


@pytest.fixture
def read_calls() -> Callable[[Path, str], list[str]]:
    def _read_calls(script: Path, log_name: str) -> list[str]:
        log = script.with_name(log_name)
        if not log.exists():
            return []
        return log.read_text(encoding="utf-8").splitlines()

    return _read_calls


@pytest.fixture
def sample_header() -> str:
    return SAMPLE_HEADER


@pytest.fixture
def sample_api_json() -> str:
    return SAMPLE_API_JSON
