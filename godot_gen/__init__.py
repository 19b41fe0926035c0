from godot_gen.gen import (
    GeneratedArtifactPaths,
    PipelineConfig,
    PipelineError,
    RebuildTriggers,
    load_api_description,
    load_extension_api_json,
    load_gdextension_header_binding,
    load_header_binding,
)

__all__ = [
    "GeneratedArtifactPaths",
    "PipelineConfig",
    "PipelineError",
    "RebuildTriggers",
    "load_api_description",
    "load_extension_api_json",
    "load_gdextension_header_binding",
    "load_header_binding",
]
