"""Built-in required-file presets for snapshot verification."""

from types import MappingProxyType

from .models import RequirePreset

REQUIRED_FILE_PRESETS = MappingProxyType(
    {
        "rehearsal-archive-verify": (
            "release-ready.json",
            "release-health.json",
            "release-rehearsal.json",
            "release-summary.json",
        ),
    }
)


def list_require_presets() -> list[RequirePreset]:
    """Return every built-in preset."""
    return [
        RequirePreset(name=name, files=list(files))
        for name, files in REQUIRED_FILE_PRESETS.items()
    ]


def get_require_preset_files(name: str) -> list[str] | None:
    """Return a copy of a preset's files, or None if the preset is unknown."""
    files = REQUIRED_FILE_PRESETS.get(str(name or "").strip())
    return list(files) if files is not None else None
