"""
Markdown summaries of archive result records.

Renders the bullet-list summaries printed by the CLI when the markdown
output format is selected.
"""

from .models import ArchiveResult, FindMode, FindResult, PresetListResult, StandardizedResult


def _status_lines(ok: bool, standardized: StandardizedResult | None) -> list[str]:
    lines = [f"- status: {'OK' if ok else 'FAIL'}"]
    if standardized is not None:
        lines.append(f"- resultCode: {standardized.result_code}")
        if standardized.failure_codes:
            lines.append(f"- failureCodes: {','.join(standardized.failure_codes)}")
    return lines


def render_archive_markdown(result: ArchiveResult) -> str:
    """Render an archiving result."""
    lines = ["# Release Archive", ""]
    lines.extend(_status_lines(result.ok, result.standardized))
    lines.extend(
        [
            f"- version: {result.version}",
            f"- tag: {result.tag}",
            f"- snapshotId: {result.snapshot_id}",
            f"- snapshotDir: {result.snapshot_dir}",
            f"- copiedCount: {len(result.copied_files)}",
            f"- missingCount: {len(result.missing_files)}",
            f"- prunedCount: {len(result.pruned_snapshots)}",
            f"- catalog: {result.catalog_path}",
            f"- latest: {result.latest_path}",
        ]
    )
    if result.dry_run:
        lines.append("- dryRun: true (pruned snapshots were not removed)")
    if not result.ok and result.error:
        lines.append(f"- error: {result.error}")
    return "\n".join(lines) + "\n"


def render_find_markdown(result: FindResult) -> str:
    """Render a query result."""
    lines = ["# Release Archive Find", ""]
    lines.extend(_status_lines(result.ok, result.standardized))
    lines.append(f"- mode: {result.mode.value}")
    lines.append(f"- archiveRoot: {result.archive_root}")
    if result.version:
        lines.append(f"- version: {result.version}")
    if result.snapshot_id:
        lines.append(f"- snapshotId: {result.snapshot_id}")
    if result.error:
        lines.append(f"- error: {result.error}")

    if result.mode is FindMode.VERSIONS and result.versions is not None:
        lines.append(f"- versions: {','.join(v.version for v in result.versions)}")
    if result.mode is FindMode.VERSION_LATEST and result.latest_snapshot:
        lines.append(f"- latestSnapshot: {result.latest_snapshot.snapshot_id}")
        lines.append(f"- snapshotDir: {result.latest_snapshot.snapshot_dir}")
    if result.mode is FindMode.SNAPSHOT and result.snapshot:
        lines.append(f"- snapshotDir: {result.snapshot.snapshot_dir}")
        lines.append(f"- copiedFiles: {result.snapshot.copied_files}")
        lines.append(f"- missingFiles: {result.snapshot.missing_files}")

    if result.required_files:
        if result.required_files_preset:
            lines.append(f"- requiredFilesPreset: {result.required_files_preset}")
        lines.append(f"- requiredFiles: {','.join(result.required_files)}")
        lines.append(
            f"- missingRequiredFiles: {','.join(result.missing_required_files or [])}"
        )
    return "\n".join(lines) + "\n"


def render_presets_markdown(result: PresetListResult) -> str:
    """Render the preset listing."""
    lines = ["# Release Archive Find Require Presets", ""]
    lines.extend(_status_lines(result.ok, result.standardized))
    lines.extend([f"- presetCount: {len(result.require_presets)}", "", "## Presets", ""])
    for preset in result.require_presets:
        lines.append(f"- {preset.name}: {','.join(preset.files)}")
    return "\n".join(lines) + "\n"
