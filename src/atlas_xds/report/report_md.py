"""
src/atlas_xds/report/report_md.py

Gerador de `report.md` de uma geração do Atlas XDS.

Regras:
- O report.md é derivado exclusivamente do Manifest final (dict).
- Não acessa o filesystem e não recalcula resultados.
- Mesmo Manifest => mesmo report.md (ordenação estável).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple


REQUIRED_SECTIONS: List[str] = [
    "# Generation Report",
    "## Summary",
    "## Pipeline Overview",
    "## Errors",
    "## Warnings",
    "## Generated Artifacts",
    "## Execution Metadata",
]


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _finding_line(finding: Dict[str, Any]) -> str:
    context = finding.get("context") or {}
    service = context.get("service")
    region = context.get("region")
    label = f"{service}/{region}" if service and region else (service or region or "global")
    return f"- `[{label}]` **{finding.get('type', 'UNKNOWN')}**: {finding.get('message', '')}"


def generate_report_md(manifest: Dict[str, Any]) -> str:
    """Gera o conteúdo completo do report.md a partir do Manifest final."""
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate report.md")

    run = manifest.get("run") if isinstance(manifest.get("run"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    steps = manifest.get("steps") if isinstance(manifest.get("steps"), dict) else {}
    summary = manifest.get("summary") if isinstance(manifest.get("summary"), dict) else {}

    lines: List[str] = ["# Generation Report\n"]

    lines.append("## Summary")
    lines.append(f"- **Run ID**: `{run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Outcome**: `{'success' if summary.get('success') else 'failure'}`")
    lines.append(f"- **Units**: `{summary.get('units', 0)}`")
    lines.append(f"- **Rendered**: `{summary.get('rendered', 0)}`")
    lines.append(f"- **Errors**: `{summary.get('error_count', 0)}`")
    lines.append(f"- **Warnings**: `{summary.get('warning_count', 0)}`\n")

    lines.append("## Pipeline Overview")
    if steps:
        for step_id, step in _sorted_items(steps):
            status = step.get("status", "unknown")
            kind = step.get("kind", "unknown")
            text = step.get("summary") or ""
            suffix = f": {text}" if text else ""
            lines.append(f"- **{step_id}** (`{kind}`) status `{status}`{suffix}")
    else:
        lines.append("No steps recorded in the Manifest.")
    lines.append("")

    for title, key in (("## Errors", "errors"), ("## Warnings", "warnings")):
        lines.append(title)
        items = summary.get(key) or []
        if items:
            lines.extend(_finding_line(f) for f in items)
        else:
            lines.append(f"No {key} recorded.")
        lines.append("")

    lines.append("## Generated Artifacts")
    artifacts = [
        (step_id, key, value)
        for step_id, step in _sorted_items(steps)
        for key, value in _sorted_items(step.get("artifacts"))
    ]
    if artifacts:
        for step_id, key, value in artifacts:
            lines.append(f"- **{key}**: `{value}` (produced_by: `{step_id}`)")
    else:
        lines.append("No artifacts recorded in Manifest steps.")
    lines.append("")

    lines.append("## Execution Metadata")
    lines.append("### run")
    lines.append("```json")
    lines.append(_as_pretty_json(run))
    lines.append("```")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines)
    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content
