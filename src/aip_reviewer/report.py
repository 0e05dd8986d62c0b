"""Render review and fix results for people and machines."""

from aip_reviewer.models import FixResult, FixSummary, ReviewResult, Severity

SEVERITY_ORDER = (Severity.ERROR, Severity.WARNING, Severity.SUGGESTION)


def _plural(count: int, noun: str, plural: str | None = None) -> str:
    return f"{count} {noun if count == 1 else plural or noun + 's'}"


def format_text(result: ReviewResult) -> str:
    """Plain-text report grouped by (effective) severity."""
    title = result.spec_title or result.spec_path
    lines = [f"Review of {title}"]
    if result.spec_version:
        lines[0] += f" (version {result.spec_version})"
    if result.spec_title:
        lines.append(f"File: {result.spec_path}")

    for severity in SEVERITY_ORDER:
        group = [f for f in result.findings if result.effective_severity(f) is severity]
        if not group:
            continue
        lines.append("")
        lines.append(f"{severity.value.upper()}S ({len(group)})")
        for finding in group:
            marker = " [fixable]" if finding.fix is not None else ""
            lines.append(f"  {finding.rule_id}  {finding.path}{marker}")
            lines.append(f"    {finding.message}")
            if finding.suggestion:
                lines.append(f"    -> {finding.suggestion}")

    summary = result.summary
    lines.append("")
    counts = ", ".join([
        _plural(summary.errors, "error"),
        _plural(summary.warnings, "warning"),
        _plural(summary.suggestions, "suggestion"),
    ])
    if summary.strict:
        counts += " (strict: warnings counted as errors)"
    lines.append(f"Summary: {counts}")
    if summary.by_category:
        parts = [f"{name}={count}" for name, count in sorted(summary.by_category.items())]
        lines.append(f"By category: {' '.join(parts)}")
    if not result.findings:
        lines.append("No issues found.")
    return "\n".join(lines) + "\n"


def format_json(result: ReviewResult) -> str:
    return result.to_json() + "\n"


def format_fix_report(results: list[FixResult], summary: FixSummary, dry_run: bool = False) -> str:
    lines = []
    for result in results:
        status = "applied" if result.applied else "failed"
        if dry_run and result.applied:
            status = "would apply"
        kind = result.fix_type.value if result.fix_type else "-"
        lines.append(f"  {status:<11} {result.rule_id} ({kind})")
        for outcome in result.changes:
            if outcome.error and not outcome.skipped:
                lines.append(f"      {outcome.change.describe()}: {outcome.error}")
    verb = "would be applied" if dry_run else "applied"
    lines.append(
        f"{_plural(summary.applied, 'fix', 'fixes')} {verb}, {summary.failed} failed, "
        f"{_plural(summary.changes, 'change')} attempted"
    )
    return "\n".join(lines) + "\n"
