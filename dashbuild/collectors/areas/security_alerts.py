"""
Security Alert Areas

Dependabot, code scanning and secret scanning alerts. Each feature may be
disabled for a repository; the client turns those 404s into empty lists,
so a disabled feature reports zero counts rather than failing the run.
"""

from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import is_on_or_after

DEPENDABOT_LOGINS = {"dependabot[bot]", "dependabot"}
SEVERITIES = ["critical", "high", "medium", "low"]


def summarize_dependabot_alert(alert: dict[str, Any]) -> dict[str, Any]:
    advisory = alert.get("security_advisory") or {}
    dependency = alert.get("dependency") or {}
    package = dependency.get("package") or {}
    return {
        "number": alert.get("number"),
        "severity": advisory.get("severity") or "low",
        "package": package.get("name") or "unknown",
        "ecosystem": package.get("ecosystem") or "unknown",
        "cve": advisory.get("cve_id") or advisory.get("ghsa_id") or "N/A",
        "cvss": (advisory.get("cvss") or {}).get("score"),
        "summary": advisory.get("summary") or "No description",
        "createdAt": alert.get("created_at"),
        "url": alert.get("html_url"),
        "manifestPath": dependency.get("manifest_path") or "",
    }


class DependabotAlertsFetcher(AreaFetcher):
    """Open Dependabot alerts by severity, recent fixes and Dependabot PR flow."""

    name = "dependabot"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching Dependabot alerts...")
        alerts_path = f"{context.repo_path}/dependabot/alerts"
        recent_cutoff = context.days_ago(area_config.RECENT_FIX_DAYS)

        open_alerts = await context.client.fetch_paginated(
            f"{alerts_path}?state=open&sort=created&direction=desc", max_pages=area_config.ALERT_MAX_PAGES
        )
        fixed_alerts = await context.client.fetch_paginated(
            f"{alerts_path}?state=fixed&sort=updated&direction=desc", max_pages=area_config.SHORT_MAX_PAGES
        )
        fixed_recently = sum(1 for a in fixed_alerts if is_on_or_after(a.get("fixed_at"), recent_cutoff))

        alert_details = [summarize_dependabot_alert(alert) for alert in open_alerts]

        severity_counts = dict.fromkeys(SEVERITIES, 0)
        ecosystem_counts: dict[str, int] = {}
        for alert in alert_details:
            severity_counts[alert["severity"]] = severity_counts.get(alert["severity"], 0) + 1
            ecosystem_counts[alert["ecosystem"]] = ecosystem_counts.get(alert["ecosystem"], 0) + 1

        self.logger.info("Fetching Dependabot PRs...")
        all_prs = await context.client.fetch_paginated(
            f"{context.repo_path}/pulls?state=all&sort=updated&direction=desc",
            max_pages=area_config.ALERT_MAX_PAGES,
        )
        dependabot_prs = [pr for pr in all_prs if (pr.get("user") or {}).get("login") in DEPENDABOT_LOGINS]
        open_prs = [pr for pr in dependabot_prs if pr.get("state") == "open"]
        merged_recently = [pr for pr in dependabot_prs if is_on_or_after(pr.get("merged_at"), recent_cutoff)]

        pr_details = [
            {
                "number": pr.get("number"),
                "title": pr.get("title"),
                "state": "merged" if pr.get("merged_at") else pr.get("state"),
                "createdAt": pr.get("created_at"),
                "mergedAt": pr.get("merged_at"),
                "url": pr.get("html_url"),
            }
            for pr in dependabot_prs[: area_config.DEPENDABOT_PR_DETAIL_LIMIT]
        ]

        return AreaResult(
            metrics={
                "dependabot_critical": severity_counts["critical"],
                "dependabot_high": severity_counts["high"],
                "dependabot_medium": severity_counts["medium"],
                "dependabot_low": severity_counts["low"],
                "dependabot_total_open": len(open_alerts),
                "dependabot_fixed_30d": fixed_recently,
                "dependabot_prs_open": len(open_prs),
                "dependabot_prs_merged_30d": len(merged_recently),
            },
            details={
                "dependabotAlerts": alert_details,
                "dependabotPrs": pr_details,
                "severityCounts": severity_counts,
                "ecosystemCounts": ecosystem_counts,
            },
        )


def normalize_code_scanning_severity(rule: dict[str, Any]) -> str:
    """
    Collapse security and tool severities into error / warning / note.

    Example:
        >>> normalize_code_scanning_severity({"security_severity_level": "high"})
        'error'
    """
    severity = rule.get("security_severity_level") or rule.get("severity") or "note"
    if severity in ("critical", "high", "error"):
        return "error"
    if severity in ("medium", "warning"):
        return "warning"
    return "note"


def summarize_code_scanning_alert(alert: dict[str, Any]) -> dict[str, Any]:
    rule = alert.get("rule") or {}
    location = (alert.get("most_recent_instance") or {}).get("location")
    return {
        "number": alert.get("number"),
        "severity": normalize_code_scanning_severity(rule),
        "rule": rule.get("id") or "unknown",
        "tool": (alert.get("tool") or {}).get("name") or "unknown",
        "description": rule.get("description") or (alert.get("message") or {}).get("text") or "",
        "location": (
            {
                "path": location.get("path"),
                "startLine": location.get("start_line"),
                "endLine": location.get("end_line"),
            }
            if location
            else None
        ),
        "createdAt": alert.get("created_at"),
        "url": alert.get("html_url"),
    }


class CodeScanningFetcher(AreaFetcher):
    """Open static-analysis findings by normalised severity."""

    name = "code-scanning"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching code scanning alerts...")

        alerts = await context.client.fetch_paginated(
            f"{context.repo_path}/code-scanning/alerts?state=open&sort=created&direction=desc",
            max_pages=area_config.ALERT_MAX_PAGES,
        )
        alert_details = [summarize_code_scanning_alert(alert) for alert in alerts]
        counts = {"error": 0, "warning": 0, "note": 0}
        for alert in alert_details:
            counts[alert["severity"]] += 1

        return AreaResult(
            metrics={
                "code_scanning_errors": counts["error"],
                "code_scanning_warnings": counts["warning"],
                "code_scanning_notes": counts["note"],
                "code_scanning_total_open": len(alerts),
            },
            details={"codeScanningAlerts": alert_details},
        )


class SecretScanningFetcher(AreaFetcher):
    """Open and resolved leaked-secret alerts."""

    name = "secret-scanning"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching secret scanning alerts...")
        alerts_path = f"{context.repo_path}/secret-scanning/alerts"

        open_alerts = await context.client.fetch_paginated(
            f"{alerts_path}?state=open", max_pages=area_config.SHORT_MAX_PAGES
        )
        resolved_alerts = await context.client.fetch_paginated(
            f"{alerts_path}?state=resolved", max_pages=area_config.SHORT_MAX_PAGES
        )

        return AreaResult(
            metrics={
                "secret_scanning_open": len(open_alerts),
                "secret_scanning_resolved": len(resolved_alerts),
            },
            details={
                "secretScanningAlerts": [
                    {
                        "number": alert.get("number"),
                        "secretType": alert.get("secret_type_display_name") or alert.get("secret_type") or "unknown",
                        "createdAt": alert.get("created_at"),
                        "url": alert.get("html_url"),
                    }
                    for alert in open_alerts
                ]
            },
        )
