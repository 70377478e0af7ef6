"""
Contract Change Reporting
==========================
Turns a SchemaDrift into something people can act on: a structured dict for
APIs and dashboards, plus a plain-English narrative for logs and terminals.
"""

from typing import Any, Dict, List, Optional

from schema_sentinel.utils.changes import Change, ChangeType, Severity

_SEVERITY_ICONS = {
    Severity.BREAKING: "🔴 BREAKING",
    Severity.ADDITIVE: "🟢 ADDITIVE",
    Severity.ADVISORY: "🔵 ADVISORY",
}

# Field name fragments → what the field is usually about
_FIELD_CONTEXT = {
    "id": "unique identifiers",
    "uuid": "unique identifiers",
    "email": "email addresses",
    "name": "display names",
    "price": "pricing information",
    "amount": "monetary values",
    "total": "totals/aggregates",
    "status": "status tracking",
    "created": "creation timestamps",
    "updated": "update timestamps",
    "url": "links/URLs",
    "token": "authentication tokens",
    "error": "error handling",
    "items": "list items",
}


def _field_name(path: str) -> str:
    """Last field name of a path like ``data.items[].price``."""
    return path.replace("[]", "").rsplit(".", 1)[-1] or path


def _field_context(path: str) -> Optional[str]:
    lower = _field_name(path).lower()
    for fragment, context in _FIELD_CONTEXT.items():
        if fragment in lower:
            return context
    return None


class ContractChangeReporter:

    # Action recommendations per change type
    _ACTIONS = {
        ChangeType.FIELD_REMOVED:
            "Search your codebase for references to this field. Add fallback "
            "defaults or remove the dependency.",

        ChangeType.TYPE_CHANGED:
            "Check all comparisons and arithmetic using this field. Update "
            "client models and add runtime type guards.",

        ChangeType.NOW_NULLABLE:
            "Add null-checks everywhere this field is accessed to prevent "
            "runtime errors.",

        ChangeType.REQUIRED_NOW_OPTIONAL:
            "Treat this field as optional in client models and handle its "
            "absence explicitly.",

        ChangeType.ENUM_VALUE_REMOVED:
            "Remove or migrate code paths that branch on this value.",

        ChangeType.FIELD_ADDED:
            "No immediate action required. Update client models to include "
            "this field so it can be used by consumers.",

        ChangeType.ENUM_VALUE_ADDED:
            "Make sure switch/match statements over this field have a "
            "default branch.",

        ChangeType.FORMAT_CHANGED:
            "Verify parsers for this field still accept the new format.",

        ChangeType.OPTIONAL_NOW_REQUIRED:
            "No action required. The field may be treated as always present.",
    }

    def generate(self, drift) -> Dict[str, Any]:
        """
        Build the report for one drift.

        Returns:
            {
                "endpoint":  str,
                "summary":   str,
                "severity":  "BREAKING" | "ADDITIVE" | "ADVISORY",
                "breaking":  int,
                "additive":  int,
                "advisory":  int,
                "changes":   [{ change_type, severity, path, description, action, ... }],
                "narrative": str
            }
        """
        changes = self._ordered(drift.changes)
        counts = self._counts(changes)

        change_dicts = []
        for change in changes:
            d = change.to_dict()
            d["action"] = self._ACTIONS.get(change.change_type, "Review the impact manually.")
            change_dicts.append(d)

        return {
            "endpoint":  drift.endpoint,
            "summary":   self._build_summary(drift.endpoint, counts),
            "severity":  drift.severity.value,
            "breaking":  counts[Severity.BREAKING],
            "additive":  counts[Severity.ADDITIVE],
            "advisory":  counts[Severity.ADVISORY],
            "changes":   change_dicts,
            "narrative": self._build_narrative(drift.endpoint, changes, counts),
        }

    @staticmethod
    def _ordered(changes) -> List[Change]:
        # Stable: detection order is kept within each severity
        return sorted(changes, key=lambda c: -c.severity.rank)

    @staticmethod
    def _counts(changes: List[Change]) -> Dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for change in changes:
            counts[change.severity] += 1
        return counts

    def _build_summary(self, endpoint: str, counts: Dict[Severity, int]) -> str:
        parts = [f"{n} {severity.value.lower()}" for severity, n in counts.items() if n]
        label = endpoint or "unknown endpoint"
        return f"{label}: {', '.join(parts)}" if parts else f"{label}: no changes"

    def _build_narrative(self, endpoint: str, changes: List[Change], counts: Dict[Severity, int]) -> str:
        ep_label = f" for `{endpoint}`" if endpoint else ""

        if not changes:
            return f"✅ No contract changes detected{ep_label}."

        lines = [
            f"⚠️  Contract Change Report{ep_label}",
            f"   {len(changes)} change(s): "
            f"{counts[Severity.BREAKING]} breaking · {counts[Severity.ADDITIVE]} additive · "
            f"{counts[Severity.ADVISORY]} advisory",
            "",
        ]

        for idx, change in enumerate(changes, start=1):
            lines.append(f"  {idx}. {_SEVERITY_ICONS[change.severity]}: {change.description}")
            context = _field_context(change.path)
            if context:
                lines.append(f"     → This field is related to {context}.")
            lines.append(f"     📍 Path:   {change.path}")
            lines.append(f"     🔧 Action: {self._ACTIONS.get(change.change_type, 'Review manually.')}")
            lines.append("")

        breaking = [c for c in changes if c.severity is Severity.BREAKING]
        if breaking:
            lines.append("━" * 56)
            lines.append(f"🚨 {len(breaking)} BREAKING change(s) require immediate attention.")
            lines.append(f"   Affected paths: {', '.join(c.path for c in breaking)}")

        return "\n".join(lines)
