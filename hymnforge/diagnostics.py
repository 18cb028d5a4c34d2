"""Environment diagnostics for HymnForge.

Inspects the provider SDKs and stored keys so users get actionable
guidance ("set a Gemini key for cover art") instead of failures mid-call.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib.util
from typing import Dict, List, Optional

from .adapter import providers_for
from .keys import KeyManager
from .models import Operation


@dataclass
class CheckResult:
    """Represents a diagnostic check with status and human-readable detail."""

    name: str
    status: str  # ok | warn | error
    detail: str


def _module_available(module_name: str) -> bool:
    try:
        return importlib.util.find_spec(module_name) is not None
    except ModuleNotFoundError:
        # Parent package missing (e.g. "google" for "google.genai")
        return False


def _check_dependency(module: str, friendly: str, required: bool = False) -> CheckResult:
    available = _module_available(module)
    status = "ok" if available else ("error" if required else "warn")
    detail = f"{friendly} available" if available else f"{friendly} missing"
    return CheckResult(friendly, status, detail)


def _check_keys(km: KeyManager) -> List[CheckResult]:
    results = []
    for info in km.list_keys():
        if info.is_set:
            results.append(CheckResult(f"{info.service} key", "ok", f"From {info.source}"))
        else:
            results.append(CheckResult(
                f"{info.service} key",
                "warn",
                f"Not set; store with 'hymnforge keys set {info.service}'.",
            ))
    return results


def _check_active_provider(km: KeyManager) -> CheckResult:
    provider = km.get_provider()
    if km.get_key(provider):
        return CheckResult("Active provider", "ok", f"{provider} (key found)")
    return CheckResult(
        "Active provider",
        "error",
        f"{provider} selected but no key stored; every operation will fail.",
    )


def _check_cover_art(km: KeyManager) -> CheckResult:
    capable = providers_for(Operation.GENERATE_COVER_IMAGE)
    if any(km.get_key(name) for name in capable):
        return CheckResult("Cover art", "ok", "Image-capable key available")
    return CheckResult(
        "Cover art",
        "warn",
        f"Requires a {' or '.join(capable)} key regardless of the active provider.",
    )


def collect_diagnostics(km: Optional[KeyManager] = None) -> List[CheckResult]:
    """Run a series of lightweight checks and return their results."""
    km = km or KeyManager()

    checks: List[CheckResult] = []

    # Provider transports
    checks.append(_check_dependency("google.genai", "google-genai SDK", required=True))
    checks.append(_check_dependency("requests", "Requests", required=True))
    checks.append(_check_dependency("keyring", "Keyring"))

    # Configuration
    checks.extend(_check_keys(km))
    checks.append(_check_active_provider(km))
    checks.append(_check_cover_art(km))

    return checks


def summarize_checks(checks: List[CheckResult]) -> Dict[str, int]:
    summary = {"ok": 0, "warn": 0, "error": 0}
    for c in checks:
        if c.status in summary:
            summary[c.status] += 1
    return summary
