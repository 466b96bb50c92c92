"""Helpers shared by the built-in capabilities."""

import html
from typing import Any, Dict, List

from blockapi.modules.capability import ModuleUnavailableError


def require_services(context):
    """Service locator of a request, or 503 when running without one."""
    if context.services is None:
        raise ModuleUnavailableError("Runtime services not available")
    return context.services


def endpoint_entries(registry) -> List[Dict[str, Any]]:
    """Discovery entries for every registered definition, sorted by display text."""
    entries = [definition.describe() for definition in registry.list()]
    entries.sort(key=lambda entry: (entry["text"].casefold(), entry["opcode"]))
    return entries


def render_index(entries: List[Dict[str, Any]], version: str) -> str:
    """HTML page listing the registered endpoints."""
    rows = []
    for entry in entries:
        rows.append(
            "<tr>"
            f"<td>{entry['method']}</td>"
            f"<td><code>{html.escape(entry['path'])}</code></td>"
            f"<td>{html.escape(entry['text'])}</td>"
            f"<td>{'yes' if entry['requiresAuth'] else 'no'}</td>"
            "</tr>"
        )
    return (
        "<!DOCTYPE html>\n"
        "<html><head><meta charset=\"utf-8\"><title>blockapi</title></head><body>"
        f"<h1>blockapi {html.escape(version)}</h1>"
        f"<p>{len(entries)} endpoints registered. "
        "Machine readable list: <a href=\"/listEndpoints\">/listEndpoints</a></p>"
        "<table><thead><tr><th>Method</th><th>Path</th><th>Block</th><th>Auth</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        "</body></html>"
    )
