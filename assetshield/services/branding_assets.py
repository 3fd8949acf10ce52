# -*- coding: utf-8 -*-
"""
Per-tenant stylesheet and PWA manifest generation.
"""
import re
from typing import Optional

from assetshield.services.domain_resolver import Branding

# Color tokens are stored unvalidated; only CSS-safe values are emitted
_CSS_VALUE_RE = re.compile(r"^[#a-zA-Z0-9(),.%\s-]{1,64}$")

DEFAULT_MANIFEST = {
    "name": "AssetShield App - Asset Protection Platform",
    "short_name": "AssetShield",
    "description": "Complete asset protection platform for individuals and law firms",
    "start_url": "/",
    "display": "standalone",
    "background_color": "#1e40af",
    "theme_color": "#1e40af",
    "orientation": "portrait",
    "categories": ["business", "finance", "productivity"],
    "lang": "en",
    "dir": "ltr",
    "icons": [
        {
            "src": "/static/icons/icon-192x192.png",
            "sizes": "192x192",
            "type": "image/png",
            "purpose": "maskable any",
        },
        {
            "src": "/static/icons/icon-512x512.png",
            "sizes": "512x512",
            "type": "image/png",
            "purpose": "maskable any",
        },
    ],
}


def _css_value(value: str, fallback: str) -> str:
    return value if value and _CSS_VALUE_RE.match(value) else fallback


def _css_comment(text: str) -> str:
    return text.replace("*/", "* /")


def white_label_css(branding: Optional[Branding]) -> str:
    """CSS custom properties plus utility-class overrides for a tenant."""
    if branding is None or not branding.is_white_label:
        return "/* Default AssetShield branding */\n"

    primary = _css_value(branding.primary_color, "#2563eb")
    secondary = _css_value(branding.secondary_color, "#1d4ed8")
    accent = _css_value(branding.accent_color, "#10b981")

    return f"""/* White-label CSS for {_css_comment(branding.firm_name)} */
:root {{
  --primary-color: {primary};
  --secondary-color: {secondary};
  --accent-color: {accent};
}}

.bg-blue-600 {{ background-color: {primary} !important; }}
.bg-blue-700 {{ background-color: {secondary} !important; }}
.text-blue-600 {{ color: {primary} !important; }}
.text-blue-700 {{ color: {secondary} !important; }}
.border-blue-500 {{ border-color: {primary} !important; }}
.border-blue-600 {{ border-color: {primary} !important; }}

.from-blue-600 {{ --tw-gradient-from: {primary} !important; }}
.to-indigo-600 {{ --tw-gradient-to: {secondary} !important; }}
.from-blue-700 {{ --tw-gradient-from: {secondary} !important; }}
.to-indigo-700 {{ --tw-gradient-to: {accent} !important; }}

.text-green-600 {{ color: {accent} !important; }}
.bg-green-600 {{ background-color: {accent} !important; }}

.focus\\:border-blue-500:focus {{ border-color: {primary} !important; }}
.focus\\:ring-blue-500:focus {{ --tw-ring-color: {primary} !important; }}
"""


def white_label_manifest(branding: Optional[Branding]) -> dict:
    manifest = dict(DEFAULT_MANIFEST)
    if branding is None or not branding.is_white_label:
        return manifest

    color = _css_value(branding.primary_color, DEFAULT_MANIFEST["theme_color"])
    manifest.update({
        "name": f"{branding.firm_name} - Asset Protection Platform",
        "short_name": branding.firm_name,
        "description": branding.firm_description
        or f"Professional asset protection services by {branding.firm_name}",
        "background_color": color,
        "theme_color": color,
    })
    return manifest
