"""Manifest serialisation for the supported client formats.

``yaml_like`` is a literal template, not a YAML serialiser: legacy
clients parse it by fixed structure, so key order, indentation and
quoting must stay byte-exact. Contents are not validated or escaped.
"""

from __future__ import annotations

import json
from enum import Enum

from updatecast.models.manifest import UpdateManifest


class ResponseFormat(str, Enum):
    """Wire formats a manifest can be rendered in."""

    JSON = "json"
    YAML_LIKE = "yaml_like"


CONTENT_TYPES: dict[ResponseFormat, str] = {
    ResponseFormat.JSON: "application/json",
    ResponseFormat.YAML_LIKE: "text/yaml; charset=utf-8",
}

_YAML_TEMPLATE = """\
version: {version}
files:
  - url: {path}
    sha512: {sha512}
    size: {size}
path: {path}
sha512: {sha512}
releaseDate: '{release_date}'
releaseName: '{release_name}'
releaseNotes: '{release_notes}'"""


def render_json(manifest: UpdateManifest) -> str:
    """Full manifest with absolute URLs in each file entry."""
    payload = manifest.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, ensure_ascii=False)


def render_yaml_like(manifest: UpdateManifest) -> str:
    """Fill the ``latest.yml`` template; urls are bare file names."""
    size = manifest.files[0].size if manifest.files else ""
    return _YAML_TEMPLATE.format(
        version=manifest.version,
        path=manifest.path,
        sha512=manifest.sha512,
        size=size,
        release_date=manifest.release_date,
        release_name=manifest.release_name,
        release_notes=manifest.release_notes,
    )


def render(manifest: UpdateManifest, fmt: ResponseFormat | str) -> tuple[bytes, str]:
    """Serialise ``manifest`` and return ``(body, content_type)``."""
    fmt = ResponseFormat(fmt)
    if fmt is ResponseFormat.JSON:
        text = render_json(manifest)
    else:
        text = render_yaml_like(manifest)
    return text.encode("utf-8"), CONTENT_TYPES[fmt]
