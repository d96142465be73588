"""Generate temporary CUE modules that synthesize a #ModuleRelease for a target module."""

from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from string import Template

CATALOG_VERSION = "v1.3.4"
"""Pinned catalog version the synthesized modules depend on."""

CUE_LANGUAGE_VERSION = "v0.16.1"
"""CUE language version declared by synthesized modules."""

SYNTHESIS_MODULE = "opmodel.dev/controller/release@v0"
"""CUE module path of synthesized release packages."""

_MODULE_TEMPLATE = Template(
    'module: "$synthesis_module"\n'
    'language: version: "$language_version"\n'
    "deps: {\n"
    '\t"opmodel.dev/core/v1alpha1@v1": v: "$catalog_version"\n'
    '\t"$module_path": v: "$module_version"\n'
    "}\n"
)

_RELEASE_TEMPLATE = Template(
    "package release\n"
    "\n"
    "import (\n"
    '\tmr "opmodel.dev/core/v1alpha1/modulerelease@v1"\n'
    '\tmod "$module_path"\n'
    ")\n"
    "\n"
    "mr.#ModuleRelease\n"
    "\n"
    "metadata: {\n"
    '\tname:      "$name"\n'
    '\tnamespace: "$namespace"\n'
    "}\n"
    "\n"
    "#module: mod\n"
)


@dataclass(frozen=True)
class ReleaseParams:
    """Inputs for synthesizing a release package."""

    name: str = ""
    namespace: str = ""
    module_path: str = ""
    module_version: str = ""


def _validate(params: ReleaseParams) -> None:
    if not params.name:
        raise ValueError("name is required")
    if not params.namespace:
        raise ValueError("namespace is required")
    if not params.module_path:
        raise ValueError("module path is required")
    if not params.module_version:
        raise ValueError("module version is required")


def _write_module_file(directory: Path, params: ReleaseParams) -> None:
    mod_dir = directory / "cue.mod"
    mod_dir.mkdir(parents=True, exist_ok=True)
    (mod_dir / "module.cue").write_text(
        _MODULE_TEMPLATE.substitute(
            synthesis_module=SYNTHESIS_MODULE,
            language_version=CUE_LANGUAGE_VERSION,
            catalog_version=CATALOG_VERSION,
            module_path=params.module_path,
            module_version=params.module_version,
        ),
        encoding="utf-8",
    )


def _write_release_file(directory: Path, params: ReleaseParams) -> None:
    (directory / "release.cue").write_text(
        _RELEASE_TEMPLATE.substitute(
            module_path=params.module_path,
            name=params.name,
            namespace=params.namespace,
        ),
        encoding="utf-8",
    )


def synthesize_release(params: ReleaseParams) -> str:
    """Create a temporary CUE module that synthesizes a release and return its path.

    The directory holds cue.mod/module.cue and release.cue; the caller must
    remove it when done. Raises ValueError for missing parameters and OSError
    when the files cannot be written, in which case nothing is left behind.
    """
    _validate(params)

    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix="opm-release-"))
    except OSError as exc:
        raise OSError(f"creating temp directory: {exc}") from exc

    for label, writer in (
        ("writing module file", _write_module_file),
        ("writing release file", _write_release_file),
    ):
        try:
            writer(tmp_dir, params)
        except OSError as exc:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise OSError(f"{label}: {exc}") from exc

    return str(tmp_dir)