"""Lower layers never import the layers built on top of them."""

from __future__ import annotations

import pytest

from ._utils import iter_source_files, matches_prefix, parse_imports, rel_path

FORBIDDEN: dict[str, tuple[str, ...]] = {
    "core": ("tagger.platform", "tagger.git", "tagger.output", "tagger.release", "tagger.cli"),
    "platform": ("tagger.git", "tagger.output", "tagger.release", "tagger.cli"),
    "git": ("tagger.output", "tagger.release", "tagger.cli"),
    "release": ("tagger.cli",),
}


@pytest.mark.parametrize("layer", sorted(FORBIDDEN))
def test_layer_does_not_import_upward(layer: str) -> None:
    offenders: list[str] = []
    for file_path in iter_source_files():
        rel = rel_path(file_path)
        if rel.split("/", 1)[0] != layer:
            continue
        for item in parse_imports(file_path):
            for prefix in FORBIDDEN[layer]:
                if matches_prefix(item.module, prefix):
                    offenders.append(f"{rel}:{item.line}: imports {item.module}")

    assert not offenders, f"{layer} layer violations:\n" + "\n".join(offenders)
