import random

import pytest

from conventional_changesets.changesets.model import Changeset, Release
from conventional_changesets.changesets.storage import (
    ChangesetFormatError,
    format_changeset,
    generate_changeset_id,
    parse_changeset,
    read_changesets,
    write_changeset,
)
from conventional_changesets.release.rules import Severity


def test_format_changeset():
    changeset = Changeset(
        releases=[Release("@scope/a", Severity.MINOR), Release("b", Severity.MINOR)],
        summary="feat: add X\n",
    )

    assert format_changeset(changeset) == '---\n"@scope/a": minor\n"b": minor\n---\n\nfeat: add X\n'


def test_parse_changeset():
    content = '---\n"package2": patch\n---\n\nfix: fix a bug\n'

    changeset = parse_changeset(content)

    assert changeset == Changeset(releases=[Release("package2", Severity.PATCH)], summary="fix: fix a bug")


def test_parse_empty_front_matter_and_none_bump():
    assert parse_changeset("---\n---\n\nnothing to release\n").releases == []
    assert parse_changeset('---\n"a": none\n---\n\nx\n').releases == [Release("a", "none")]


@pytest.mark.parametrize(
    "content",
    [
        "no front matter",
        '---\n"a": huge\n---\n\nx\n',
        "---\n- a\n- b\n---\n\nx\n",
        "---\n\"a\": [unclosed\n---\n\nx\n",
    ],
)
def test_parse_invalid(content):
    with pytest.raises(ChangesetFormatError):
        parse_changeset(content)


def test_read_changesets_missing_directory(tmp_path):
    assert read_changesets(tmp_path) == []


def test_write_then_read(tmp_path):
    directory = tmp_path / ".changeset"
    directory.mkdir()
    (directory / "README.md").write_text("# Changesets\n")
    (directory / "config.json").write_text("{}")
    changeset = Changeset(releases=[Release("package1", Severity.MAJOR)], summary="feat!: break API\n\nDetails.\n")

    changeset_id = write_changeset(changeset, tmp_path, rng=random.Random(1))

    assert (directory / f"{changeset_id}.md").exists()
    assert read_changesets(tmp_path) == [
        Changeset(releases=[Release("package1", Severity.MAJOR)], summary="feat!: break API\n\nDetails.")
    ]


def test_write_avoids_existing_ids(tmp_path):
    taken = generate_changeset_id(random.Random(7))
    (tmp_path / ".changeset").mkdir()
    (tmp_path / ".changeset" / f"{taken}.md").write_text("---\n---\n")

    changeset_id = write_changeset(Changeset(releases=[], summary="x"), tmp_path, rng=random.Random(7))

    assert changeset_id != taken


def test_changeset_id_shape():
    parts = generate_changeset_id(random.Random(3)).split("-")

    assert len(parts) == 3
    assert all(part.isalpha() for part in parts)
