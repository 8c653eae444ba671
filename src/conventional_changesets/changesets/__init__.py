"""
Changeset records: assembly, deduplication and persistence.

:mod:`~conventional_changesets.changesets.assembler` turns logical units
into changesets and drops those already recorded;
:mod:`~conventional_changesets.changesets.storage` reads and writes the
Markdown files of the ``.changeset`` directory.
"""

from .assembler import build_changesets, difference, select_new_changesets  # noqa: F401
from .model import Changeset, Release, changesets_equal  # noqa: F401
from .storage import ChangesetFormatError, read_changesets, write_changeset  # noqa: F401
