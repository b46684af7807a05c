"""Collision-aware output writer.

Content is staged in a temporary file beside its destination, compared
with whatever is already there, and moved into place with an atomic
rename only when the run policy (or the user, when prompted) allows it.
"""

from __future__ import annotations

import difflib
import enum
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from rich.console import Console
from rich.markup import escape

from gatherer_scraper.errors import WriteError
from gatherer_scraper.models import RunPolicy

logger = logging.getLogger(__name__)

HELP_TEXT = """\
y - yes, overwrite
n - no, do not overwrite
a - all, overwrite this and all others
q - quit, abort
d - diff, show the differences between the old and the new
h - help, show this help"""


class WriteStatus(str, enum.Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


@dataclass
class WriteResult:
    """Outcome of one write: WRITTEN, or SKIPPED with a reason."""

    path: Path
    status: WriteStatus
    reason: str = ""

    @property
    def written(self) -> bool:
        return self.status is WriteStatus.WRITTEN


class ConflictState(enum.Enum):
    PROMPTING = "prompting"
    DIFFING = "diffing"
    REPLACING = "replacing"
    SKIPPING = "skipping"
    QUIT_REQUESTED = "quit_requested"


class Choice(enum.Enum):
    YES = "y"
    NO = "n"
    ALL = "a"
    QUIT = "q"
    DIFF = "d"
    HELP = "h"


CHOICES: Dict[str, Choice] = {}
for _choice in Choice:
    CHOICES[_choice.value] = _choice
    CHOICES[_choice.name.lower()] = _choice


def parse_choice(answer: str) -> Choice:
    """Map a typed answer to a choice; anything unrecognized means help."""
    return CHOICES.get(answer.strip().lower(), Choice.HELP)


class OutputWriter:
    """Writes rendered files according to a shared RunPolicy."""

    def __init__(
        self,
        policy: RunPolicy,
        console: Optional[Console] = None,
        prompt: Optional[Callable[[str], str]] = None,
        quiet: bool = False,
    ) -> None:
        self.policy = policy
        self._console = console or Console()
        self._prompt = prompt or self._console.input
        self._quiet = quiet

    def _status(self, message: str) -> None:
        if not self._quiet:
            self._console.print(message)

    def write(self, destination: Union[str, Path], content: str) -> WriteResult:
        """Write ``content`` to ``destination`` unless policy or user says otherwise.

        Raises WriteError when the staged or final file cannot be written.
        """
        dest = Path(destination)
        if self.policy.pretend:
            self._status(f"Pretend: would write {escape(str(dest))}")
            return WriteResult(dest, WriteStatus.SKIPPED, "pretend")

        stage = self._stage(dest, content)
        try:
            return self._commit(dest, stage)
        finally:
            if stage.exists():
                stage.unlink()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _stage(self, dest: Path, content: str) -> Path:
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=dest.parent,
                prefix=f".{dest.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp:
                temp.write(content.encode("utf-8"))
        except OSError as exc:
            raise WriteError(dest, f"staging failed: {exc}") from exc
        return Path(temp.name)

    def _commit(self, dest: Path, stage: Path) -> WriteResult:
        if not dest.exists():
            self._replace(dest, stage)
            self._status(f"Created {escape(str(dest))}")
            return WriteResult(dest, WriteStatus.WRITTEN, "created")

        if _identical(stage, dest):
            self._status(f"{escape(str(dest))} is identical, ignoring.")
            return WriteResult(dest, WriteStatus.SKIPPED, "identical")

        if self.policy.skip:
            self._status(f"{escape(str(dest))} exists, skipping.")
            return WriteResult(dest, WriteStatus.SKIPPED, "exists")

        if self.policy.force:
            self._replace(dest, stage)
            self._status(f"Overwrote {escape(str(dest))}")
            return WriteResult(dest, WriteStatus.WRITTEN, "forced")

        return self._resolve_conflict(dest, stage)

    def _resolve_conflict(self, dest: Path, stage: Path) -> WriteResult:
        """Ask the user what to do with an existing, different destination."""
        state = ConflictState.PROMPTING
        question = (
            f'Warning: "{dest}" already exists. Force overwrite? '
            f'(enter "h" for help) [ynaqdh] '
        )

        while True:
            if state is ConflictState.PROMPTING:
                try:
                    answer = self._prompt(escape(question))
                except EOFError:
                    answer = Choice.QUIT.value
                choice = parse_choice(answer)
                if choice is Choice.YES:
                    state = ConflictState.REPLACING
                elif choice is Choice.ALL:
                    self.policy.force = True
                    state = ConflictState.REPLACING
                elif choice is Choice.NO:
                    state = ConflictState.SKIPPING
                elif choice is Choice.QUIT:
                    state = ConflictState.QUIT_REQUESTED
                elif choice is Choice.DIFF:
                    state = ConflictState.DIFFING
                else:
                    self._console.print(HELP_TEXT, markup=False, highlight=False)

            elif state is ConflictState.DIFFING:
                self._console.print()
                self._console.print(render_diff(dest, stage), markup=False, highlight=False)
                self._console.print()
                state = ConflictState.PROMPTING

            elif state is ConflictState.REPLACING:
                self._console.print(f"Overwriting {escape(str(dest))}.")
                self._replace(dest, stage)
                return WriteResult(dest, WriteStatus.WRITTEN, "confirmed")

            elif state is ConflictState.SKIPPING:
                self._console.print(f"Skipping {escape(str(dest))}.")
                return WriteResult(dest, WriteStatus.SKIPPED, "declined")

            elif state is ConflictState.QUIT_REQUESTED:
                self._console.print(f"Skipping {escape(str(dest))} and exiting.")
                self.policy.quit_requested = True
                return WriteResult(dest, WriteStatus.SKIPPED, "quit")

    def _replace(self, dest: Path, stage: Path) -> None:
        try:
            if dest.exists():
                shutil.copymode(dest, stage)
            else:
                os.chmod(stage, 0o644)
            os.replace(stage, dest)
        except OSError as exc:
            raise WriteError(dest, str(exc)) from exc
        logger.debug("Wrote %s", dest)


def _identical(stage: Path, dest: Path) -> bool:
    if dest.is_dir():
        return False
    try:
        return stage.read_bytes() == dest.read_bytes()
    except OSError as exc:
        raise WriteError(dest, f"could not compare with existing file: {exc}") from exc


def render_diff(dest: Path, stage: Path) -> str:
    """Unified diff from the existing destination to the staged content."""
    old = dest.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)
    new = stage.read_text(encoding="utf-8", errors="replace").splitlines(keepends=True)
    return "".join(
        difflib.unified_diff(old, new, fromfile=str(dest), tofile=f"{dest} (new)")
    )
