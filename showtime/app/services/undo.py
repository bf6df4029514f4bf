"""
Undo Engine

Pops the most recent undo entry of the active snapshot and applies its
inverse. Undoing never records a new entry; an empty stack is a no-op.
"""

import logging
from typing import Optional

from showtime.app.schemas.schedules import (
    EditEntry, EditFilmEntry, HideEntry, ManualInsertEntry, MoveAuditoriumEntry, UndoEntry,
)
from showtime.app.services.editor import ScheduleEditor

logger = logging.getLogger(__name__)


class UndoEngine:

    def __init__(self, editor: ScheduleEditor):
        self.editor = editor

    def undo(self) -> Optional[UndoEntry]:
        """Revert one step. Returns the entry that was undone, or None."""
        stack = self.editor.snapshot.undo_stack
        if not stack:
            return None

        entry = stack.pop()
        if isinstance(entry, EditEntry):
            self.editor.write_override(entry.show_id, start=entry.previous_start)
        elif isinstance(entry, HideEntry):
            self._restore_hidden(entry)
        elif isinstance(entry, ManualInsertEntry):
            self._remove_manual(entry)
        elif isinstance(entry, MoveAuditoriumEntry):
            self._restore_auditorium(entry)
        elif isinstance(entry, EditFilmEntry):
            self._restore_film(entry)

        logger.debug("Undid %s", entry.kind)
        return entry

    def _restore_hidden(self, entry: HideEntry):
        hidden = self.editor.snapshot.hidden
        if entry.previous_hidden:
            hidden.add(entry.show_id)
        else:
            hidden.discard(entry.show_id)

    def _remove_manual(self, entry: ManualInsertEntry):
        snapshot = self.editor.snapshot
        snapshot.manual_shows = [ms for ms in snapshot.manual_shows if ms.id != entry.show.id]

    def _restore_auditorium(self, entry: MoveAuditoriumEntry):
        idx = self.editor.manual_index(entry.show_id)
        if idx is not None:
            self.editor.move_manual(idx, entry.previous_aud_id)
            return

        base = self.editor.base_show(entry.show_id)
        base_aud_id = base.aud_id if base else None
        if entry.previous_aud_id is None or entry.previous_aud_id == base_aud_id:
            self.editor.clear_override_field(entry.show_id, "aud_id")
        else:
            self.editor.write_override(entry.show_id, aud_id=entry.previous_aud_id)

    def _restore_film(self, entry: EditFilmEntry):
        idx = self.editor.manual_index(entry.show_id)
        if idx is not None:
            # None clears the film when it was unset or has since been deleted
            film = self.editor.catalog.film_by_id(entry.previous_film_id)
            self.editor.retarget_manual_film(idx, film)
            return

        base = self.editor.base_show(entry.show_id)
        base_film_id = base.film_id if base else None
        if not entry.previous_film_id or entry.previous_film_id == base_film_id:
            self.editor.clear_override_field(entry.show_id, "film_id")
        else:
            self.editor.write_override(entry.show_id, film_id=entry.previous_film_id)
