from typing import Dict, List
from uuid import uuid4

from snapsolve.models.schema import TextNote
from snapsolve.ports.note_store import NoteStore


class InMemoryNoteStore(NoteStore):
    def __init__(self) -> None:
        self._notes: Dict[str, TextNote] = {}

    def add(self, text: str) -> TextNote:
        note = TextNote(id=uuid4().hex, text=text)
        self._notes[note.id] = note
        return note

    def remove(self, note_id: str) -> bool:
        return self._notes.pop(note_id, None) is not None

    def list_notes(self) -> List[TextNote]:
        # dicts keep insertion order
        return list(self._notes.values())
