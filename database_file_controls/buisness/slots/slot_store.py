"""
Slot Store
Fixed-capacity array of file slots for one attachment form session.

Each slot holds either nothing or a (file id, file name) pair. The store is the
authoritative record of which stored files are attached in the current form
session; the hosting form carries it across round trips through hidden fields
(see to_form_fields / from_form) or any other session mechanism (to_list /
from_list).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Mapping, NamedTuple, Optional

from database_file_controls.buisness.errors import SlotUsageError
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.buisness.slots")

FILE_ID_FIELD = 'fileId_{index}'
FILE_NAME_FIELD = 'fileName_{index}'


class AttachmentReference(NamedTuple):
    """A stored file known by id and original name."""
    file_id: int
    file_name: str


class OccupiedSlot(NamedTuple):
    index: int
    file_id: int
    file_name: str


@dataclass
class Slot:
    """One fixed position in the store. Occupied iff both id and name are set."""
    file_id: Optional[int] = None
    file_name: Optional[str] = None

    @property
    def occupied(self) -> bool:
        return bool(self.file_id) and bool(self.file_name)

    def fill(self, file_id: int, file_name: str):
        self.file_id = file_id
        self.file_name = file_name

    def clear(self):
        self.file_id = None
        self.file_name = None


class SlotStore:
    """
    Fixed number of slots, addressed by index.

    Invariants:
    - the number of slots never changes after construction
    - a slot is either empty or holds both an id and a name
    - no two occupied slots hold the same file id
    """

    def __init__(self, max_files: int):
        if max_files < 0:
            raise ValueError(f"max_files must be zero or more, got {max_files}")
        self._slots: List[Slot] = [Slot() for _ in range(max_files)]

    @property
    def max_files(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self):
        return f'<SlotStore {self.occupied_count()}/{self.max_files}>'

    def slot(self, index: int) -> Slot:
        """Return the slot at ``index``; out of range is a usage error."""
        if not isinstance(index, int) or index < 0 or index >= self.max_files:
            raise SlotUsageError(
                f"Slot index {index!r} is outside the range 0..{self.max_files - 1}"
            )
        return self._slots[index]

    # Queries

    def occupied_slots(self) -> Iterator[OccupiedSlot]:
        """Yield (index, file_id, file_name) for every occupied slot in index order."""
        for index, slot in enumerate(self._slots):
            if slot.occupied:
                yield OccupiedSlot(index, slot.file_id, slot.file_name)

    def occupied_count(self) -> int:
        return sum(1 for _ in self.occupied_slots())

    def free_count(self) -> int:
        return self.max_files - self.occupied_count()

    def find_free_slot(self) -> Optional[int]:
        """Lowest index holding no file, or None when every slot is occupied."""
        for index, slot in enumerate(self._slots):
            if not slot.occupied:
                return index
        return None

    def free_slot_exists(self) -> bool:
        return self.find_free_slot() is not None

    def contains(self, file_id: int) -> bool:
        return any(occupied.file_id == file_id for occupied in self.occupied_slots())

    def file_id_at(self, index: int) -> int:
        """File id held at ``index``. Empty slots are a usage error."""
        slot = self.slot(index)
        if not slot.occupied:
            raise SlotUsageError(f"Slot {index} does not hold a file")
        return slot.file_id

    def references(self) -> List[AttachmentReference]:
        """Occupied slots as (file_id, file_name) pairs, in slot order."""
        return [AttachmentReference(o.file_id, o.file_name) for o in self.occupied_slots()]

    # Mutators

    def add(self, file_id: int, file_name: str):
        """
        Put a file into the lowest free slot.

        Adding an id that is already held anywhere in the store does nothing,
        and so does adding to a full store.
        """
        if self.contains(file_id):
            logger.debug(f"File {file_id} already attached, not adding again")
            return

        index = self.find_free_slot()
        if index is None:
            logger.debug(f"No free slot for file {file_id}, ignoring add")
            return

        self._slots[index].fill(file_id, file_name)
        logger.debug(f"Attached file {file_id} ({file_name}) in slot {index}")

    def remove_by_id(self, file_id: int):
        """Clear every slot holding ``file_id``. Unknown ids are ignored."""
        for index, slot in enumerate(self._slots):
            if slot.occupied and slot.file_id == file_id:
                slot.clear()
                logger.debug(f"Cleared slot {index} (file {file_id})")

    def populate_from(self, attachments: Iterable):
        """
        Add each (file_id, file_name) pair in iteration order.

        Pairs beyond the store's capacity are dropped.
        """
        for file_id, file_name in attachments:
            if not self.free_slot_exists():
                logger.warning(f"Dropping file {file_id} ({file_name}): all {self.max_files} slots in use")
                continue
            self.add(int(file_id), file_name)

    # Round-trip state

    def to_form_fields(self) -> dict:
        """Hidden field values for every slot; free slots carry empty strings."""
        fields = {}
        for index, slot in enumerate(self._slots):
            occupied = slot.occupied
            fields[FILE_ID_FIELD.format(index=index)] = str(slot.file_id) if occupied else ''
            fields[FILE_NAME_FIELD.format(index=index)] = slot.file_name if occupied else ''
        return fields

    @classmethod
    def from_form(cls, form: Mapping, max_files: int) -> 'SlotStore':
        """
        Rebuild a store from posted hidden fields, keeping each file in the slot it was in.

        A slot whose id is not a positive integer or whose name is blank comes back empty.
        """
        store = cls(max_files)
        for index in range(max_files):
            raw_id = (form.get(FILE_ID_FIELD.format(index=index)) or '').strip()
            file_name = (form.get(FILE_NAME_FIELD.format(index=index)) or '').strip()
            if not raw_id and not file_name:
                continue

            file_id = _parse_file_id(raw_id)
            if file_id is None or not file_name:
                logger.warning(f"Ignoring incomplete slot {index} in posted state (id={raw_id!r})")
                continue
            if store.contains(file_id):
                logger.warning(f"Ignoring duplicate file {file_id} in posted slot {index}")
                continue

            store._slots[index].fill(file_id, file_name)
        return store

    def to_list(self) -> list:
        """JSON-safe copy of the slots: [file_id, file_name] or None per slot."""
        return [[slot.file_id, slot.file_name] if slot.occupied else None for slot in self._slots]

    @classmethod
    def from_list(cls, max_files: int, items: Optional[list]) -> 'SlotStore':
        form = {}
        for index, item in enumerate((items or [])[:max_files]):
            if item:
                form[FILE_ID_FIELD.format(index=index)] = str(item[0])
                form[FILE_NAME_FIELD.format(index=index)] = item[1]
        return cls.from_form(form, max_files)


def _parse_file_id(raw_id: str) -> Optional[int]:
    try:
        file_id = int(raw_id)
    except (TypeError, ValueError):
        return None
    return file_id if file_id > 0 else None
