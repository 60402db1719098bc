from database_file_controls.buisness.slots.slot_store import (
    AttachmentReference,
    OccupiedSlot,
    Slot,
    SlotStore,
)
from database_file_controls.buisness.slots.signed_state import STATE_FIELD, SlotStateSigner

__all__ = ['AttachmentReference', 'OccupiedSlot', 'Slot', 'SlotStore', 'STATE_FIELD', 'SlotStateSigner']
