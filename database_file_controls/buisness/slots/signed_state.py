"""
Signed slot state

The slot store travels to the browser and back in hidden fields. Alongside the
readable fileId_{i}/fileName_{i} pairs the page carries a signed copy of the
same slots; a postback is only accepted when the pairs match the signed copy,
so a user cannot put another item's file ids into the form.
"""

from __future__ import annotations

from typing import Mapping

from itsdangerous import BadSignature, URLSafeSerializer

from database_file_controls.buisness.errors import SlotStateTamperedError
from database_file_controls.buisness.slots.slot_store import SlotStore
from database_file_controls.logger import get_logger

logger = get_logger("database_file_controls.buisness.slots")

STATE_FIELD = 'slotState'


class SlotStateSigner:
    """
    Signs and verifies slot state for one form, e.g. scope 'files:documents:5'.

    A token signed for one scope does not verify under another, so state taken
    from one item's page cannot be replayed against a different item.
    """

    def __init__(self, secret_key: str, scope: str):
        self.scope = scope
        self.serializer = URLSafeSerializer(secret_key, salt=f"database_file_controls.slots:{scope}")

    def sign(self, store: SlotStore) -> str:
        return self.serializer.dumps(store.to_list())

    def restore(self, form: Mapping, max_files: int) -> SlotStore:
        """
        Rebuild the posted slot store, refusing anything the server did not sign.

        A post without a token is read as an empty store, so its pairs must be
        empty too.
        """
        token = form.get(STATE_FIELD)
        if token:
            try:
                signed_items = self.serializer.loads(token)
            except BadSignature:
                logger.warning(f"Rejected slot state with a bad signature for {self.scope}")
                raise SlotStateTamperedError("Posted attachment state could not be verified")
        else:
            signed_items = []

        signed = SlotStore.from_list(max_files, signed_items)
        posted = SlotStore.from_form(form, max_files)
        if posted.to_list() != signed.to_list():
            logger.warning(f"Rejected slot state for {self.scope}: posted files do not match the signed state")
            raise SlotStateTamperedError("Posted attachments do not match the files on this form")
        return signed
