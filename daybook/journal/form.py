"""Trade-entry form state.

The form holds raw user input as strings until it is saved. Saving
validates, appends a TradeEntry to the day's bucket and resets the form
to blank fields.
"""

import logging
import math
from datetime import date
from enum import Enum
from pathlib import PurePath
from typing import Optional

from daybook.db.store import TradeStore
from daybook.errors import InvalidPnLInput, TradeValidationError
from daybook.journal.stats import compute_pnl
from daybook.models import Emotions, Screenshot, TradeEntry, VoiceNote

logger = logging.getLogger(__name__)

# Suggested tags per emotion stage; free text is accepted too.
EMOTION_CHOICES = {
    "pre": ["Confident", "FOMO", "Fearful", "Calm"],
    "during": ["Calm", "Anxious", "Greedy", "Flow"],
    "post": ["Satisfied", "Regretful", "Learning", "Frustrated"],
}


class FormState(str, Enum):
    EDITING = "editing"
    COMMITTED = "committed"


class TradeForm:
    """Editable trade entry for one calendar day."""

    def __init__(self, day: date, store: TradeStore, timezone: str = "UTC"):
        """Initialize a blank form.

        Args:
            day: Date whose bucket receives saved trades.
            store: Trade store used on save.
            timezone: Display timezone recorded on each trade.
        """
        self.day = day
        self.store = store
        self.timezone = timezone
        self.last_saved: Optional[TradeEntry] = None
        self.reset()

    def reset(self) -> None:
        """Clear every field and return to editing."""
        self._symbol = ""
        self.side = "long"
        self.entry_price = ""
        self.exit_price = ""
        self.quantity = ""
        self.rr = ""
        self.notes = ""
        self.emotions = {"pre": "", "during": "", "post": ""}
        self.manual_pnl: Optional[str] = None
        self.pnl: Optional[float] = None
        self.voice_note_ref: Optional[str] = None
        self.screenshot_refs: list[str] = []
        self.state = FormState.EDITING

    @property
    def symbol(self) -> str:
        return self._symbol

    @symbol.setter
    def symbol(self, value: str) -> None:
        self._symbol = (value or "").upper()

    def compute(self) -> bool:
        """Compute P&L from side, prices and quantity.

        On invalid input the previous P&L is kept.

        Returns:
            True if the P&L was updated.
        """
        try:
            self.pnl = compute_pnl(self.side, self.entry_price, self.exit_price, self.quantity)
        except InvalidPnLInput as e:
            logger.debug("P&L not computed: %s", e)
            return False
        return True

    def _manual_pnl_value(self) -> Optional[float]:
        if self.manual_pnl is None or not str(self.manual_pnl).strip():
            return None
        try:
            value = float(self.manual_pnl)
        except ValueError:
            raise TradeValidationError(f"P&L must be a number, got {self.manual_pnl!r}") from None
        if not math.isfinite(value):
            raise TradeValidationError("P&L must be a finite number")
        return round(value, 2)

    def effective_pnl(self) -> Optional[float]:
        """Manual P&L when given, otherwise the computed one."""
        manual = self._manual_pnl_value()
        if manual is not None:
            return manual
        return self.pnl

    def save(self) -> TradeEntry:
        """Validate and append the trade to the day's bucket.

        A symbol and a P&L (manual or computed) are required. When no
        P&L is present the form tries to compute one first.

        Returns:
            The saved trade entry.

        Raises:
            TradeValidationError: If the entry is incomplete. Nothing is
                written in that case.
        """
        if not self.symbol.strip():
            raise TradeValidationError("Symbol is required")

        pnl = self.effective_pnl()
        if pnl is None and self.compute():
            pnl = self.pnl
        if pnl is None:
            raise TradeValidationError(
                "P&L is required: enter entry, exit and quantity, or a manual P&L"
            )

        try:
            entry = TradeEntry(
                symbol=self.symbol,
                side=self.side,
                entry_price=self.entry_price,
                exit_price=self.exit_price,
                quantity=self.quantity,
                pnl=pnl,
                rr=self.rr,
                notes=self.notes,
                emotions=Emotions(**self.emotions),
                voice_note_ref=self.voice_note_ref,
                screenshot_refs=list(self.screenshot_refs),
                timezone=self.timezone,
            )
        except ValueError as e:
            raise TradeValidationError(f"Invalid trade: {e}") from e

        self.store.append(self.day, entry)
        self.state = FormState.COMMITTED
        self.last_saved = entry
        logger.info("Saved %s %s trade for %s", entry.symbol, entry.side, self.day)

        self.reset()
        return entry

    def attach_voice(self, ref: str) -> VoiceNote:
        """Store a standalone voice note for the day."""
        note = VoiceNote(ref=ref, date=self.day)
        self.store.append(self.day, note)
        return note

    def attach_screenshots(self, refs: list[str]) -> list[Screenshot]:
        """Store standalone chart screenshots for the day.

        Raises:
            MalformedBucketError: If the stored bucket is invalid.
        """
        shots = [Screenshot(ref=ref, name=PurePath(ref).name, date=self.day) for ref in refs]
        records = self.store.load_day_for_update(self.day)
        records.extend(shots)
        self.store.save_day(self.day, records)
        return shots
