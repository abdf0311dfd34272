"""Labels with an ``&``-marked keyboard mnemonic.

Usage:
    label = MnemonicString("E&xit")
    label.raw_label     # "Exit"
    label.shortcut      # "x"
    label.shortcut_idx  # 1

``&&`` produces a literal ampersand. Only the first marker is honoured.
"""

from __future__ import annotations

from typing import Optional


class MnemonicString:
    def __init__(self, label: str) -> None:
        raw = []
        shortcut: Optional[str] = None
        shortcut_idx = -1
        i = 0
        while i < len(label):
            ch = label[i]
            if ch == "&" and i + 1 < len(label):
                nxt = label[i + 1]
                if nxt == "&":
                    raw.append("&")
                    i += 2
                    continue
                if shortcut is None:
                    shortcut = nxt
                    shortcut_idx = len(raw)
                    raw.append(nxt)
                    i += 2
                    continue
                i += 1
                continue
            raw.append(ch)
            i += 1
        self.label = label
        self.raw_label = "".join(raw)
        self.shortcut = shortcut
        self.shortcut_idx = shortcut_idx

    def matches(self, ch: str) -> bool:
        """Case-insensitive comparison against the mnemonic character."""
        return self.shortcut is not None and self.shortcut.lower() == ch.lower()

    def __repr__(self) -> str:
        return f"MnemonicString({self.label!r})"
