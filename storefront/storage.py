"""
Persisted key/value storage for client-side state that must outlive a single
page view (the session token and cached identity fields).

Values live in a two-column CSV file (key, value). Writes take a file lock so
concurrent writers never interleave, and each write lands in a temporary file
that is renamed over the old one, so readers see either the old or the new
file. Semantics are replace-or-clear, last writer wins.

Usage:
    from storefront.storage import LocalStorage
    storage = LocalStorage(Path("data/storage.csv"))
    storage.set_item("authToken", "abc")
    storage.get_item("authToken")
"""

import os
from pathlib import Path
from typing import Dict, Iterable, Optional
import pandas as pd
from filelock import FileLock

COLUMNS = ["key", "value"]


class LocalStorage:
    """
    Small key/value store backed by a CSV file. Every value is stored and
    returned as a string.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _lock(self) -> FileLock:
        return FileLock(str(self.path) + ".lock")

    def _read_df(self) -> pd.DataFrame:
        if not self.path.exists():
            return pd.DataFrame(columns=COLUMNS)
        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            # zero-byte file, e.g. created but never written
            return pd.DataFrame(columns=COLUMNS)
        if df.empty:
            return pd.DataFrame(columns=COLUMNS)
        return df.fillna("")

    def _write_df_nolock(self, df: pd.DataFrame) -> None:
        """
        Write DataFrame WITHOUT acquiring the file lock.
        Use this only when the caller already holds the lock.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        df.to_csv(tmp_path, index=False, columns=COLUMNS)
        os.replace(tmp_path, self.path)

    def items(self) -> Dict[str, str]:
        df = self._read_df()
        return {str(k): str(v) for k, v in zip(df["key"], df["value"])}

    def get_item(self, key: str) -> Optional[str]:
        value = self.items().get(key)
        # an empty string is treated the same as a missing key
        return value or None

    def set_items(self, values: Dict[str, str]) -> None:
        """Replace several keys in a single write."""
        with self._lock():
            df = self._read_df()
            df = df[~df["key"].isin(list(values.keys()))]
            new_rows = pd.DataFrame([{"key": k, "value": "" if v is None else str(v)} for k, v in values.items()])
            df = pd.concat([df, new_rows], ignore_index=True, sort=False)
            self._write_df_nolock(df)

    def set_item(self, key: str, value: str) -> None:
        self.set_items({key: value})

    def remove_items(self, keys: Iterable[str]) -> int:
        """
        Delete the given keys. Returns the number of rows removed.
        """
        keys = list(keys)
        with self._lock():
            df = self._read_df()
            orig_len = len(df)
            df = df[~df["key"].isin(keys)]
            removed = orig_len - len(df)
            if removed:
                self._write_df_nolock(df)
            return removed

    def remove_item(self, key: str) -> bool:
        return self.remove_items([key]) > 0

    def clear(self) -> None:
        with self._lock():
            self._write_df_nolock(pd.DataFrame(columns=COLUMNS))
