# app.py
# CustomTkinter window for the type-ahead movie search (dark theme).
# - Catalog JSON loaded on a background thread (keeps UI responsive).
# - Every keystroke goes to the Engine; the debounce runs on the Tk loop.
# - Results & event log panes.

from __future__ import annotations
import threading
from typing import Optional

import tkinter.filedialog as fd
import customtkinter as ctk

from typeahead import config as CFG
from typeahead.engine import Engine
from typeahead.loader import load_catalog
from typeahead.models import Catalog, ResultBatch
from typeahead.scheduler import TkScheduler

# keys bound to an immediate flush
_SETTLE_KEYS = {"Return", "KP_Enter"}


def shorten_path(p: str, max_chars: int = 60) -> str:
    """Shorten long paths neatly for labels."""
    if len(p) <= max_chars:
        return p
    keep = max_chars // 2 - 3
    return p[:keep] + "..." + p[-keep:]


class TypeaheadApp(ctk.CTk):
    """Dark-themed window: a search entry over a debounced, filtered title list."""

    def __init__(self, catalog_path: Optional[str] = None) -> None:
        super().__init__()

        ctk.set_appearance_mode("dark")
        ctk.set_default_color_theme("blue")

        self.title("Movie Search")
        self.geometry("640x600")
        self.minsize(480, 420)

        # State
        self._loading_thread: Optional[threading.Thread] = None
        self._engine = Engine(TkScheduler(self), delay_ms=CFG.DEBOUNCE_MS)
        self._engine.subscribe(self._on_results_ready)

        self.font_title = ctk.CTkFont(size=18, weight="bold")
        self.font_mono = ctk.CTkFont(family="Cascadia Mono, Menlo, Consolas, Courier New", size=13)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)  # results
        self.grid_rowconfigure(3, weight=0)  # log

        self._build_search()
        self._build_results()
        self._build_log()

        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._start_loading(catalog_path or CFG.CATALOG_PATH)

    # --------- UI sections ---------

    def _build_search(self) -> None:
        box = ctk.CTkFrame(self, corner_radius=10)
        box.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 6))
        box.grid_columnconfigure(0, weight=1)

        self.entry_query = ctk.CTkEntry(box, placeholder_text="Search for Movie")
        self.entry_query.grid(row=0, column=0, sticky="ew", padx=(12, 6), pady=10)
        self.entry_query.bind("<KeyRelease>", self._on_query_changed)
        self.entry_query.bind("<Return>", lambda _ev: self._engine.flush())
        self.entry_query.bind("<KP_Enter>", lambda _ev: self._engine.flush())

        ctk.CTkButton(box, text="Open catalog…", width=120, command=self._choose_catalog).grid(
            row=0, column=1, padx=(0, 12), pady=10
        )

        self.lbl_status = ctk.CTkLabel(self, text="Status: —", anchor="w")
        self.lbl_status.grid(row=1, column=0, sticky="ew", padx=18)

    def _build_results(self) -> None:
        self.txt_results = ctk.CTkTextbox(self, wrap="word", font=self.font_mono)
        self.txt_results.grid(row=2, column=0, sticky="nsew", padx=12, pady=6)
        self.txt_results.configure(state="disabled")

    def _build_log(self) -> None:
        self.txt_log = ctk.CTkTextbox(self, height=90, wrap="word", font=ctk.CTkFont(size=12))
        self.txt_log.grid(row=3, column=0, sticky="ew", padx=12, pady=(6, 12))

    # --------- catalog loading (threaded) ---------

    def _choose_catalog(self) -> None:
        path = fd.askopenfilename(
            title="Choose catalog JSON",
            filetypes=[("JSON", "*.json"), ("All files", "*.*")],
        )
        if path:
            self._start_loading(path)

    def _start_loading(self, path: str) -> None:
        if self._loading_thread and self._loading_thread.is_alive():
            self._log("A catalog is already loading.")
            return
        self._set_status(f"Loading {shorten_path(path)}…")
        self._loading_thread = threading.Thread(target=self._load_worker, args=(path,), daemon=True)
        self._loading_thread.start()

    def _load_worker(self, path: str) -> None:
        # load failures come back as an empty catalog, never as an exception
        catalog = load_catalog(path)
        self.after(0, lambda: self._on_load_ok(path, catalog))

    def _on_load_ok(self, path: str, catalog: Catalog) -> None:
        n = self._engine.use_catalog(catalog)
        if n == 0:
            self._log(f"No movies loaded from {path} (missing or unreadable file).")
        else:
            self._log(f"Catalog ready ({n} movies).")
        self._set_status(f"{n} movies")
        # show the initial list for whatever is already typed
        self._engine.on_text_changed(self.entry_query.get())
        self.entry_query.focus_set()

    # --------- search ---------

    def _on_query_changed(self, ev=None) -> None:
        if self._engine.catalog is None:
            return
        # Enter already settled the query via flush(); its release changes no text
        if ev is not None and getattr(ev, "keysym", "") in _SETTLE_KEYS:
            return
        self._engine.on_text_changed(self.entry_query.get())

    def _on_results_ready(self, batch: ResultBatch) -> None:
        self._set_results("\n".join(batch.titles) if batch.titles else "(no matches)")
        self._set_status(f"{len(batch.titles)} of {len(self._engine.catalog or ())} movies")

    # --------- misc UI helpers ---------

    def _set_status(self, text: str) -> None:
        self.lbl_status.configure(text=f"Status: {text}")

    def _set_results(self, text: str) -> None:
        self.txt_results.configure(state="normal")
        self.txt_results.delete("0.0", "end")
        if text:
            self.txt_results.insert("end", text)
        self.txt_results.configure(state="disabled")

    def _log(self, msg: str) -> None:
        self.txt_log.insert("end", msg + "\n")
        self.txt_log.see("end")

    # --------- lifecycle ---------

    def _on_close(self) -> None:
        # cancels the armed debounce timer before the widget goes away
        self._engine.shutdown()
        self.destroy()


if __name__ == "__main__":
    app = TypeaheadApp()
    app.mainloop()
