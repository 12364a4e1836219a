import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, Optional, Sequence

from .models import Book

COLUMNS = (
    ("id", "ID", 60, "center"),
    ("title", "Title", 260, "w"),
    ("author", "Author", 180, "w"),
    ("isbn", "ISBN", 130, "center"),
    ("published", "Published", 110, "center"),
)


class LibraryWindow(ttk.Frame):
    def __init__(self, master: tk.Misc):
        super().__init__(master, padding=12)
        self.controller = None
        self.search_var = tk.StringVar()
        self.title_var = tk.StringVar()
        self.author_var = tk.StringVar()
        self.isbn_var = tk.StringVar()
        self.published_var = tk.StringVar()
        self._build_ui()

    def bind_controller(self, controller) -> None:
        self.controller = controller

    def _build_ui(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        top = ttk.Frame(self)
        top.grid(row=0, column=0, sticky="ew")
        top.columnconfigure(1, weight=1)
        ttk.Label(top, text="Search:").grid(row=0, column=0, sticky="w")
        ttk.Entry(top, textvariable=self.search_var).grid(row=0, column=1, sticky="ew", padx=(4, 0))
        self.search_var.trace_add("write", lambda *_: self._call("search", self.search_var.get()))
        ttk.Button(top, text="Refresh", command=lambda: self._call("load_books"), width=12).grid(
            row=0, column=2, padx=(8, 0)
        )

        body = ttk.Frame(self)
        body.grid(row=1, column=0, sticky="nsew", pady=(8, 0))
        body.columnconfigure(0, weight=1)
        body.rowconfigure(0, weight=1)

        self.tree = ttk.Treeview(body, columns=[c[0] for c in COLUMNS], show="headings", selectmode="browse")
        for key, heading, width, anchor in COLUMNS:
            self.tree.heading(key, text=heading)
            self.tree.column(key, width=width, anchor=anchor)
        self.tree.grid(row=0, column=0, sticky="nsew")
        self.tree.bind("<<TreeviewSelect>>", self._on_select)

        scroll = ttk.Scrollbar(body, orient="vertical", command=self.tree.yview)
        scroll.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=scroll.set)

        form = ttk.LabelFrame(self, text="Book details", padding=8)
        form.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        form.columnconfigure(1, weight=1)
        fields = (
            ("Title:", self.title_var),
            ("Author:", self.author_var),
            ("ISBN:", self.isbn_var),
            ("Published (YYYY-MM-DD):", self.published_var),
        )
        for row, (label, var) in enumerate(fields):
            ttk.Label(form, text=label).grid(row=row, column=0, sticky="w", pady=2)
            ttk.Entry(form, textvariable=var).grid(row=row, column=1, sticky="ew", padx=(4, 0), pady=2)

        buttons = ttk.Frame(self)
        buttons.grid(row=3, column=0, sticky="e", pady=(8, 0))
        self.add_button = ttk.Button(buttons, text="Add", command=lambda: self._call("add"))
        self.update_button = ttk.Button(buttons, text="Update", command=lambda: self._call("update"))
        self.delete_button = ttk.Button(buttons, text="Delete", command=lambda: self._call("delete"))
        self.clear_button = ttk.Button(buttons, text="Clear", command=lambda: self._call("clear"))
        for column, button in enumerate((self.add_button, self.update_button, self.delete_button, self.clear_button)):
            button.grid(row=0, column=column, padx=(6, 0))

    def _call(self, action: str, *args) -> None:
        if self.controller is not None:
            getattr(self.controller, action)(*args)

    def _on_select(self, _event: tk.Event) -> None:
        selection = self.tree.selection()
        self._call("select", int(selection[0]) if selection else None)

    # CatalogView
    def schedule(self, callback: Callable[[], None]) -> None:
        self.after(0, callback)

    def show_books(self, books: Sequence[Book], selected_id: Optional[int]) -> None:
        self.tree.delete(*self.tree.get_children())
        for book in books:
            published = book.published_date.isoformat() if book.published_date else ""
            self.tree.insert(
                "",
                "end",
                iid=str(book.id),
                values=(book.id, book.title, book.author, book.isbn, published),
            )
        # the controller already dropped a selection that is no longer visible;
        # the resulting <<TreeviewSelect>> reports the same id and is a no-op there
        if selected_id is not None and self.tree.exists(str(selected_id)):
            self.tree.selection_set(str(selected_id))
            self.tree.see(str(selected_id))

    def show_form(self, book: Book) -> None:
        self.title_var.set(book.title)
        self.author_var.set(book.author)
        self.isbn_var.set(book.isbn)
        self.published_var.set(book.published_date.isoformat() if book.published_date else "")

    def read_form(self) -> tuple[str, str, str, str]:
        return (self.title_var.get(), self.author_var.get(), self.isbn_var.get(), self.published_var.get())

    def clear_form(self) -> None:
        for var in (self.title_var, self.author_var, self.isbn_var, self.published_var):
            var.set("")

    def clear_selection(self) -> None:
        self.tree.selection_remove(*self.tree.selection())

    def set_selection_actions(self, enabled: bool) -> None:
        state = "normal" if enabled else "disabled"
        self.update_button.configure(state=state)
        self.delete_button.configure(state=state)

    def show_info(self, title: str, message: str) -> None:
        messagebox.showinfo(title, message, parent=self)

    def show_warning(self, title: str, message: str) -> None:
        messagebox.showwarning(title, message, parent=self)

    def show_error(self, title: str, message: str) -> None:
        messagebox.showerror(title, message, parent=self)

    def confirm(self, title: str, message: str) -> bool:
        return messagebox.askokcancel(title, message, parent=self)


def build_window(root: tk.Tk, title: str, width: int, height: int) -> LibraryWindow:
    root.title(title)
    root.geometry(f"{width}x{height}")
    window = LibraryWindow(root)
    window.pack(fill="both", expand=True)
    return window
