# clinicdesk/theme.py
from __future__ import annotations
import tkinter as tk
from tkinter import ttk

TOKENS = {
    "bg":      "#F4F6F9",
    "fg":      "#243040",
    "card":    "#FFFFFF",
    "border":  "#D5DCE4",
    "muted":   "#ECF0F4",
    "primary": "#0D6EFD",
    "primary_fg": "#FFFFFF",
    "danger":  "#DC3545",
}

# Dashboard card colours: patients, appointments, pending bills, revenue.
METRIC_COLOURS = ("#007BFF", "#28A745", "#FFC107", "#DC3545")


def style_app(root: tk.Tk) -> None:
    root.configure(bg=TOKENS["bg"])
    style = ttk.Style(root)
    style.theme_use("clam")

    style.configure(".", font=("Segoe UI", 10), foreground=TOKENS["fg"], background=TOKENS["bg"])

    style.configure("TNotebook", background=TOKENS["bg"], borderwidth=0)
    style.configure("TNotebook.Tab", padding=(14, 8), background=TOKENS["muted"], foreground=TOKENS["fg"])
    style.map("TNotebook.Tab",
              background=[("selected", TOKENS["card"])],
              bordercolor=[("selected", TOKENS["border"])])

    style.configure("Card.TLabelframe", background=TOKENS["card"], bordercolor=TOKENS["border"], relief="solid",
                    borderwidth=1)
    style.configure("Card.TLabelframe.Label", background=TOKENS["card"], foreground="#4A5568",
                    font=("Segoe UI", 10, "bold"))

    style.configure("Primary.TButton", background=TOKENS["primary"], foreground=TOKENS["primary_fg"],
                    borderwidth=0, padding=(12, 6))
    style.map("Primary.TButton", background=[("active", "#0B5ED7"), ("disabled", "#86B7FE")])
    style.configure("Ghost.TButton", background=TOKENS["muted"], foreground=TOKENS["fg"],
                    bordercolor=TOKENS["border"], borderwidth=1, padding=(10, 6))
    style.map("Ghost.TButton", background=[("active", "#E2E8F0")])

    style.configure("TEntry", fieldbackground="#FFFFFF", padding=6, bordercolor=TOKENS["border"])
    style.map("TEntry", bordercolor=[("focus", TOKENS["primary"])])
    style.configure("TCombobox", fieldbackground="#FFFFFF", padding=6, bordercolor=TOKENS["border"])

    style.configure("Treeview", background="#FFFFFF", fieldbackground="#FFFFFF",
                    bordercolor=TOKENS["border"], rowheight=26)
    style.configure("Treeview.Heading", background=TOKENS["muted"], relief="flat",
                    foreground="#4A5568", font=("Segoe UI Semibold", 10))
    style.map("Treeview", background=[("selected", "#DCEBFF")], foreground=[("selected", "#0A3A80")])

    for index, colour in enumerate(METRIC_COLOURS):
        style.configure(f"Metric{index}.TFrame", background=colour)
        style.configure(f"Metric{index}.Title.TLabel", background=colour, foreground="#FFFFFF",
                        font=("Segoe UI", 9))
        style.configure(f"Metric{index}.Value.TLabel", background=colour, foreground="#FFFFFF",
                        font=("Segoe UI", 16, "bold"))

    style.configure("Status.TLabel", background=TOKENS["bg"], foreground="#667085")


def card(frame: ttk.Frame, text: str) -> ttk.Labelframe:
    return ttk.Labelframe(frame, text=text, style="Card.TLabelframe", padding=(10, 8))


def metric_card(frame: ttk.Frame, index: int, title: str, value_var: tk.StringVar) -> ttk.Frame:
    box = ttk.Frame(frame, style=f"Metric{index}.TFrame", padding=(12, 8))
    ttk.Label(box, text=title, style=f"Metric{index}.Title.TLabel").pack(anchor="w")
    ttk.Label(box, textvariable=value_var, style=f"Metric{index}.Value.TLabel").pack(anchor="w", pady=(4, 0))
    return box
