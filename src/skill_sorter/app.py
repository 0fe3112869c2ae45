import tkinter as tk
from tkinter import ttk
from pathlib import Path
from typing import Dict, Optional

from skill_sorter import api
from skill_sorter.classifier import QUADRANTS, hydrate, sorted_by_intensity
from skill_sorter.config import AppConfig, load_app_config
from skill_sorter.core import ERROR, LEFT, RIGHT, ROUND1, ROUND2, SUMMARY
from skill_sorter.scheduling import AfterScheduler
from skill_sorter.view_model import SorterViewModel


# X11 key autorepeat sends release/press pairs while a key is held;
# a release only counts if no press of the same key follows within this window.
RELEASE_DEBOUNCE_MS = 30
COPIED_FLASH_MS = 1200

PROMPTS = {
    ROUND1: "Round 1: Do you ENJOY this skill?",
    ROUND2: "Round 2: Are you GOOD at this skill?",
}


class SkillSorterApp(tk.Tk):
    def __init__(self, cfg: Optional[AppConfig] = None, link: Optional[str] = None):
        super().__init__()
        self.title("Skill Sorter")
        self.geometry("760x560")

        self.cfg = cfg or AppConfig()
        self._pending_release: Dict[str, str] = {}

        self._build_ui()

        self.session = api.new_session(
            app_config=self.cfg,
            location=link,
            scheduler=AfterScheduler(self),
            logger=self._set_status,
        )
        self.vm = SorterViewModel(self.session)
        self.vm.subscribe("stage", self._on_stage)
        self.vm.subscribe("card", self._on_card)
        self.vm.subscribe("progress", self._on_progress)
        self.vm.subscribe("power", self._on_power)
        self.vm.subscribe("summary", self._on_summary)

        for key, direction in (("Left", LEFT), ("Right", RIGHT)):
            self.bind(f"<KeyPress-{key}>", lambda _e, d=direction: self._key_down(d))
            self.bind(f"<KeyRelease-{key}>", lambda _e, d=direction: self._key_up(d))

    # ---------------- UI ----------------

    def _build_ui(self):
        top = ttk.Frame(self, padding=(10, 10, 10, 6))
        top.pack(fill="x")

        self.prompt_var = tk.StringVar(value="")
        ttk.Label(top, textvariable=self.prompt_var, font=("Segoe UI", 14, "bold")).pack()
        ttk.Label(top, text="Hold ← for NO  |  → for YES  (click the card for a quick YES)").pack()

        bars = ttk.Frame(top)
        bars.pack(pady=(6, 0))
        ttk.Label(bars, text="Enjoy").grid(row=0, column=0, padx=6)
        ttk.Label(bars, text="Good").grid(row=0, column=1, padx=6)
        self.enjoy_bar = ttk.Progressbar(bars, length=140, maximum=100)
        self.good_bar = ttk.Progressbar(bars, length=140, maximum=100)
        self.enjoy_bar.grid(row=1, column=0, padx=6)
        self.good_bar.grid(row=1, column=1, padx=6)

        # Sorting view
        self.sort_frame = ttk.Frame(self, padding=20)
        self.card_var = tk.StringVar(value="")
        self.desc_var = tk.StringVar(value="")
        card = ttk.Frame(self.sort_frame, relief="ridge", padding=24)
        card.pack(pady=20)
        title = ttk.Label(card, textvariable=self.card_var, font=("Segoe UI", 16, "bold"))
        title.pack()
        ttk.Label(card, textvariable=self.desc_var, wraplength=320).pack()
        for w in (card, title):
            w.bind("<Button-1>", lambda _e: self.session.tap())

        self.power_bar = ttk.Progressbar(self.sort_frame, length=320, maximum=100)
        self.power_bar.pack()
        self.power_var = tk.StringVar(value="Hold for power")
        ttk.Label(self.sort_frame, textvariable=self.power_var).pack()

        # Summary view
        self.summary_frame = ttk.Frame(self, padding=10)
        grid = ttk.Frame(self.summary_frame)
        grid.pack(fill="both", expand=True)
        self.quadrant_lists: Dict[str, tk.Listbox] = {}
        for i, q in enumerate(QUADRANTS):
            box = ttk.LabelFrame(grid, text=f"{q.title} ({q.subtitle})", padding=6)
            box.grid(row=i // 2, column=i % 2, sticky="nsew", padx=6, pady=6)
            lb = tk.Listbox(box, height=8)
            lb.pack(fill="both", expand=True)
            self.quadrant_lists[q.key] = lb
        grid.grid_columnconfigure(0, weight=1)
        grid.grid_columnconfigure(1, weight=1)

        btns = ttk.Frame(self.summary_frame)
        btns.pack(pady=(6, 0))
        self.copy_var = tk.StringVar(value="Copy Shareable Link")
        ttk.Button(btns, textvariable=self.copy_var, command=self._copy_link).pack(side="left")
        ttk.Button(btns, text="Do it again", command=self._restart).pack(side="left", padx=(8, 0))

        # Error view
        self.error_frame = ttk.Frame(self, padding=40)
        ttk.Label(self.error_frame, text="Invalid or Corrupted Link", font=("Segoe UI", 14, "bold")).pack()
        ttk.Label(self.error_frame, text="Sorry, we couldn't load these results. Please check your link or try again.").pack(pady=8)
        ttk.Button(self.error_frame, text="Start Over", command=self._restart).pack()

        # Status bar
        ttk.Separator(self).pack(side="bottom", fill="x")
        self.status_var = tk.StringVar(value="")
        ttk.Label(self, textvariable=self.status_var, padding=(10, 4)).pack(side="bottom", fill="x")

    def _set_status(self, s: str):
        self.status_var.set(f"Status: {s}")

    # ---------------- Input ----------------

    def _key_down(self, direction: str):
        after_id = self._pending_release.pop(direction, None)
        if after_id is not None:
            self.after_cancel(after_id)
            return
        self.session.press(direction)

    def _key_up(self, direction: str):
        def commit():
            self._pending_release.pop(direction, None)
            self.session.release(direction)

        self._pending_release[direction] = self.after(RELEASE_DEBOUNCE_MS, commit)

    # ---------------- Rendering ----------------

    def _on_stage(self, stage):
        for frame in (self.sort_frame, self.summary_frame, self.error_frame):
            frame.pack_forget()
        self.prompt_var.set(PROMPTS.get(stage, "Your Skill Quadrants" if stage == SUMMARY else ""))
        if stage == ERROR:
            self.error_frame.pack(fill="both", expand=True)
        elif stage == SUMMARY:
            self.summary_frame.pack(fill="both", expand=True)
        else:
            self.sort_frame.pack(fill="both", expand=True)

    def _on_card(self, card):
        self.card_var.set(f"{card.emoji} {card.name}".strip() if card else "")
        self.desc_var.set(card.description if card else "")

    def _on_progress(self, progress):
        enjoy_pct, good_pct = progress
        self.enjoy_bar["value"] = enjoy_pct
        self.good_bar["value"] = good_pct

    def _on_power(self, power):
        pressing, level, _direction, copy = power
        self.power_bar["value"] = level if pressing else 0
        self.power_var.set(f"{copy}  {round(level)}%" if pressing else copy)

    def _on_summary(self, summary):
        skills = hydrate(summary, self.session.catalog) if summary else {}
        for q in QUADRANTS:
            lb = self.quadrant_lists[q.key]
            lb.delete(0, "end")
            if summary is None:
                continue
            by_name = {s.name: s for s in skills.get(q.key, [])}
            names = sorted_by_intensity([s.name for s in skills.get(q.key, [])], summary.intensity)
            if not names:
                lb.insert("end", "(none chosen)")
            for name in names:
                total = summary.intensity_of(name).total
                label = f"{by_name[name].emoji} {name}".strip()
                lb.insert("end", f"{label}  {round(total)}%" if total > 0 else label)

    # ---------------- Actions ----------------

    def _copy_link(self):
        url = self.session.share_url()
        if not url:
            return
        self.clipboard_clear()
        self.clipboard_append(url)
        self.copy_var.set("Link copied!")
        self.after(COPIED_FLASH_MS, lambda: self.copy_var.set("Copy Shareable Link"))

    def _restart(self):
        self.session.restart()
        self._set_status("new session")


def main(config_path: Optional[Path] = None, link: Optional[str] = None) -> int:
    cfg = load_app_config(override_path=config_path)
    cfg.validate()
    app = SkillSorterApp(cfg=cfg, link=link)
    app.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
