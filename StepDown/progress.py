import time
from typing import List, Optional, Set

from colorama import Fore, Style, init
from tqdm import tqdm


class ProgressVisualizer:
    """Visualizes the progress of a batch sorting run in the terminal."""

    def __init__(self, files: List[str], dry_run: bool = False):
        init()  # Initialize colorama
        self.files = files
        self.dry_run = dry_run
        self.processed: Set[str] = set()
        self.failed: Set[str] = set()
        self.current: Optional[str] = None
        self.progress_bar = None
        self.start_time = time.time()

    def initialize(self):
        """Initialize the visualization."""
        self._print_header()
        self.progress_bar = tqdm(
            total=len(self.files),
            desc="Sorting methods",
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
        )

    def update(self, path: str = None, status: str = "processing"):
        """Update the visualization."""
        if path is None:
            return
        self.current = path
        if status in ("completed", "failed"):
            self.processed.add(path)
            if status == "failed":
                self.failed.add(path)
            if self.progress_bar is not None:
                self.progress_bar.update(1)

    def finalize(self):
        """Finalize the visualization."""
        if self.progress_bar:
            self.progress_bar.close()

        elapsed = time.time() - self.start_time
        minutes, seconds = divmod(elapsed, 60)
        hours, minutes = divmod(minutes, 60)

        color = Fore.RED if self.failed else Fore.GREEN
        print(f"\n{color}Method Sorting Complete!{Style.RESET_ALL}")
        print(f"Total units processed: {len(self.processed)}/{len(self.files)}")
        if self.failed:
            print(f"{Fore.YELLOW}Failed units: {len(self.failed)}{Style.RESET_ALL}")
        print(f"Time elapsed: {int(hours):02d}:{int(minutes):02d}:{int(seconds):02d}")

    def _print_header(self):
        """Print header information."""
        mode = " (dry run)" if self.dry_run else ""
        print(f"\n{Fore.CYAN}{Style.BRIGHT}StepDown Method Sorting{mode}{Style.RESET_ALL}\n")
        print(f"Processing {len(self.files)} compilation units")
