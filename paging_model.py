"""
Demand-paging memory manager model.

Every virtual page starts unmapped. The first access to a page is a fault
and maps it to the next frame handed out by a round-robin cursor; every later
access to that page is a hit. There is no replacement policy, so once more
pages have faulted than there are frames, several pages share a frame number.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PAGES = 8
DEFAULT_FRAMES = 4

HIT = "Hit"
FAULT = "Fault"


class InvalidArgument(ValueError):
    """Raised when a simulator is built with a non-positive page or frame count."""


class OutOfRange(IndexError):
    """Raised when a page or frame number falls outside the simulator's range."""


@dataclass
class PageTableEntry:
    """
    Page Table Entry for a single virtual page.

    - frame: physical frame the page is mapped to, or None while unmapped.
    - valid: True once the page has been faulted in. Never reset.
    """
    frame: Optional[int] = None
    valid: bool = False


@dataclass(frozen=True)
class AccessResult:
    """Outcome of one page access."""
    status: str
    page: int
    frame: int

    @property
    def is_hit(self) -> bool:
        return self.status == HIT

    @property
    def message(self) -> str:
        return format_result(self)


def format_result(result: AccessResult) -> str:
    """Render an access result as the one-line message shown to the user."""
    if result.is_hit:
        return f"Page Hit: Page {result.page} is in frame {result.frame}"
    # the fault message does not carry the newly assigned frame
    return f"Page Fault: Page {result.page} not in memory. Fetching from memory..."


class PagingSimulator:
    """
    Page table plus a frame cursor for one simulated address space.

    Raises InvalidArgument if either count is not positive.
    """

    def __init__(self, page_count: int, frame_count: int) -> None:
        if page_count <= 0 or frame_count <= 0:
            raise InvalidArgument("Number of pages and frames must be positive.")
        self.page_count = page_count
        self.frame_count = frame_count
        self.page_table: List[PageTableEntry] = [
            PageTableEntry() for _ in range(page_count)
        ]
        self.next_frame = 0

        # access statistics
        self.hit_count = 0
        self.fault_count = 0
        logger.info("Initialized %d pages over %d frames", page_count, frame_count)

    @property
    def total_count(self) -> int:
        return self.hit_count + self.fault_count

    @property
    def fault_rate(self) -> float:
        """Percentage of counted accesses that faulted."""
        if self.total_count == 0:
            return 0.0
        return self.fault_count / self.total_count * 100

    def entry(self, page: int) -> PageTableEntry:
        """
        Return the PageTableEntry for the given virtual page number.

        Raises OutOfRange if the page number is out of range.
        """
        if page < 0 or page >= self.page_count:
            raise OutOfRange("Invalid virtual page number.")
        return self.page_table[page]

    def is_mapped(self, page: int) -> bool:
        return self.entry(page).valid

    def access(self, page: int) -> AccessResult:
        """
        Access a virtual page, mapping it to a frame if it is not yet valid.

        Raises OutOfRange without touching any state if the page is invalid.
        """
        entry = self.entry(page)
        if entry.valid:
            self.hit_count += 1
            logger.debug("Hit: page %d in frame %d", page, entry.frame)
            return AccessResult(HIT, page, entry.frame)

        frame = self._allocate_frame()
        entry.frame = frame
        entry.valid = True
        self.fault_count += 1
        logger.debug("Fault: page %d mapped to frame %d", page, frame)
        return AccessResult(FAULT, page, frame)

    def _allocate_frame(self) -> int:
        # round-robin, occupancy is never consulted
        frame = self.next_frame
        self.next_frame = (self.next_frame + 1) % self.frame_count
        return frame

    def pages_in_frame(self, frame: int) -> List[int]:
        """Return every mapped page whose entry points at the given frame."""
        if frame < 0 or frame >= self.frame_count:
            raise OutOfRange(f"Frame number {frame} out of range (0 .. {self.frame_count - 1})")
        return [
            page for page, entry in enumerate(self.page_table)
            if entry.valid and entry.frame == frame
        ]

    def get_snapshot(self) -> List[Dict]:
        """Per-page view of the table, flagging frames shared by several pages."""
        sharing = Counter(e.frame for e in self.page_table if e.valid)
        snapshot = []
        for page, entry in enumerate(self.page_table):
            snapshot.append({
                "page": page,
                "frame": entry.frame,
                "valid": entry.valid,
                "aliased": entry.valid and sharing[entry.frame] > 1,
            })
        return snapshot


def initialize(page_count: int, frame_count: int) -> PagingSimulator:
    return PagingSimulator(page_count, frame_count)


def access(simulator: PagingSimulator, page: int) -> AccessResult:
    return simulator.access(page)
