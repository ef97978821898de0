"""Open pages awaiting participant input"""
import logging
import uuid
from collections import OrderedDict
from typing import Optional

from treasure_hunt.core.engine import HuntPage


logger = logging.getLogger(__name__)


def new_page_id() -> str:
    return uuid.uuid4().hex


class PageRegistry:
    """Bounded mapping page-id -> HuntPage; the oldest page is evicted first"""

    def __init__(self, max_pages: int = 1000):
        self.max_pages = max_pages
        self._pages: "OrderedDict[str, HuntPage]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._pages)

    def keep(self, page: HuntPage) -> None:
        if page.page_id is None or page.finished:
            return
        self._pages[page.page_id] = page
        self._pages.move_to_end(page.page_id)
        while len(self._pages) > self.max_pages:
            evicted, _ = self._pages.popitem(last=False)
            logger.info(f"🗑️ Evicted page {evicted}")

    def get(self, page_id: str) -> Optional[HuntPage]:
        return self._pages.get(page_id)

    def release(self, page: HuntPage) -> None:
        """Drop a page once its life cycle has ended"""
        if page.finished and page.page_id is not None:
            self._pages.pop(page.page_id, None)
