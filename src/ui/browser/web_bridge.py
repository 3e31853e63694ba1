"""
ContentBridge on top of a QWebEnginePage.

Every call is a runJavaScript round trip turned into an asyncio future on the
qasync loop. A missing page or a call that does not answer within the timeout
yields the empty result for that call.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from PyQt6.QtWebEngineCore import QWebEnginePage

from src.core.bridge import ContentBridge
from src.core.errors import BridgeUnavailableError

logger = logging.getLogger(__name__)

try:
    from PyQt6 import sip as _sip
except ImportError:
    _sip = None


def _is_deleted(obj) -> bool:
    if obj is None:
        return True
    return _sip is not None and _sip.isdeleted(obj)


# Installs click-to-mark on gallery thumbnails. Guarded so a second
# injection on the same document does nothing.
SELECTION_SCRIPT = r"""
(function() {
  if (window.mediaShelfSelectionInjected) {
    return true;
  }
  window.mediaShelfSelectionInjected = true;
  window.selectedImageUrls = window.selectedImageUrls || new Set();

  function fullImageUrl(thumbnailSrc, anchorHref) {
    if (anchorHref && anchorHref.startsWith('https://cu-images.')) {
      return anchorHref;
    }
    if (thumbnailSrc && thumbnailSrc.includes('_200.')) {
      return thumbnailSrc.replace('_200.', '.');
    }
    return thumbnailSrc;
  }

  function addMarker(link) {
    link.style.position = 'relative';
    var marker = document.createElement('div');
    marker.className = 'ms-selection-marker';
    marker.style.cssText =
      'position:absolute !important; inset:0 !important; pointer-events:none !important;' +
      'z-index:10 !important; background-color:rgba(74,158,255,0.3) !important;' +
      'border:3px solid #4a9eff !important; border-radius:8px !important; box-sizing:border-box !important;';
    var check = document.createElement('div');
    check.textContent = '✓';
    check.style.cssText =
      'position:absolute !important; top:8px !important; right:8px !important; width:24px !important;' +
      'height:24px !important; line-height:24px !important; text-align:center !important;' +
      'border-radius:50% !important; background:#ffffff !important; color:#4a9eff !important;' +
      'font-weight:bold !important;';
    marker.appendChild(check);
    link.appendChild(marker);
  }

  function removeMarker(link) {
    var marker = link.querySelector('.ms-selection-marker');
    if (marker) {
      marker.remove();
    }
  }

  function handleClick(event) {
    event.preventDefault();
    event.stopPropagation();
    var link = event.currentTarget;
    var img = link.querySelector('.cuc__content');
    if (!img) {
      return;
    }
    var url = fullImageUrl(img.src, link.href);
    if (window.selectedImageUrls.has(url)) {
      window.selectedImageUrls.delete(url);
      removeMarker(link);
    } else {
      window.selectedImageUrls.add(url);
      addMarker(link);
    }
  }

  function attachHandlers() {
    document.querySelectorAll('.cuc_container .cuc').forEach(function(link) {
      if (!link.dataset.msHandlerAdded) {
        link.addEventListener('click', handleClick);
        link.dataset.msHandlerAdded = 'true';
      }
    });
  }

  window.getSelectedImageUrls = function() {
    return Array.from(window.selectedImageUrls);
  };

  window.clearSelectedImages = function() {
    document.querySelectorAll('.ms-selection-marker').forEach(function(marker) {
      marker.remove();
    });
    window.selectedImageUrls.clear();
  };

  attachHandlers();
  // Gallery items render late
  setTimeout(attachHandlers, 1000);
  return true;
})();
"""

READ_SELECTION_SCRIPT = "window.getSelectedImageUrls ? window.getSelectedImageUrls() : [];"

READ_COUNT_SCRIPT = "window.selectedImageUrls ? window.selectedImageUrls.size : 0;"

CLEAR_SCRIPT = """
if (window.clearSelectedImages) {
  window.clearSelectedImages();
}
true;
"""

# Returns the raw fields; view count parsing happens in VideoRecord.from_scrape
SCRAPE_VIDEO_SCRIPT = r"""
(function() {
  function text(selector) {
    var el = document.querySelector(selector);
    return el && el.textContent ? el.textContent.trim() : null;
  }

  var releaseDate = null;
  document.querySelectorAll('.hvpimbc-item').forEach(function(item) {
    var header = item.querySelector('.hvpimbc-header');
    if (header && header.textContent.indexOf('Release Date') !== -1) {
      var value = item.querySelector('.hvpimbc-text');
      releaseDate = value ? value.textContent.trim() : null;
    }
  });

  var tags = [];
  try {
    var seen = {};
    Array.from(document.querySelectorAll('.hvpis-text a[href^="/browse/tags/"]'))
      .slice(0, 10)
      .forEach(function(link) {
        var href = link.getAttribute('href');
        var tag = null;
        if (href) {
          tag = decodeURIComponent(href.split('/browse/tags/')[1] || '');
        } else {
          var content = link.querySelector('.btn__content');
          tag = content ? content.textContent.trim() : null;
        }
        if (tag && !seen[tag]) {
          seen[tag] = true;
          tags.push(tag);
        }
      });
  } catch (e) {
    tags = [];
  }

  var thumbnail = document.querySelector('.hvpi-cover');
  return {
    url: window.location.href.split('?')[0],
    title: text('.tv-title'),
    views: text('.tv-views'),
    thumbnail: thumbnail ? thumbnail.src : null,
    brand: text('.hvpimbc-text[href*="/browse/brands/"]'),
    releaseDate: releaseDate,
    tags: tags,
    plot: text('.hvpist-description')
  };
})();
"""


class WebEngineBridge(ContentBridge):
    """ContentBridge for one QWebEnginePage."""

    def __init__(self, page: Optional[QWebEnginePage], timeout: float = 5.0):
        self._page = page
        self.timeout = timeout

    def set_page(self, page: Optional[QWebEnginePage]):
        self._page = page

    async def _run(self, script: str) -> Any:
        """
        Run a script and wait for its result.

        Raises BridgeUnavailableError when the page is gone or silent.
        """
        page = self._page
        if _is_deleted(page):
            raise BridgeUnavailableError("Web page is not available")

        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _on_result(value):
            if not future.done():
                future.set_result(value)

        page.runJavaScript(script, _on_result)
        try:
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise BridgeUnavailableError(f"Page script timed out after {self.timeout:.1f}s") from None

    async def inject(self) -> bool:
        try:
            result = await self._run(SELECTION_SCRIPT)
        except BridgeUnavailableError as e:
            logger.error(f"Selection inject failed: {e}")
            return False
        # The page returns true from the script; anything else means it threw
        return bool(result)

    async def clear(self) -> None:
        try:
            await self._run(CLEAR_SCRIPT)
        except BridgeUnavailableError as e:
            logger.debug(f"Clear selection skipped: {e}")

    async def read_selection(self) -> List[str]:
        try:
            result = await self._run(READ_SELECTION_SCRIPT)
        except BridgeUnavailableError as e:
            logger.warning(f"Reading selection failed: {e}")
            return []
        if not isinstance(result, list):
            return []
        return [url for url in result if isinstance(url, str) and url]

    async def read_selection_count(self) -> int:
        try:
            result = await self._run(READ_COUNT_SCRIPT)
        except BridgeUnavailableError as e:
            logger.debug(f"Selection count unavailable: {e}")
            return 0
        try:
            return max(0, int(result or 0))
        except (TypeError, ValueError):
            return 0

    async def scrape_video(self) -> Optional[Dict[str, Any]]:
        try:
            result = await self._run(SCRAPE_VIDEO_SCRIPT)
        except BridgeUnavailableError as e:
            logger.error(f"Video scrape failed: {e}")
            return None
        if not isinstance(result, dict):
            logger.warning(f"Unexpected scrape result: {type(result).__name__}")
            return None
        return result
