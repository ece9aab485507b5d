import threading

import pytest
import requests

from vocab_sentences.checkpoint import CheckpointStore
from vocab_sentences.errors import TransientFetchError


class FakeSource:
    """Deterministic source: ``table`` maps backend -> word -> (text, translation)."""

    def __init__(self, table, fail_once=()):
        self.table = table
        self.fail_once = set(fail_once)
        self.calls = []
        self._lock = threading.Lock()

    def lookup(self, word, backend, size="short"):
        with self._lock:
            self.calls.append((word, backend))
            if word in self.fail_once:
                self.fail_once.discard(word)
                raise TransientFetchError(f"connection reset while fetching {word}")
        return self.table.get(backend, {}).get(word)


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


NCIKU_PAGE = """
<div class="examples_box"><p class="ex">我们是<b>朋友</b>。</p><p class="trans">We are friends.</p></div>
<div class='examples_box' id="second"><p class="ex big">我们是很好很好的朋友。</p>
  <!-- translation follows -->
  <p class="trans">We are <i>very</i> good friends.</p></div>
<div class="examples_box"><p class="ex">他来了。</p><p class="trans">He came.</p></div>
"""


@pytest.fixture
def store(tmp_path):
    return CheckpointStore(tmp_path / "checkpoints")


@pytest.fixture
def table():
    return {
        "nciku": {
            "我": ("我很好", "I am fine"),
            "你": ("你好我也好", "Hello, I am fine too"),
            "朋友": ("我们是朋友", "We are friends"),
        },
        "jukuu": {
            "我们": ("我们是朋友", "We are friends"),
            "天气": ("今天天气很好", "The weather is nice today"),
        },
    }
