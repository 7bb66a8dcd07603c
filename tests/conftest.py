import asyncio
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so top-level modules import under pytest
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from config import Settings  # noqa: E402


SAMPLE_DIFF = """\
diff --git a/src/utils.py b/src/utils.py
index 1234567..abcdefg 100644
--- a/src/utils.py
+++ b/src/utils.py
@@ -10,3 +10,5 @@ def helper():
 def new_function():
+    # Added a comment
+    print("hello")
     return True
 # end
"""


class FakeReviewClient:
    """Stands in for ReviewClient; records prompts and answers through `responder`."""

    def __init__(self, responder=None, delays=None):
        self.responder = responder or (lambda prompt: "review")
        self.delays = delays or {}
        self.calls = []

    async def review(self, model, prompt, timeout=None):
        self.calls.append((model, prompt, timeout))
        index = len(self.calls) - 1
        delay = self.delays.get(index, 0)
        if delay:
            await asyncio.sleep(delay)
        return self.responder(prompt)


@pytest.fixture
def fake_client():
    return FakeReviewClient()


@pytest.fixture
def settings():
    return Settings(api_key="sk-test", model="gpt-4", retry_delay=0.0)


@pytest.fixture
def sample_diff():
    return SAMPLE_DIFF
