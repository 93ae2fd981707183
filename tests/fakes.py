import threading
from datetime import datetime

from layout_ai.contracts.tool_base import IntentModelTool
from layout_ai.errors import ToolError

# Monday morning
FIXED_NOW = datetime(2026, 1, 5, 9, 30, 0)


class FakeIntentTool(IntentModelTool):
    """Returns a canned analysis and counts calls."""

    def __init__(self, response=None):
        self.response = response if response is not None else {}
        self.calls = []
        self.closed = False

    def extract_intent(self, prompt, context):
        self.calls.append((prompt, context))
        return self.response

    def close(self):
        self.closed = True


class FailingIntentTool(IntentModelTool):
    def __init__(self):
        self.calls = 0

    def extract_intent(self, prompt, context):
        self.calls += 1
        raise ToolError("service unavailable")


class SlowIntentTool(IntentModelTool):
    """Blocks until released; used to trigger the extractor timeout."""

    def __init__(self):
        self.release = threading.Event()

    def extract_intent(self, prompt, context):
        self.release.wait(5)
        return {"primary_intent": "study"}


def template_record(id, category="productivity", popularity=50, keywords=(), tags=(), fields=None, svg=""):
    if fields is None:
        fields = [{"id": "title", "type": "text", "x": 0, "y": 0, "width": 100, "height": 20}]
    return {
        "id": id,
        "name": id.replace("-", " ").title(),
        "category": category,
        "description": f"{id} template",
        "keywords": list(keywords),
        "tags": list(tags),
        "popularity": popularity,
        "editable_fields": fields,
        "svg_template": svg,
    }
