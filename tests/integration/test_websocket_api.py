"""Integration tests for the /ws endpoint.

Runs the full application through the FastAPI test client: connection,
request/reply exchange, error replies and frame ordering.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_dispatcher
from api.main import app, create_app
from gridslice.config import GridBounds
from gridslice.dispatch import MessageDispatcher
from gridslice.engine import SliceEngine


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


class TestMetadata:
    """Tests for metadata requests."""

    def test_metadata_response(self, client):
        """The grid bounds are returned verbatim."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text('{"type":"metadata_request"}')
            assert websocket.receive_text() == (
                '{"type":"metadata_response","maxRows":10000000,"maxCols":1000}'
            )

    def test_metadata_same_across_connections(self, client):
        """Every connection sees identical metadata."""
        replies = []
        for _ in range(2):
            with client.websocket_connect("/ws") as websocket:
                websocket.send_json({"type": "metadata_request"})
                replies.append(websocket.receive_text())
        assert replies[0] == replies[1]


class TestSlice:
    """Tests for slice requests."""

    def test_slice_response(self, client, slice_request):
        """A slice request returns the visible window and its cells."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({**slice_request, "screenHeight": 500, "scrollTop": 0})
            data = websocket.receive_json()

        assert data["type"] == "slice_response"
        assert data["startRow"] == 0
        assert data["rowCount"] == 35
        assert data["startCol"] == 0
        assert data["colCount"] == 16
        assert data["colLetters"][-1] == "P"
        assert len(data["cellsByRow"]) == 35
        assert data["cellsByRow"][34][15] == "R35C P"

    def test_slice_near_end(self, client, slice_request):
        """Scrolling to the last rows returns only what remains."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({**slice_request, "scrollTop": (10_000_000 - 3) * 20})
            data = websocket.receive_json()

        assert data["startRow"] == 9_999_997
        assert data["rowCount"] == 3

    def test_repeated_request_identical(self, client, slice_request):
        """The same request twice yields byte-identical replies."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({**slice_request, "scrollLeft": 4321})
            first = websocket.receive_text()
            websocket.send_json({**slice_request, "scrollLeft": 4321})
            second = websocket.receive_text()

        assert first == second


class TestErrors:
    """Tests for error replies."""

    def test_invalid_json(self, client):
        """Malformed JSON gets the exact invalid json reply."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            assert websocket.receive_text() == '{"type":"error","message":"invalid json"}'

    @pytest.mark.parametrize("text", ["NaN", '{"type":"slice_request","scrollTop":Infinity}'])
    def test_non_json_constants(self, client, text):
        """NaN and Infinity get the invalid json reply."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text(text)
            assert websocket.receive_text() == '{"type":"error","message":"invalid json"}'

    def test_unknown_type(self, client):
        """Unknown types are reported and the connection stays open."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "zoom"})
            assert websocket.receive_json() == {"type": "error", "message": "unknown message type"}

            websocket.send_json({"type": "metadata_request"})
            assert websocket.receive_json()["type"] == "metadata_response"

    def test_zero_column_width(self, client, slice_request):
        """A zero column width is a bad request, not a crash."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({**slice_request, "defaultColumnWidth": 0})
            data = websocket.receive_json()

            assert data["type"] == "error"
            assert data["message"].startswith("bad request")
            assert data["errors"][0]["field"] == "defaultColumnWidth"

            websocket.send_json(slice_request)
            assert websocket.receive_json()["type"] == "slice_response"

    @pytest.mark.parametrize(
        ("field", "value"),
        [("screenWidth", -1), ("scrollTop", "100"), ("verticalBuffer", 2.5)],
    )
    def test_malformed_field(self, client, slice_request, field, value):
        """Negative, string and float fields are rejected."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({**slice_request, field: value})
            data = websocket.receive_json()

        assert data["type"] == "error"
        assert data["errors"][0]["field"] == field


@pytest.mark.timeout(10)
class TestFrames:
    """Tests for frame handling and ordering."""

    def test_binary_frame_ignored(self, client):
        """Binary frames get no reply; the next text frame is answered."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_bytes(b'{"type":"metadata_request"}')
            websocket.send_text('{"type":"zoom"}')
            assert websocket.receive_json()["message"] == "unknown message type"

    def test_replies_in_order(self, client, slice_request):
        """Pipelined requests are answered in the order sent."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text("not json")
            websocket.send_json(slice_request)
            websocket.send_json({"type": "metadata_request"})

            types = [websocket.receive_json()["type"] for _ in range(3)]

        assert types == ["error", "slice_response", "metadata_response"]


class TestApplication:
    """Tests for application wiring."""

    def test_no_http_docs(self, client):
        """Interactive docs and the OpenAPI schema are disabled."""
        assert client.get("/docs").status_code == 404
        assert client.get("/openapi.json").status_code == 404

    def test_dispatcher_override(self):
        """The dispatcher dependency can be replaced."""
        test_app = create_app()
        engine = SliceEngine(bounds=GridBounds(max_rows=3, max_cols=2))
        test_app.dependency_overrides[get_dispatcher] = lambda: MessageDispatcher(engine)

        with TestClient(test_app) as test_client:
            with test_client.websocket_connect("/ws") as websocket:
                websocket.send_json({"type": "metadata_request"})
                assert websocket.receive_json() == {
                    "type": "metadata_response",
                    "maxRows": 3,
                    "maxCols": 2,
                }
