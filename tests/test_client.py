import json
import sys
import unittest
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from minimax_tools.tools.client import MiniMaxClient
from minimax_tools.tools.errors import APIError, ErrorKind, NetworkError


def _client(handler, host: str = "https://api.example.test/") -> MiniMaxClient:
    return MiniMaxClient("sk-test", host, transport=httpx.MockTransport(handler))


class TestMiniMaxClient(unittest.IsolatedAsyncioTestCase):
    async def test_search_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "organic": [{"title": "T", "link": "https://t", "snippet": "S", "date": "2024-01-01"}],
                "related_searches": [{"query": "more"}],
                "base_resp": {"status_code": 0, "status_msg": "success"},
            })

        result = await _client(handler).search("python")
        request = seen[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), "https://api.example.test/v1/coding_plan/search")
        self.assertEqual(request.headers["authorization"], "Bearer sk-test")
        self.assertEqual(request.headers["mm-api-source"], "Minimax-MCP")
        self.assertEqual(json.loads(request.content), {"q": "python"})
        self.assertEqual(len(result.organic), 1)
        self.assertEqual(result.organic[0].date, "2024-01-01")
        self.assertEqual(result.related_searches, ["more"])

    async def test_vlm_request_shape(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "content": "a cat",
                "base_resp": {"status_code": 0, "status_msg": ""},
            })

        result = await _client(handler).understand_image("data:image/png;base64,AA", "what?")
        self.assertEqual(str(seen[0].url), "https://api.example.test/v1/coding_plan/vlm")
        self.assertEqual(
            json.loads(seen[0].content),
            {"image_url": "data:image/png;base64,AA", "prompt": "what?"},
        )
        self.assertEqual(result.content, "a cat")

    async def test_http_error_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="invalid api key")

        with self.assertRaises(NetworkError) as ctx:
            await _client(handler).search("x")
        self.assertEqual(ctx.exception.kind, ErrorKind.NETWORK)
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(str(ctx.exception), "MiniMax API error (401): invalid api key")

    async def test_status_envelope_error_is_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"base_resp": {"status_code": 1004, "status_msg": "auth failed"}})

        with self.assertRaises(APIError) as ctx:
            await _client(handler).search("x")
        self.assertEqual(ctx.exception.kind, ErrorKind.API)
        self.assertEqual(str(ctx.exception), "MiniMax API error (1004): auth failed")

    async def test_missing_envelope_is_success(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"organic": []})

        result = await _client(handler).search("x")
        self.assertEqual(result.organic, [])
        self.assertEqual(result.related_searches, [])

    async def test_malformed_envelope_is_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"base_resp": "oops"})

        with self.assertRaises(APIError) as ctx:
            await _client(handler).search("x")
        self.assertIn("base_resp", str(ctx.exception))

    async def test_non_list_results_read_as_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"organic": 5, "related_searches": "nope"})

        result = await _client(handler).search("x")
        self.assertEqual(result.organic, [])
        self.assertEqual(result.related_searches, [])

    async def test_invalid_json_is_api_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with self.assertRaises(APIError):
            await _client(handler).understand_image("data:,", "p")

    async def test_transport_failure_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with self.assertRaises(NetworkError) as ctx:
            await _client(handler).search("x")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectTimeout)


if __name__ == "__main__":
    unittest.main()
