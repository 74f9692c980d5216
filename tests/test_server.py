"""End-to-end tests for the probe server routes and middlewares."""

import unittest

import aiohttp
from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase

from server.app import create_app
from server.handlers import MAX_UPLOAD_BYTES, parse_size

MB = 1024 * 1024
ORIGIN = "http://frontend.test"


async def _boom(request):
    raise RuntimeError("boom")


async def _too_large(request):
    raise web.HTTPRequestEntityTooLarge(max_size=MAX_UPLOAD_BYTES, actual_size=MAX_UPLOAD_BYTES + 1)


class ProbeServerTestCase(AioHTTPTestCase):
    async def get_application(self):
        app = create_app(cors_origin=ORIGIN)
        app.router.add_get("/api/boom", _boom)
        app.router.add_get("/api/too-large", _too_large)
        return app


class TestHealthAndPing(ProbeServerTestCase):
    async def test_health(self):
        async with self.client.get("/api/health") as resp:
            self.assertEqual(resp.status, 200)
            data = await resp.json()
        self.assertEqual(data["status"], "ok")
        self.assertIn("timestamp", data)
        self.assertGreaterEqual(data["uptime"], 0)

    async def test_ping(self):
        async with self.client.get("/api/ping") as resp:
            self.assertEqual(resp.status, 200)
            data = await resp.json()
        self.assertEqual(data["message"], "pong")
        self.assertIsInstance(data["timestamp"], int)


class TestDownload(ProbeServerTestCase):
    async def test_default_five_megabytes(self):
        async with self.client.get("/api/download?size=5") as resp:
            self.assertEqual(resp.status, 200)
            body = await resp.read()
            self.assertEqual(len(body), 5 * MB)
            self.assertEqual(resp.headers["X-Data-Size"], "5MB")
            self.assertEqual(resp.headers["Content-Type"], "application/octet-stream")
            self.assertEqual(resp.headers["Content-Length"], str(5 * MB))
            self.assertIn("no-store", resp.headers["Cache-Control"])
            self.assertEqual(resp.headers["Pragma"], "no-cache")
            self.assertEqual(resp.headers["Expires"], "0")
            self.assertTrue(resp.headers["X-Generation-Time"].endswith("ms"))

    async def test_missing_size_uses_default(self):
        async with self.client.get("/api/download") as resp:
            body = await resp.read()
        self.assertEqual(len(body), 5 * MB)

    async def test_size_is_clamped(self):
        async with self.client.get("/api/download?size=80") as resp:
            self.assertEqual(resp.status, 200)
            body = await resp.read()
            self.assertEqual(resp.headers["X-Data-Size"], "50MB")
        self.assertEqual(len(body), 50 * MB)

    async def test_small_sizes_exact(self):
        for size in (1, 2, 3):
            async with self.client.get(f"/api/download?size={size}") as resp:
                body = await resp.read()
            self.assertEqual(len(body), size * MB)

    async def test_bytes_are_random(self):
        async with self.client.get("/api/download?size=1") as resp:
            first = await resp.read()
        async with self.client.get("/api/download?size=1") as resp:
            second = await resp.read()
        self.assertNotEqual(first, second)

    async def test_negative_size_fails_generation(self):
        async with self.client.get("/api/download?size=-2") as resp:
            self.assertEqual(resp.status, 500)
            data = await resp.json()
        self.assertEqual(data, {"error": "Failed to generate download data"})

    async def test_post_not_allowed(self):
        async with self.client.post("/api/download") as resp:
            self.assertEqual(resp.status, 405)
            data = await resp.json()
        self.assertEqual(data, {"error": "Method not allowed"})

    async def test_head_not_allowed(self):
        async with self.client.head("/api/download?size=50") as resp:
            self.assertEqual(resp.status, 405)


class TestParseSize(unittest.TestCase):
    def test_values(self):
        self.assertEqual(parse_size(None), 5)
        self.assertEqual(parse_size(""), 5)
        self.assertEqual(parse_size("abc"), 5)
        self.assertEqual(parse_size("0"), 5)
        self.assertEqual(parse_size("7"), 7)
        self.assertEqual(parse_size("7.9"), 7)
        self.assertEqual(parse_size("12MB"), 12)
        self.assertEqual(parse_size("-3"), -3)


class TestUploadRaw(ProbeServerTestCase):
    async def test_three_megabytes(self):
        payload = b"\x00" * (3 * MB)
        async with self.client.post(
            "/api/upload-raw",
            data=payload,
            headers={"Content-Type": "application/octet-stream"},
        ) as resp:
            self.assertEqual(resp.status, 200)
            data = await resp.json()
        self.assertIs(data["success"], True)
        self.assertEqual(data["received"], 3145728)
        self.assertEqual(data["receivedMB"], 3)
        self.assertIsInstance(data["timestamp"], int)

    async def test_received_mb_two_decimals(self):
        payload = b"x" * 1234567
        async with self.client.post("/api/upload-raw", data=payload) as resp:
            data = await resp.json()
        self.assertEqual(data["received"], 1234567)
        self.assertEqual(data["receivedMB"], round(1234567 / MB, 2))
        self.assertEqual(data["receivedMB"], 1.18)

    async def test_empty_body(self):
        async with self.client.post("/api/upload-raw") as resp:
            data = await resp.json()
        self.assertEqual(data["received"], 0)
        self.assertEqual(data["receivedMB"], 0)

    async def test_body_over_limit(self):
        async with self.client.post("/api/upload-raw", data=b"\x00" * (MAX_UPLOAD_BYTES + 1)) as resp:
            self.assertEqual(resp.status, 413)
            data = await resp.json()
        self.assertEqual(data, {"error": "Payload too large"})

    async def test_body_at_limit(self):
        async with self.client.post("/api/upload-raw", data=b"\x00" * MAX_UPLOAD_BYTES) as resp:
            self.assertEqual(resp.status, 200)
            data = await resp.json()
        self.assertEqual(data["receivedMB"], 50)

    async def test_get_not_allowed(self):
        async with self.client.get("/api/upload-raw") as resp:
            self.assertEqual(resp.status, 405)
            data = await resp.json()
        self.assertEqual(data, {"error": "Method not allowed"})


class TestUploadMultipart(ProbeServerTestCase):
    async def test_data_field_counted(self):
        form = aiohttp.FormData()
        form.add_field("note", "ignored")
        form.add_field(
            "data",
            b"\xff" * (2 * MB),
            filename="blob",
            content_type="application/octet-stream",
        )
        async with self.client.post("/api/upload", data=form) as resp:
            self.assertEqual(resp.status, 200)
            data = await resp.json()
        self.assertEqual(data["received"], 2 * MB)
        self.assertEqual(data["receivedMB"], 2)

    async def test_missing_data_field(self):
        form = aiohttp.FormData()
        form.add_field("other", b"abc", filename="x.bin")
        async with self.client.post("/api/upload", data=form) as resp:
            data = await resp.json()
        self.assertTrue(data["success"])
        self.assertEqual(data["received"], 0)

    async def test_data_field_over_limit(self):
        form = aiohttp.FormData()
        form.add_field(
            "data",
            b"\x00" * (MAX_UPLOAD_BYTES + 1),
            filename="blob",
            content_type="application/octet-stream",
        )
        async with self.client.post("/api/upload", data=form) as resp:
            self.assertEqual(resp.status, 413)
            data = await resp.json()
        self.assertEqual(data, {"error": "Payload too large"})

    async def test_not_multipart(self):
        async with self.client.post("/api/upload", data=b"raw") as resp:
            data = await resp.json()
        self.assertEqual(data["received"], 0)


class TestErrorHandling(ProbeServerTestCase):
    async def test_unknown_route(self):
        async with self.client.get("/api/nope") as resp:
            self.assertEqual(resp.status, 404)
            data = await resp.json()
        self.assertEqual(data, {"error": "Endpoint not found"})

    async def test_unhandled_exception(self):
        async with self.client.get("/api/boom") as resp:
            self.assertEqual(resp.status, 500)
            data = await resp.json()
        self.assertEqual(data, {"error": "Internal server error", "message": "boom"})

    async def test_server_survives_errors(self):
        async with self.client.get("/api/boom") as resp:
            self.assertEqual(resp.status, 500)
        async with self.client.get("/api/ping") as resp:
            self.assertEqual(resp.status, 200)

    async def test_payload_too_large(self):
        async with self.client.get("/api/too-large") as resp:
            self.assertEqual(resp.status, 413)
            data = await resp.json()
        self.assertEqual(data, {"error": "Payload too large"})


class TestCors(ProbeServerTestCase):
    async def test_origin_header(self):
        async with self.client.get("/api/ping", headers={"Origin": ORIGIN}) as resp:
            self.assertEqual(resp.headers["Access-Control-Allow-Origin"], ORIGIN)
            self.assertEqual(resp.headers["Access-Control-Allow-Credentials"], "true")

    async def test_origin_header_on_errors(self):
        async with self.client.get("/api/nope") as resp:
            self.assertEqual(resp.headers["Access-Control-Allow-Origin"], ORIGIN)

    async def test_preflight(self):
        headers = {
            "Origin": ORIGIN,
            "Access-Control-Request-Method": "POST",
        }
        async with self.client.options("/api/upload-raw", headers=headers) as resp:
            self.assertEqual(resp.status, 204)
            self.assertIn("POST", resp.headers["Access-Control-Allow-Methods"])
            self.assertEqual(resp.headers["Access-Control-Allow-Origin"], ORIGIN)


if __name__ == "__main__":
    unittest.main()
